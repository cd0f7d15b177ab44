"""Assertions for tests that exercise validators.

Each helper raises ``AssertionError`` with a readable report of the errors
involved, so failures are easy to diagnose in pytest output.

Example:
    ```python
    from dataknobs_validation.testing import assert_has_one_error

    def test_rejects_blank_name():
        error = assert_has_one_error(validator.validate(User(name="", age=3)))
        assert error.field_path == ("name",)
    ```
"""

from __future__ import annotations

from typing import Any

from .errors import ValidationError
from .result import Invalid, ValidationResult


def _report(errors: tuple[ValidationError, ...]) -> str:
    return "\n".join(error.pretty_print(2) for error in errors)


def assert_valid(result: ValidationResult[Any]) -> Any:
    """Assert ``result`` is ``Valid`` and return its value."""
    if isinstance(result, Invalid):
        raise AssertionError(f"Expected Valid, got Invalid with {len(result.errors)} error(s):\n{_report(result.errors)}")
    return result.value  # type: ignore[attr-defined]


def assert_invalid(result: ValidationResult[Any]) -> tuple[ValidationError, ...]:
    """Assert ``result`` is ``Invalid`` and return its errors."""
    if not isinstance(result, Invalid):
        raise AssertionError(f"Expected Invalid, got Valid({result.value!r})")  # type: ignore[attr-defined]
    return result.errors


def assert_has_n_errors(result: ValidationResult[Any], n: int) -> tuple[ValidationError, ...]:
    errors = assert_invalid(result)
    if len(errors) != n:
        raise AssertionError(f"Expected {n} error(s), got {len(errors)}:\n{_report(errors)}")
    return errors


def assert_has_one_error(result: ValidationResult[Any]) -> ValidationError:
    return assert_has_n_errors(result, 1)[0]
