"""Opt-in constrained validation functions.

Built-in scalar validators accept everything. These helpers provide the
common constraints when a field needs them, either called directly inside a
custom validator or through the ready-made instances at the bottom of the
module.

Every ``error_message`` argument accepts a fixed string or a callable that
receives the offending value and returns the message.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Collection
from numbers import Real
from re import Pattern
from typing import Any, Union

from .errors import ValidationError
from .result import Invalid, Valid, ValidationResult
from .validator import FunctionValidator, Validator

INVALID_PATTERN = "validation.regex.invalid_pattern"

Message = Union[str, Callable[[Any], str], None]


def _message(message: Message, value: Any, default: str) -> str:
    if message is None:
        return default
    if callable(message):
        return message(value)
    return message


def _fail(message: str, expected: str | None, actual: Any, code: str | None = None) -> ValidationResult[Any]:
    return Invalid((ValidationError(message, code=code, expected=expected, actual=actual),))


def non_empty(value: str | None, error_message: Message = None) -> ValidationResult[str]:
    """String must contain something other than whitespace."""
    if value is not None and value.strip():
        return Valid(value)
    actual = "None" if value is None else value
    return _fail(_message(error_message, value, "String must not be empty"), "non-empty string", actual)


def non_negative_int(value: int, error_message: Message = None) -> ValidationResult[int]:
    if value >= 0:
        return Valid(value)
    return _fail(_message(error_message, value, "Int must be non-negative"), ">= 0", str(value))


def finite_float(value: float, error_message: Message = None) -> ValidationResult[float]:
    """Reject NaN and infinities."""
    if math.isfinite(value):
        return Valid(value)
    return _fail(_message(error_message, value, "Float must be finite"), "finite value", str(value))


def min_length(value: str | None, minimum: int, error_message: Message = None) -> ValidationResult[str]:
    if value is None:
        default = f"Actual length (None) is less than minimum required length of {minimum}"
        return _fail(_message(error_message, value, default), f"length >= {minimum}", "None")
    if len(value) >= minimum:
        return Valid(value)
    default = f"Actual length ({len(value)}) is less than minimum required length of {minimum}"
    return _fail(_message(error_message, value, default), f"length >= {minimum}", str(len(value)))


def max_length(value: str | None, maximum: int, error_message: Message = None) -> ValidationResult[str]:
    if value is None:
        return _fail(
            "Input must be a non-None string (actual: None)",
            f"non-None string with length <= {maximum}",
            "None",
        )
    if len(value) <= maximum:
        return Valid(value)
    default = f"Length ({len(value)}) exceeds maximum allowed length of {maximum}"
    return _fail(_message(error_message, value, default), f"length <= {maximum}", str(len(value)))


def regex_match(value: str | None, pattern: str | Pattern[str], error_message: Message = None) -> ValidationResult[str]:
    """The whole string must match ``pattern``.

    A textual pattern that does not compile yields an ``Invalid`` tagged
    ``validation.regex.invalid_pattern`` instead of raising.
    """
    if isinstance(pattern, str):
        try:
            regex = re.compile(pattern)
        except re.error as e:
            return _fail(f"Invalid regex pattern: {e}", None, pattern, code=INVALID_PATTERN)
    else:
        regex = pattern

    default = f"Value '{value}' does not match pattern '{regex.pattern}'"
    if value is None:
        return _fail(_message(error_message, value, default), regex.pattern, "None")
    if regex.fullmatch(value):
        return Valid(value)
    return _fail(_message(error_message, value, default), regex.pattern, value)


def in_range(value: Real, minimum: Real, maximum: Real, error_message: Message = None) -> ValidationResult[Real]:
    """Inclusive range check."""
    if minimum <= value <= maximum:
        return Valid(value)
    default = f"Must be in range [{minimum}, {maximum}]"
    return _fail(_message(error_message, value, default), f"[{minimum}, {maximum}]", str(value))


def one_of(value: Any, allowed: Collection[Any], error_message: Message = None) -> ValidationResult[Any]:
    allowed_str = ", ".join(repr(v) for v in allowed)
    if value in allowed:
        return Valid(value)
    return _fail(_message(error_message, value, f"Must be one of {allowed_str}"), allowed_str, repr(value))


def required(value: Any, error_message: str = "Required value must not be empty/None") -> ValidationResult[Any]:
    if value is not None:
        return Valid(value)
    return _fail(error_message, "a value (not None)", "None")


def optional(value: Any, validator: Validator[Any]) -> ValidationResult[Any]:
    """``None`` is valid; anything else goes through ``validator``."""
    if value is None:
        return Valid(None)
    return validator.validate(value)


def option_validator(
    value: Any,
    validation_fn: Callable[[Any], ValidationResult[Any]],
    error_on_empty: bool = False,
    empty_error_message: str = "Value must not be empty/None",
) -> ValidationResult[Any]:
    """Validate a possibly-missing value with ``validation_fn``.

    Args:
        value: Value to validate, possibly ``None``
        validation_fn: Validation applied to a present value
        error_on_empty: If True, ``None`` is an error instead of ``Valid(None)``
        empty_error_message: Message used when ``None`` is an error

    Returns:
        ValidationResult for the value
    """
    if value is not None:
        return validation_fn(value)
    if error_on_empty:
        return Invalid((ValidationError(empty_error_message),))
    return Valid(None)


NON_EMPTY_STRING: Validator[str] = FunctionValidator(non_empty)
NON_NEGATIVE_INT: Validator[int] = FunctionValidator(non_negative_int)
FINITE_FLOAT: Validator[float] = FunctionValidator(finite_float)
