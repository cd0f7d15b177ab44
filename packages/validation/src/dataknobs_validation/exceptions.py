"""Exception hierarchy for the validation engine.

Runtime validation failures are never raised: they are returned as
``Invalid`` values. The exceptions here cover the few places where raising
is the right interop choice:

- ``ValidationException`` surfaces the first error of an ``Invalid`` result
  for exception-based callers (``get_or_raise`` / ``to_try``)
- ``DerivationError`` is the build-time failure raised when a record
  validator cannot be assembled because field validators are missing
- ``NotFoundError`` and ``ConfigurationError`` cover registry lookups and
  configuration loading

Example:
    ```python
    from dataknobs_validation import ValidationEngineError, derive

    try:
        validator = derive(MyRecord)
    except ValidationEngineError as e:
        logger.error(f"Error: {e}")
        if e.context:
            logger.error(f"Context: {e.context}")
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .errors import ValidationError


class ValidationEngineError(Exception):
    """Base exception for the validation engine.

    Supports optional context data for rich error information.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (takes precedence when both are given)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ValidationException(ValidationEngineError):
    """Wraps a single ``ValidationError`` for exception-based error handling.

    Raised by ``ValidationResult.get_or_raise`` and carried by the ``Failure``
    returned from ``ValidationResult.to_try``. Only the first error of an
    ``Invalid`` result survives this conversion.

    Example:
        ```python
        try:
            user = validator.validate(payload).get_or_raise()
        except ValidationException as e:
            print(e.error.pretty_print())
        ```
    """

    def __init__(self, error: ValidationError):
        super().__init__(
            error.show(),
            context={"field_path": list(error.field_path), "code": error.code},
        )
        self.error = error


@dataclass(frozen=True)
class MissingValidator:
    """A record field for which no validator could be resolved."""

    field_name: str
    type_name: str
    suggestion: str


class DerivationError(ValidationEngineError):
    """Raised when a record validator cannot be derived.

    Every field without a resolvable validator is reported at once, each with
    its name, type and a suggested remedy.
    """

    def __init__(self, record_name: str, missing: Sequence[MissingValidator], async_mode: bool = False):
        self.record_name = record_name
        self.missing = list(missing)
        validator_kind = "AsyncValidator" if async_mode else "Validator"
        header = (
            f"Cannot derive {validator_kind} for {record_name}: "
            f"missing validators for {len(self.missing)} field(s)."
        )
        lines = [
            f"  {i}. Field '{m.field_name}' of type {m.type_name}\n     Add: {m.suggestion}"
            for i, m in enumerate(self.missing, start=1)
        ]
        footer = (
            "Hint: built-in validators exist for scalars, Optional, list, tuple, set, "
            "frozenset and dict. For other types register a validator or derive one."
        )
        super().__init__(
            header + "\n\n" + "\n\n".join(lines) + "\n\n" + footer,
            context={
                "record": record_name,
                "missing_fields": [m.field_name for m in self.missing],
            },
        )


class NotFoundError(ValidationEngineError):
    """Raised when no validator is registered or resolvable for a type."""

    pass


class OperationError(ValidationEngineError):
    """Raised when a registry operation cannot be performed, such as a duplicate registration."""

    pass


class ConfigurationError(ValidationEngineError):
    """Raised when a validation configuration is invalid or cannot be loaded.

    Example:
        ```python
        raise ConfigurationError(
            "max_collection_size must be a non-negative integer",
            context={"key": "max_collection_size", "value": -1}
        )
        ```
    """

    pass


__all__ = [
    "ValidationEngineError",
    "ValidationException",
    "MissingValidator",
    "DerivationError",
    "NotFoundError",
    "OperationError",
    "ConfigurationError",
]
