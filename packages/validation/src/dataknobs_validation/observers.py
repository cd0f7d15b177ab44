"""Observers notified of validation results.

Observation is opt-in: nothing is reported unless a caller passes a result
through ``ValidationResult.observe``. Observers must not change the result.

Example:
    ```python
    observer = LoggingObserver(logging.getLogger("myapp.validation"))
    user = validator.validate(payload).observe(observer)
    ```
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .result import ValidationResult

logger = logging.getLogger(__name__)


class ValidationObserver(ABC):
    """Callback invoked with a completed validation result."""

    @abstractmethod
    def on_result(self, result: ValidationResult[Any]) -> None:
        """Called once per observed result."""


class NoOpObserver(ValidationObserver):
    def on_result(self, result: ValidationResult[Any]) -> None:
        pass


class CallbackObserver(ValidationObserver):
    """Wraps a plain function as an observer."""

    def __init__(self, callback: Callable[[ValidationResult[Any]], None]):
        self.callback = callback

    def on_result(self, result: ValidationResult[Any]) -> None:
        self.callback(result)


class LoggingObserver(ValidationObserver):
    """Logs one summary line per result.

    Valid results are logged at DEBUG; invalid ones at ``level`` with the
    error count and the first error rendered on one line.

    Args:
        log: Logger to write to (this module's logger if None)
        level: Level used for invalid results
    """

    def __init__(self, log: logging.Logger | None = None, level: int = logging.WARNING):
        self.log = log or logger
        self.level = level

    def on_result(self, result: ValidationResult[Any]) -> None:
        if result.is_valid:
            self.log.debug("Validation succeeded")
            return
        errors = result.errors
        self.log.log(self.level, f"Validation failed with {len(errors)} error(s); first: {errors[0].show()}")


NO_OP_OBSERVER = NoOpObserver()
