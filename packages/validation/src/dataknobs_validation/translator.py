"""Translation of validation errors into display messages.

A ``Translator`` turns an error into the string shown to an end user,
typically keyed by the error's ``code``. Applied through
``ValidationResult.translate_errors``, which keeps every other attribute of
each error.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

from .errors import ValidationError

logger = logging.getLogger(__name__)


class Translator(ABC):
    @abstractmethod
    def translate(self, error: ValidationError) -> str:
        """Return the display message for ``error``."""


class CodeTranslator(Translator):
    """Looks up a ``str.format`` template by error code.

    The template receives ``message``, ``code``, ``severity``, ``expected``,
    ``actual`` and ``path`` (the field path joined with dots). Errors without
    a code, or with an unknown one, use ``fallback`` if given and keep their
    message otherwise.

    Example:
        ```python
        translator = CodeTranslator({
            "validation.security.collection_too_large": "Too many items (max {expected})",
        })
        result.translate_errors(translator)
        ```
    """

    def __init__(self, messages: Mapping[str, str], fallback: str | None = None):
        self.messages = dict(messages)
        self.fallback = fallback

    def translate(self, error: ValidationError) -> str:
        template = self.messages.get(error.code) if error.code is not None else None
        if template is None:
            template = self.fallback
        if template is None:
            return error.message
        try:
            return template.format(
                message=error.message,
                code=error.code,
                severity=error.severity,
                expected=error.expected,
                actual=error.actual,
                path=".".join(error.field_path),
            )
        except (KeyError, IndexError) as e:
            logger.warning(f"Bad translation template for {error.code!r}: {e}")
            return error.message
