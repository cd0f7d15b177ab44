"""Structured validation errors.

A ``ValidationError`` is an immutable value describing one failure: a
message, the path of the field it happened in, optional machine-readable
metadata and any nested child failures. The concrete representation is a
module-private frozen record; callers only see the read-only properties and
the builder methods on ``ValidationError``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class _ErrorData:
    message: str
    field_path: tuple[str, ...] = ()
    children: tuple[ValidationError, ...] = ()
    code: str | None = None
    severity: str | None = None
    expected: str | None = None
    actual: str | None = None


class ValidationError:
    """A structured validation failure.

    Only ``message`` is required. The field path is reported root-to-leaf;
    prepending a path segment (``with_field`` / ``annotate_field``) is the only
    way to change it and always returns a new error.

    Example:
        ```python
        error = ValidationError("Value must be positive", expected="> 0", actual="-5")
        error.with_field("age").show()
        # 'age: Value must be positive (expected: > 0) (got: -5)'
        ```
    """

    __slots__ = ("_data",)

    def __init__(
        self,
        message: str,
        field_path: Iterable[str] = (),
        children: Iterable[ValidationError] = (),
        code: str | None = None,
        severity: str | None = None,
        expected: str | None = None,
        actual: str | None = None,
    ):
        if message is None:
            raise ValueError("ValidationError requires a message")
        self._data = _ErrorData(
            message=message,
            field_path=tuple(field_path),
            children=tuple(children),
            code=code,
            severity=severity,
            expected=expected,
            actual=actual,
        )

    @classmethod
    def _from_data(cls, data: _ErrorData) -> ValidationError:
        error = cls.__new__(cls)
        error._data = data
        return error

    @property
    def message(self) -> str:
        return self._data.message

    @property
    def field_path(self) -> tuple[str, ...]:
        return self._data.field_path

    @property
    def children(self) -> tuple[ValidationError, ...]:
        return self._data.children

    @property
    def code(self) -> str | None:
        return self._data.code

    @property
    def severity(self) -> str | None:
        return self._data.severity

    @property
    def expected(self) -> str | None:
        return self._data.expected

    @property
    def actual(self) -> str | None:
        return self._data.actual

    def with_field(self, field_name: str) -> ValidationError:
        """Return a copy with ``field_name`` prepended to the field path."""
        return self._from_data(replace(self._data, field_path=(field_name, *self._data.field_path)))

    def with_message(self, message: str) -> ValidationError:
        """Return a copy with a different message and everything else kept."""
        return self._from_data(replace(self._data, message=message))

    def nest(self, children: Iterable[ValidationError]) -> ValidationError:
        """Return a copy with ``children`` appended to the nested errors."""
        return self._from_data(replace(self._data, children=self._data.children + tuple(children)))

    def annotate_field(self, field_name: str, field_type_name: str) -> ValidationError:
        """Attach field context to this error.

        The field name is prepended to the path and the message is rewrapped to
        mention the field and the runtime type name of its value.

        Args:
            field_name: Name of the field the error occurred in
            field_type_name: Runtime type name of the field's value

        Returns:
            New ValidationError with the field context added
        """
        return self._from_data(
            replace(
                self._data,
                message=f"Invalid field: {field_name}, field type: {field_type_name}: {self._data.message}",
                field_path=(field_name, *self._data.field_path),
            )
        )

    @classmethod
    def nest_field(cls, field_name: str, errors: Iterable[ValidationError]) -> ValidationError:
        """Create a field-level error wrapping the errors found inside that field."""
        return cls(f"Invalid field: {field_name}", field_path=(field_name,), children=errors)

    @classmethod
    def union_error(cls, value: Any, *type_names: str) -> ValidationError:
        """Create an error for a value that matches none of the given types."""
        expected = " | ".join(type_names)
        return cls(
            f"Value is not one of the expected types: {expected}",
            expected=expected,
            actual=repr(value),
        )

    def _format_extras(self) -> str:
        d = self._data
        parts = []
        if d.code is not None:
            parts.append(f"[{d.code}]")
        if d.severity is not None:
            parts.append(f"<{d.severity}>")
        if d.expected is not None:
            parts.append(f"(expected: {d.expected})")
        if d.actual is not None:
            parts.append(f"(got: {d.actual})")
        return " ".join(parts)

    def _format_path(self) -> str:
        if not self._data.field_path:
            return ""
        return ".".join(self._data.field_path) + ": "

    def show(self) -> str:
        """Compact rendering: one line, plus one indented line per child."""
        base = f"{self._format_path()}{self._data.message} {self._format_extras()}".strip()
        if not self._data.children:
            return base
        return base + "".join(f"\n  {child.show()}" for child in self._data.children)

    def pretty_print(self, indent: int = 0) -> str:
        """Multi-line rendering with children indented two spaces per level.

        Args:
            indent: Number of spaces to indent the first line

        Returns:
            Formatted error text
        """
        pad = " " * indent
        line = f"{pad}{self._format_path()}{self._data.message} {self._format_extras()}".rstrip()
        if not self._data.children:
            return line
        child_lines = "\n".join(child.pretty_print(indent + 2) for child in self._data.children)
        return f"{line}\n{child_lines}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary (children converted recursively)."""
        d = self._data
        return {
            "message": d.message,
            "field_path": list(d.field_path),
            "children": [child.to_dict() for child in d.children],
            "code": d.code,
            "severity": d.severity,
            "expected": d.expected,
            "actual": d.actual,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationError):
            return NotImplemented
        return self._data == other._data

    def __hash__(self) -> int:
        return hash(self._data)

    def __repr__(self) -> str:
        return f"ValidationError({self.show()!r})"

    def __str__(self) -> str:
        return self.show()
