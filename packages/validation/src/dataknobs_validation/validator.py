"""Synchronous validators and the built-in instances.

A ``Validator`` is a total function from a value to a ``ValidationResult``.
Scalars ship as pass-through validators; constrained checks such as
non-empty strings or non-negative integers are opt-in (see ``helpers``).
Collection validators validate every element, keep every error and honor
the ``ValidationConfig`` size limit before touching any element.
"""

from __future__ import annotations

import collections.abc
from abc import ABC, abstractmethod
from collections.abc import Callable, Collection, Mapping, Sequence
from typing import Any, Generic, TypeVar

from .config import ValidationConfig, resolve_config
from .effect import SYNC
from .errors import ValidationError
from .logic import validate_collection, validate_map
from .result import Invalid, Valid, ValidationResult, type_name, validate_union

A = TypeVar("A")


class Validator(ABC, Generic[A]):
    """Validates one value of a type, synchronously.

    Validators are expected to be pure. Subclasses implement ``validate``;
    calling the validator directly is the same as calling ``validate``.
    """

    @abstractmethod
    def validate(self, value: A) -> ValidationResult[A]:
        """Validate ``value``.

        Args:
            value: Value to validate

        Returns:
            ``Valid`` with the (possibly normalized) value, or ``Invalid``
        """

    def __call__(self, value: A) -> ValidationResult[A]:
        return self.validate(value)

    def __and__(self, other: Validator[A]) -> IntersectionValidator[A]:
        """Both validators must accept the value."""
        return IntersectionValidator(self, other)

    def and_then(self, other: Validator[A]) -> Validator[A]:
        """Run ``other`` on this validator's output, only if this one succeeds."""
        return FunctionValidator(lambda value: self.validate(value).flat_map(other.validate))

    def map_errors(self, f: Callable[[ValidationError], ValidationError]) -> Validator[A]:
        """Rewrite every error this validator produces."""

        def _validate(value: A) -> ValidationResult[A]:
            result = self.validate(value)
            if isinstance(result, Invalid):
                return Invalid(tuple(f(error) for error in result.errors))
            return result

        return FunctionValidator(_validate)

    @staticmethod
    def of(
        fn: Callable[[Any], ValidationResult[Any] | bool],
        error_message: str = "Custom validation failed",
        code: str | None = None,
    ) -> FunctionValidator[Any]:
        """Wrap a callable returning a ``ValidationResult`` or a bool."""
        return FunctionValidator(fn, error_message=error_message, code=code)

    @staticmethod
    def union(validator_a: Validator[Any], type_a: Any, validator_b: Validator[Any], type_b: Any) -> UnionValidator:
        """Validator for ``type_a | type_b``; see ``UnionValidator``."""
        return UnionValidator(validator_a, type_a, validator_b, type_b)


class FunctionValidator(Validator[A]):
    """Validator backed by a plain callable.

    The callable may return a ``ValidationResult`` or a bool. ``False`` is
    turned into an ``Invalid`` carrying ``error_message`` and ``code``.
    """

    def __init__(
        self,
        fn: Callable[[A], ValidationResult[A] | bool],
        error_message: str = "Custom validation failed",
        code: str | None = None,
    ):
        self.fn = fn
        self.error_message = error_message
        self.code = code

    def validate(self, value: A) -> ValidationResult[A]:
        result = self.fn(value)
        if isinstance(result, ValidationResult):
            return result
        if result:
            return Valid(value)
        return Invalid((ValidationError(self.error_message, code=self.code, actual=repr(value)),))

    def __repr__(self) -> str:
        return f"FunctionValidator({getattr(self.fn, '__name__', self.fn)!r})"


def as_validator(
    fn: Callable[[Any], ValidationResult[Any] | bool] | None = None,
    *,
    error_message: str = "Custom validation failed",
    code: str | None = None,
) -> Any:
    """Decorator turning a function into a ``FunctionValidator``.

    Example:
        ```python
        @as_validator(error_message="Username is reserved", code="user.reserved")
        def username(value: str) -> bool:
            return value not in {"admin", "root"}
        ```
    """
    if fn is not None:
        return FunctionValidator(fn, error_message=error_message, code=code)

    def decorate(f: Callable[[Any], ValidationResult[Any] | bool]) -> FunctionValidator[Any]:
        return FunctionValidator(f, error_message=error_message, code=code)

    return decorate


class PassThroughValidator(Validator[A]):
    """Accepts every value unchanged. Used for the built-in scalar types."""

    def __init__(self, name: str = "any"):
        self.name = name

    def validate(self, value: A) -> ValidationResult[A]:
        return Valid(value)

    def __repr__(self) -> str:
        return f"PassThroughValidator({self.name!r})"


class OptionalValidator(Validator[Any]):
    """``None`` is valid; anything else is delegated to ``inner``."""

    def __init__(self, inner: Validator[Any]):
        self.inner = inner

    def validate(self, value: Any) -> ValidationResult[Any]:
        if value is None:
            return Valid(None)
        return self.inner.validate(value)


class CollectionValidator(Validator[Any]):
    """Validates every element of a sized collection with ``element``.

    Subclasses set ``label`` and ``container`` and implement ``build``.
    Values that are not a ``container`` are rejected without being iterated.
    """

    label = "Collection"
    container: Any = collections.abc.Collection

    def __init__(self, element: Validator[Any], config: ValidationConfig | None = None):
        self.element = element
        self.config = config

    def build(self, original: Any, values: list[Any]) -> Any:
        raise NotImplementedError

    def validate(self, value: Collection[Any]) -> ValidationResult[Any]:
        return validate_collection(
            SYNC,
            value,
            lambda values: self.build(value, values),
            self.label,
            self.element.validate,
            resolve_config(self.config),
            self.container,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.element!r})"


class ListValidator(CollectionValidator):
    label = "List"
    container = list

    def build(self, original: Any, values: list[Any]) -> list[Any]:
        return values


class TupleValidator(CollectionValidator):
    """Homogeneous tuples, ``tuple[A, ...]``."""

    label = "Tuple"
    container = tuple

    def build(self, original: Any, values: list[Any]) -> tuple[Any, ...]:
        return tuple(values)


class SetValidator(CollectionValidator):
    label = "Set"
    container = collections.abc.Set

    def build(self, original: Any, values: list[Any]) -> set[Any] | frozenset[Any]:
        if isinstance(original, frozenset):
            return frozenset(values)
        return set(values)


class FrozenSetValidator(CollectionValidator):
    label = "FrozenSet"
    container = frozenset

    def build(self, original: Any, values: list[Any]) -> frozenset[Any]:
        return frozenset(values)


class SequenceValidator(CollectionValidator):
    """Any sequence; tuples come back as tuples, everything else as a list."""

    label = "Sequence"
    container = collections.abc.Sequence

    def build(self, original: Sequence[Any], values: list[Any]) -> Sequence[Any]:
        if isinstance(original, tuple):
            return tuple(values)
        return values


class MapValidator(Validator[Any]):
    """Validates every key and value of a mapping independently."""

    def __init__(self, key: Validator[Any], value: Validator[Any], config: ValidationConfig | None = None):
        self.key = key
        self.value = value
        self.config = config

    def validate(self, value: Mapping[Any, Any]) -> ValidationResult[Any]:
        return validate_map(
            SYNC,
            value,
            dict,
            self.key.validate,
            self.value.validate,
            resolve_config(self.config),
        )

    def __repr__(self) -> str:
        return f"MapValidator({self.key!r}, {self.value!r})"


class IntersectionValidator(Validator[A]):
    """Valid only if both validators accept the same value.

    Errors from both sides are accumulated with ``zip``. The original value
    is returned on success.
    """

    def __init__(self, first: Validator[A], second: Validator[A]):
        self.first = first
        self.second = second

    def validate(self, value: A) -> ValidationResult[A]:
        return self.first.validate(value).zip(self.second.validate(value)).map(lambda _: value)

    def __repr__(self) -> str:
        return f"IntersectionValidator({self.first!r}, {self.second!r})"


class UnionValidator(Validator[Any]):
    """Validator for ``A | B``.

    Each branch is guarded by an ``isinstance`` check against its type tag.
    The first branch that validates wins, preferring ``A``; if neither does,
    one error wraps both branches' errors as children.
    """

    def __init__(self, validator_a: Validator[Any], type_a: Any, validator_b: Validator[Any], type_b: Any):
        self.validator_a = validator_a
        self.type_a = type_a
        self.validator_b = validator_b
        self.type_b = type_b

    def validate(self, value: Any) -> ValidationResult[Any]:
        return validate_union(value, self.validator_a, self.type_a, self.validator_b, self.type_b)

    def __repr__(self) -> str:
        return f"UnionValidator({type_name(self.type_a)} | {type_name(self.type_b)})"
