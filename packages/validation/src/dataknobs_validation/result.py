"""Validation result types and their combinator algebra.

A validation either succeeds with a value (``Valid``) or fails with a
non-empty tuple of ``ValidationError`` (``Invalid``). Accumulation is the
default posture: ``zip``/``map_n``/``or_`` keep every error from both sides.
The ``*_fail_fast`` variants and ``flat_map`` stop at the first failure for
checks that are expensive or depend on an earlier result.
"""

from __future__ import annotations

import types
import typing
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar, Union

from .accumulator import DEFAULT_ACCUMULATOR, ErrorAccumulator
from .errors import ValidationError
from .exceptions import ValidationException

if TYPE_CHECKING:
    from .observers import ValidationObserver
    from .translator import Translator
    from .validator import Validator

A = TypeVar("A")
B = TypeVar("B")
R = TypeVar("R")

EMPTY_ERRORS_CODE = "validation.error.from_either.empty"


class ValidationResult(Generic[A]):
    """Base class of ``Valid`` and ``Invalid``.

    All combinators live here and dispatch on the concrete variant, so code
    can hold a ``ValidationResult`` without caring which one it is.
    """

    __slots__ = ()

    @property
    def is_valid(self) -> bool:
        return isinstance(self, Valid)

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.is_valid

    def map(self, f: Callable[[A], B]) -> ValidationResult[B]:
        """Transform the value of a ``Valid``; pass ``Invalid`` through."""
        if isinstance(self, Valid):
            return Valid(f(self.value))
        return self  # type: ignore[return-value]

    def flat_map(self, f: Callable[[A], ValidationResult[B]]) -> ValidationResult[B]:
        """Sequence a dependent validation (fail-fast).

        ``f`` is only invoked on ``Valid``; an ``Invalid`` short-circuits.
        """
        if isinstance(self, Valid):
            return f(self.value)
        return self  # type: ignore[return-value]

    def zip(
        self,
        other: ValidationResult[B],
        accumulator: ErrorAccumulator[tuple] = DEFAULT_ACCUMULATOR,
    ) -> ValidationResult[tuple[A, B]]:
        """Pair two results, accumulating errors.

        If both are ``Invalid`` the errors are combined with ``accumulator``,
        left operand first.
        """
        if isinstance(self, Valid) and isinstance(other, Valid):
            return Valid((self.value, other.value))
        if isinstance(self, Invalid) and isinstance(other, Invalid):
            return Invalid(accumulator.combine(self.errors, other.errors))
        if isinstance(self, Invalid):
            return self
        return other  # type: ignore[return-value]

    def map_n(
        self,
        other: ValidationResult[B],
        f: Callable[[A, B], R],
        accumulator: ErrorAccumulator[tuple] = DEFAULT_ACCUMULATOR,
    ) -> ValidationResult[R]:
        """Combine two results with ``f``, accumulating errors like ``zip``."""
        return self.zip(other, accumulator).map(lambda pair: f(pair[0], pair[1]))

    def zip_fail_fast(self, other: ValidationResult[B] | Callable[[], ValidationResult[B]]) -> ValidationResult[tuple[A, B]]:
        """Pair two results, returning the first ``Invalid`` encountered.

        ``other`` may be a zero-argument callable; it is then only evaluated
        when this result is ``Valid``.
        """
        if isinstance(self, Invalid):
            return self
        resolved = other() if callable(other) else other
        if isinstance(resolved, Invalid):
            return resolved
        return Valid((self.value, resolved.value))  # type: ignore[attr-defined]

    def map_n_fail_fast(
        self,
        other: ValidationResult[B] | Callable[[], ValidationResult[B]],
        f: Callable[[A, B], R],
    ) -> ValidationResult[R]:
        """Combine two results with ``f``, stopping at the first ``Invalid``."""
        return self.zip_fail_fast(other).map(lambda pair: f(pair[0], pair[1]))

    def or_(
        self,
        other: ValidationResult[A],
        accumulator: ErrorAccumulator[tuple] = DEFAULT_ACCUMULATOR,
    ) -> ValidationResult[A]:
        """Return the first ``Valid`` of the two; combine errors if both fail."""
        if isinstance(self, Valid):
            return self
        if isinstance(other, Valid):
            return other
        return Invalid(accumulator.combine(self.errors, other.errors))  # type: ignore[attr-defined]

    def or_else(
        self,
        other: Callable[[], ValidationResult[A]],
        accumulator: ErrorAccumulator[tuple] = DEFAULT_ACCUMULATOR,
    ) -> ValidationResult[A]:
        """Lazy ``or_``: ``other`` is only called when this result is ``Invalid``."""
        if isinstance(self, Valid):
            return self
        fallback = other()
        if isinstance(fallback, Valid):
            return fallback
        return Invalid(accumulator.combine(self.errors, fallback.errors))  # type: ignore[attr-defined]

    def recover(self, default: A) -> ValidationResult[A]:
        """Replace any ``Invalid`` with ``Valid(default)``."""
        if isinstance(self, Valid):
            return self
        return Valid(default)

    def fold(self, if_valid: Callable[[A], R], if_invalid: Callable[[tuple[ValidationError, ...]], R]) -> R:
        """Collapse the result into a single value."""
        if isinstance(self, Valid):
            return if_valid(self.value)
        return if_invalid(self.errors)  # type: ignore[attr-defined]

    def to_either(self) -> Left | Right:
        """Convert to ``Right(value)`` or ``Left(errors)``."""
        return self.fold(Right, Left)

    def to_option(self) -> A | None:
        """Return the value, or ``None`` for ``Invalid`` (error detail is lost)."""
        return self.fold(lambda value: value, lambda _: None)

    def to_list(self) -> list[A]:
        return self.fold(lambda value: [value], lambda _: [])

    def to_tuple(self) -> tuple[A, ...]:
        return self.fold(lambda value: (value,), lambda _: ())

    def to_try(self) -> Success | Failure:
        """Convert to ``Success(value)`` or ``Failure`` holding the first error only."""
        if isinstance(self, Valid):
            return Success(self.value)
        return Failure(ValidationException(self.errors[0]))  # type: ignore[attr-defined]

    def get_or_raise(self) -> A:
        """Return the value or raise ``ValidationException`` with the first error.

        Raises:
            ValidationException: If the result is ``Invalid``
        """
        if isinstance(self, Valid):
            return self.value
        raise ValidationException(self.errors[0])  # type: ignore[attr-defined]

    def observe(self, observer: ValidationObserver | None = None) -> ValidationResult[A]:
        """Hand this result to ``observer`` and return it unchanged.

        Without an observer this is a no-op.
        """
        if observer is not None:
            observer.on_result(self)
        return self

    def translate_errors(self, translator: Translator) -> ValidationResult[A]:
        """Replace each top-level error message with ``translator.translate(error)``."""
        if isinstance(self, Valid):
            return self
        return Invalid(tuple(error.with_message(translator.translate(error)) for error in self.errors))  # type: ignore[attr-defined]


@dataclass(frozen=True)
class Valid(ValidationResult[A]):
    """A successful validation carrying the (possibly transformed) value."""

    value: A

    @property
    def errors(self) -> tuple[ValidationError, ...]:
        return ()


@dataclass(frozen=True)
class Invalid(ValidationResult[Any]):
    """A failed validation carrying one or more errors, in discovery order."""

    errors: tuple[ValidationError, ...]

    def __post_init__(self) -> None:
        errors = tuple(self.errors)
        if not errors:
            raise ValueError("Cannot create Invalid with an empty error sequence")
        object.__setattr__(self, "errors", errors)


@dataclass(frozen=True)
class Left:
    """Failure side of an either-style result."""

    value: Any


@dataclass(frozen=True)
class Right:
    """Success side of an either-style result."""

    value: Any


@dataclass(frozen=True)
class Success:
    """Throw-style success."""

    value: Any


@dataclass(frozen=True)
class Failure:
    """Throw-style failure holding the exception for the first error."""

    exception: ValidationException

    def get(self) -> Any:
        raise self.exception


def valid(value: A) -> ValidationResult[A]:
    return Valid(value)


def invalid(errors: ValidationError | Iterable[ValidationError]) -> ValidationResult[Any]:
    """Create an ``Invalid`` from one error or a non-empty iterable of errors.

    Raises:
        ValueError: If ``errors`` is empty
    """
    if isinstance(errors, ValidationError):
        return Invalid((errors,))
    return Invalid(tuple(errors))


def from_either(either: Left | Right) -> ValidationResult[Any]:
    """Create a result from ``Right(value)`` or ``Left(single_error)``."""
    if isinstance(either, Right):
        return Valid(either.value)
    return Invalid((either.value,))


def from_either_errors(either: Left | Right) -> ValidationResult[Any]:
    """Create a result from ``Right(value)`` or ``Left(errors)``.

    An empty ``Left`` is a programming error upstream. It resolves to an
    ``Invalid`` describing that mistake rather than a silent ``Valid``.
    """
    if isinstance(either, Right):
        return Valid(either.value)
    errors = tuple(either.value or ())
    if errors:
        return Invalid(errors)
    return Invalid(
        (
            ValidationError(
                "Programmer error: Cannot create Invalid ValidationResult from an empty error sequence",
                code=EMPTY_ERRORS_CODE,
                severity="Error",
            ),
        )
    )


def from_callable(fn: Callable[..., A], *args: Any, **kwargs: Any) -> ValidationResult[A]:
    """Run exception-based validation code and capture ``ValidationException`` as ``Invalid``."""
    try:
        return Valid(fn(*args, **kwargs))
    except ValidationException as e:
        return Invalid((e.error,))


def sequence(
    results: Iterable[ValidationResult[Any]],
    accumulator: ErrorAccumulator[tuple] = DEFAULT_ACCUMULATOR,
) -> ValidationResult[tuple[Any, ...]]:
    """Collect results into ``Valid(tuple_of_values)`` or one ``Invalid`` with every error."""
    errors: tuple = ()
    values = []
    for result in results:
        if isinstance(result, Valid):
            values.append(result.value)
        else:
            errors = accumulator.combine(errors, result.errors)  # type: ignore[attr-defined]
    if errors:
        return Invalid(errors)
    return Valid(tuple(values))


def type_name(tp: Any) -> str:
    """Readable name for a type or type annotation."""
    if isinstance(tp, type):
        return tp.__name__
    return repr(tp).replace("typing.", "")


def matches_type(value: Any, tp: Any) -> bool:
    """Runtime type tag check used to pick a union branch.

    Parameterized generics are checked against their origin only.
    """
    if tp is Any:
        return True
    if tp is None or tp is type(None):
        return value is None
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        return any(matches_type(value, arg) for arg in typing.get_args(tp))
    if origin is typing.Annotated:
        return matches_type(value, typing.get_args(tp)[0])
    target = origin or tp
    if isinstance(target, type):
        return isinstance(value, target)
    return True


def type_mismatch(tp: Any) -> ValidationResult[Any]:
    return Invalid((ValidationError(f"Value is not of type {type_name(tp)}"),))


def combine_union_results(
    value: Any,
    result_a: ValidationResult[Any],
    type_a: Any,
    result_b: ValidationResult[Any],
    type_b: Any,
) -> ValidationResult[Any]:
    """Pick the union outcome from both branch results.

    The first ``Valid`` wins, preferring ``A``. When both fail, a single error
    is returned whose children are A's errors followed by B's and whose
    ``expected`` names both types.
    """
    if isinstance(result_a, Valid):
        return result_a
    if isinstance(result_b, Valid):
        return result_b
    expected = f"{type_name(type_a)} | {type_name(type_b)}"
    return Invalid(
        (
            ValidationError(
                f"Value failed validation for all expected types: {expected}",
                children=result_a.errors + result_b.errors,  # type: ignore[attr-defined]
                expected=expected,
                actual=repr(value),
            ),
        )
    )


def validate_union(
    value: Any,
    validator_a: Validator[Any],
    type_a: Any,
    validator_b: Validator[Any],
    type_b: Any,
) -> ValidationResult[Any]:
    """Validate ``value`` against ``A | B``.

    Both branches are attempted, each guarded by a runtime type check on its
    type tag, and combined with ``combine_union_results``.
    """
    result_a = validator_a.validate(value) if matches_type(value, type_a) else type_mismatch(type_a)
    result_b = validator_b.validate(value) if matches_type(value, type_b) else type_mismatch(type_b)
    return combine_union_results(value, result_a, type_a, result_b, type_b)
