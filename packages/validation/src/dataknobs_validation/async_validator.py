"""Asynchronous validators.

An ``AsyncValidator`` returns an awaitable ``ValidationResult``, for checks
that need non-blocking I/O such as uniqueness lookups. Any ``Validator`` can
be lifted with ``AsyncValidator.from_sync``. The collection and map variants
share their algorithm with the synchronous ones (see ``logic``) and validate
all elements concurrently, keeping errors in iteration order.

Example:
    ```python
    class UniqueEmail(AsyncValidator[str]):
        async def validate_async(self, value: str) -> ValidationResult[str]:
            if await users.exists(email=value):
                return invalid(ValidationError("Email already registered"))
            return Valid(value)
    ```
"""

from __future__ import annotations

import asyncio
import inspect
import collections.abc
from abc import ABC, abstractmethod
from collections.abc import Callable, Collection, Mapping, Sequence
from typing import Any, Generic, TypeVar

from .config import ValidationConfig, resolve_config
from .effect import ASYNC
from .errors import ValidationError
from .logic import validate_collection, validate_map
from .result import Invalid, Valid, ValidationResult, combine_union_results, matches_type, type_mismatch
from .validator import Validator

A = TypeVar("A")


class AsyncValidator(ABC, Generic[A]):
    """Validates one value of a type; the check may suspend."""

    @abstractmethod
    async def validate_async(self, value: A) -> ValidationResult[A]:
        """Validate ``value``.

        Args:
            value: Value to validate

        Returns:
            ``Valid`` with the (possibly normalized) value, or ``Invalid``
        """

    async def __call__(self, value: A) -> ValidationResult[A]:
        return await self.validate_async(value)

    @staticmethod
    def from_sync(validator: Validator[A]) -> AsyncValidator[A]:
        """Lift a synchronous validator; its result is available immediately."""
        return LiftedValidator(validator)

    @staticmethod
    def of(
        fn: Callable[[Any], Any],
        error_message: str = "Custom validation failed",
        code: str | None = None,
    ) -> AsyncFunctionValidator[Any]:
        """Wrap a coroutine function (or plain function) returning a result or bool."""
        return AsyncFunctionValidator(fn, error_message=error_message, code=code)


class LiftedValidator(AsyncValidator[A]):
    """A synchronous validator presented as an async one."""

    def __init__(self, validator: Validator[A]):
        self.validator = validator

    async def validate_async(self, value: A) -> ValidationResult[A]:
        return self.validator.validate(value)

    def __repr__(self) -> str:
        return f"LiftedValidator({self.validator!r})"


class AsyncFunctionValidator(AsyncValidator[A]):
    """Async validator backed by a callable returning a result, a bool, or an awaitable of either."""

    def __init__(
        self,
        fn: Callable[[A], Any],
        error_message: str = "Custom validation failed",
        code: str | None = None,
    ):
        self.fn = fn
        self.error_message = error_message
        self.code = code

    async def validate_async(self, value: A) -> ValidationResult[A]:
        result = self.fn(value)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, ValidationResult):
            return result
        if result:
            return Valid(value)
        return Invalid((ValidationError(self.error_message, code=self.code, actual=repr(value)),))


class AsyncOptionalValidator(AsyncValidator[Any]):
    def __init__(self, inner: AsyncValidator[Any]):
        self.inner = inner

    async def validate_async(self, value: Any) -> ValidationResult[Any]:
        if value is None:
            return Valid(None)
        return await self.inner.validate_async(value)


class AsyncCollectionValidator(AsyncValidator[Any]):
    """Validates every element concurrently with ``element``."""

    label = "Collection"
    container: Any = collections.abc.Collection

    def __init__(self, element: AsyncValidator[Any], config: ValidationConfig | None = None):
        self.element = element
        self.config = config

    def build(self, original: Any, values: list[Any]) -> Any:
        raise NotImplementedError

    async def validate_async(self, value: Collection[Any]) -> ValidationResult[Any]:
        return await validate_collection(
            ASYNC,
            value,
            lambda values: self.build(value, values),
            self.label,
            self.element.validate_async,
            resolve_config(self.config),
            self.container,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.element!r})"


class AsyncListValidator(AsyncCollectionValidator):
    label = "List"
    container = list

    def build(self, original: Any, values: list[Any]) -> list[Any]:
        return values


class AsyncTupleValidator(AsyncCollectionValidator):
    label = "Tuple"
    container = tuple

    def build(self, original: Any, values: list[Any]) -> tuple[Any, ...]:
        return tuple(values)


class AsyncSetValidator(AsyncCollectionValidator):
    label = "Set"
    container = collections.abc.Set

    def build(self, original: Any, values: list[Any]) -> set[Any] | frozenset[Any]:
        if isinstance(original, frozenset):
            return frozenset(values)
        return set(values)


class AsyncFrozenSetValidator(AsyncCollectionValidator):
    label = "FrozenSet"
    container = frozenset

    def build(self, original: Any, values: list[Any]) -> frozenset[Any]:
        return frozenset(values)


class AsyncSequenceValidator(AsyncCollectionValidator):
    label = "Sequence"
    container = collections.abc.Sequence

    def build(self, original: Sequence[Any], values: list[Any]) -> Sequence[Any]:
        if isinstance(original, tuple):
            return tuple(values)
        return values


class AsyncMapValidator(AsyncValidator[Any]):
    """Validates all keys and values concurrently."""

    def __init__(
        self,
        key: AsyncValidator[Any],
        value: AsyncValidator[Any],
        config: ValidationConfig | None = None,
    ):
        self.key = key
        self.value = value
        self.config = config

    async def validate_async(self, value: Mapping[Any, Any]) -> ValidationResult[Any]:
        return await validate_map(
            ASYNC,
            value,
            dict,
            self.key.validate_async,
            self.value.validate_async,
            resolve_config(self.config),
        )


class AsyncIntersectionValidator(AsyncValidator[A]):
    """Both validators run concurrently on the same value; errors accumulate."""

    def __init__(self, first: AsyncValidator[A], second: AsyncValidator[A]):
        self.first = first
        self.second = second

    async def validate_async(self, value: A) -> ValidationResult[A]:
        first, second = await asyncio.gather(self.first.validate_async(value), self.second.validate_async(value))
        return first.zip(second).map(lambda _: value)


class AsyncUnionValidator(AsyncValidator[Any]):
    """Async counterpart of ``UnionValidator``; both branches run concurrently."""

    def __init__(
        self,
        validator_a: AsyncValidator[Any],
        type_a: Any,
        validator_b: AsyncValidator[Any],
        type_b: Any,
    ):
        self.validator_a = validator_a
        self.type_a = type_a
        self.validator_b = validator_b
        self.type_b = type_b

    async def _branch(self, value: Any, validator: AsyncValidator[Any], tp: Any) -> ValidationResult[Any]:
        if matches_type(value, tp):
            return await validator.validate_async(value)
        return type_mismatch(tp)

    async def validate_async(self, value: Any) -> ValidationResult[Any]:
        result_a, result_b = await asyncio.gather(
            self._branch(value, self.validator_a, self.type_a),
            self._branch(value, self.validator_b, self.type_b),
        )
        return combine_union_results(value, result_a, self.type_a, result_b, self.type_b)
