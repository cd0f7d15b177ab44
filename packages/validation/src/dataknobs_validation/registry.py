"""Type-indexed registry of validators.

The registry maps types to ``Validator`` / ``AsyncValidator`` instances and
builds validators for composite annotations on demand. Resolution happens
once, when a validator is constructed, never on every validation call.

Resolution order for an annotation:

1. An exact registration
2. ``Annotated[T, v1, ...]``: T's validator intersected with the attached validators
3. ``Optional[X]`` / unions: ``OptionalValidator`` / nested ``UnionValidator``
4. ``list``, ``tuple[X, ...]``, ``set``, ``frozenset``, ``Sequence``, ``dict`` / ``Mapping``
5. Records (dataclasses, NamedTuples, fixed ``tuple[A, B]``) via derivation,
   when ``auto_derive`` is on
6. The nearest registered base class (so every ``Enum`` uses the ``Enum`` entry)

Example:
    ```python
    registry = builtin_registry()
    registry.register(str, NON_EMPTY_STRING, allow_overwrite=True)
    validator = registry.resolve(list[str])
    ```
"""

from __future__ import annotations

import collections.abc
import logging
import threading
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any, Dict, List, Union
from uuid import UUID

from .async_validator import (
    AsyncFrozenSetValidator,
    AsyncIntersectionValidator,
    AsyncListValidator,
    AsyncMapValidator,
    AsyncOptionalValidator,
    AsyncSequenceValidator,
    AsyncSetValidator,
    AsyncTupleValidator,
    AsyncUnionValidator,
    AsyncValidator,
)
from .exceptions import NotFoundError, OperationError
from .result import ValidationResult, type_name
from .validator import (
    FrozenSetValidator,
    IntersectionValidator,
    ListValidator,
    MapValidator,
    OptionalValidator,
    PassThroughValidator,
    SequenceValidator,
    SetValidator,
    TupleValidator,
    Validator,
)

logger = logging.getLogger(__name__)

BUILTIN_SCALARS: tuple[type, ...] = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    bytearray,
    Decimal,
    Fraction,
    UUID,
    datetime,
    date,
    time,
    timedelta,
    type(None),
    Enum,
)

_UNION_ORIGINS = (Union, types.UnionType)
_LIST_ORIGINS = (list, collections.abc.MutableSequence)
_SET_ORIGINS = (set, collections.abc.Set, collections.abc.MutableSet)
_SEQUENCE_ORIGINS = (collections.abc.Sequence, collections.abc.Collection, collections.abc.Iterable)
_MAP_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


def _unfinished(record_type: Any) -> OperationError:
    return OperationError(
        f"Validator for {type_name(record_type)} used before its derivation finished",
        context={"type": type_name(record_type)},
    )


class _DeferredValidator(Validator[Any]):
    """Stands in for a record validator while it is being derived (recursive types)."""

    def __init__(self, record_type: Any):
        self.record_type = record_type
        self.target: Validator[Any] | None = None

    def validate(self, value: Any) -> ValidationResult[Any]:
        if self.target is None:
            raise _unfinished(self.record_type)
        return self.target.validate(value)


class _DeferredAsyncValidator(AsyncValidator[Any]):
    def __init__(self, record_type: Any):
        self.record_type = record_type
        self.target: AsyncValidator[Any] | None = None

    async def validate_async(self, value: Any) -> ValidationResult[Any]:
        if self.target is None:
            raise _unfinished(self.record_type)
        return await self.target.validate_async(value)


@dataclass(frozen=True)
class _Family:
    """Constructors for one validator family, so resolution is written once."""

    is_async: bool
    optional: Callable[[Any], Any]
    list: Callable[[Any], Any]
    tuple: Callable[[Any], Any]
    set: Callable[[Any], Any]
    frozenset: Callable[[Any], Any]
    sequence: Callable[[Any], Any]
    map: Callable[[Any, Any], Any]
    intersection: Callable[[Any, Any], Any]
    union: Callable[[Any, Any, Any, Any], Any]
    deferred: Callable[[Any], Any]


_SYNC_FAMILY = _Family(
    is_async=False,
    optional=OptionalValidator,
    list=ListValidator,
    tuple=TupleValidator,
    set=SetValidator,
    frozenset=FrozenSetValidator,
    sequence=SequenceValidator,
    map=MapValidator,
    intersection=IntersectionValidator,
    union=Validator.union,
    deferred=_DeferredValidator,
)

_ASYNC_FAMILY = _Family(
    is_async=True,
    optional=AsyncOptionalValidator,
    list=AsyncListValidator,
    tuple=AsyncTupleValidator,
    set=AsyncSetValidator,
    frozenset=AsyncFrozenSetValidator,
    sequence=AsyncSequenceValidator,
    map=AsyncMapValidator,
    intersection=AsyncIntersectionValidator,
    union=AsyncUnionValidator,
    deferred=_DeferredAsyncValidator,
)


class ValidatorRegistry:
    """Thread-safe, type-indexed registry of validators.

    Attributes:
        name: Name of the registry (for logging/debugging)
        auto_derive: Whether records without a registration are derived on demand

    Example:
        ```python
        registry = ValidatorRegistry("api")
        registry.register(str, NON_EMPTY_STRING)
        registry.has(str)
        # True
        ```
    """

    def __init__(self, name: str = "validators", auto_derive: bool = True):
        self._name = name
        self.auto_derive = auto_derive
        self._sync: Dict[Any, Validator[Any]] = {}
        self._async: Dict[Any, AsyncValidator[Any]] = {}
        self._derived: Dict[tuple[bool, Any], Any] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self._name

    def register(self, tp: Any, validator: Validator[Any], allow_overwrite: bool = False) -> None:
        """Register a synchronous validator for ``tp``.

        Args:
            tp: Type or annotation the validator handles
            validator: The validator
            allow_overwrite: Whether to replace an existing registration

        Raises:
            OperationError: If ``tp`` is already registered and allow_overwrite is False
        """
        if not isinstance(validator, Validator):
            raise TypeError(f"Expected a Validator, got {type(validator).__name__}")
        with self._lock:
            if not allow_overwrite and tp in self._sync:
                raise OperationError(
                    f"Validator for '{type_name(tp)}' already registered in {self._name}",
                    context={"type": type_name(tp), "registry": self._name},
                )
            self._sync[tp] = validator
            self._derived.clear()
        logger.debug(f"Registered validator for {type_name(tp)} in {self._name}")

    def register_async(self, tp: Any, validator: AsyncValidator[Any], allow_overwrite: bool = False) -> None:
        """Register a native asynchronous validator for ``tp``.

        Raises:
            OperationError: If ``tp`` already has an async registration and allow_overwrite is False
        """
        if not isinstance(validator, AsyncValidator):
            raise TypeError(f"Expected an AsyncValidator, got {type(validator).__name__}")
        with self._lock:
            if not allow_overwrite and tp in self._async:
                raise OperationError(
                    f"AsyncValidator for '{type_name(tp)}' already registered in {self._name}",
                    context={"type": type_name(tp), "registry": self._name},
                )
            self._async[tp] = validator
            self._derived.clear()
        logger.debug(f"Registered async validator for {type_name(tp)} in {self._name}")

    def unregister(self, tp: Any) -> Validator[Any]:
        """Remove and return the synchronous registration for ``tp``.

        Raises:
            NotFoundError: If ``tp`` is not registered
        """
        with self._lock:
            if tp not in self._sync:
                raise NotFoundError(
                    f"Validator not found: {type_name(tp)}",
                    context={"type": type_name(tp), "registry": self._name},
                )
            self._derived.clear()
            return self._sync.pop(tp)

    def has(self, tp: Any) -> bool:
        with self._lock:
            return tp in self._sync

    def has_async(self, tp: Any) -> bool:
        with self._lock:
            return tp in self._async

    def list_types(self) -> List[Any]:
        with self._lock:
            return list(self._sync.keys())

    def copy(self, name: str | None = None) -> ValidatorRegistry:
        """Independent registry holding the same registrations."""
        with self._lock:
            clone = ValidatorRegistry(name or f"{self._name}-copy", auto_derive=self.auto_derive)
            clone._sync = dict(self._sync)
            clone._async = dict(self._async)
        return clone

    def resolve(self, tp: Any) -> Validator[Any]:
        """Build or look up the synchronous validator for ``tp``.

        Raises:
            NotFoundError: If no validator can be resolved
            DerivationError: If ``tp`` is a record whose fields cannot all be resolved
        """
        with self._lock:
            return self._resolve(tp, _SYNC_FAMILY)

    def resolve_async(self, tp: Any) -> AsyncValidator[Any]:
        """Build or look up the asynchronous validator for ``tp``.

        Native async registrations win; otherwise synchronous ones are lifted.

        Raises:
            NotFoundError: If no validator can be resolved
            DerivationError: If ``tp`` is a record whose fields cannot all be resolved
        """
        with self._lock:
            return self._resolve(tp, _ASYNC_FAMILY)

    def _lookup(self, tp: Any, family: _Family) -> Any | None:
        try:
            if family.is_async and tp in self._async:
                return self._async[tp]
            if tp in self._sync:
                sync = self._sync[tp]
                return AsyncValidator.from_sync(sync) if family.is_async else sync
        except TypeError:
            # unhashable annotation
            return None
        return None

    def _resolve(self, tp: Any, family: _Family) -> Any:
        found = self._lookup(tp, family)
        if found is not None:
            return found

        if tp is Any or tp is object:
            return self._lift(PassThroughValidator("Any"), family)

        origin = typing.get_origin(tp)
        args = typing.get_args(tp)

        if origin is typing.Annotated:
            resolved = self._resolve(args[0], family)
            for extra in args[1:]:
                if isinstance(extra, (Validator, AsyncValidator)):
                    resolved = family.intersection(resolved, self._coerce(extra, family))
            return resolved

        if origin in _UNION_ORIGINS:
            members = [arg for arg in args if arg is not type(None)]
            inner = self._resolve_union(members, family)
            if len(members) < len(args):
                return family.optional(inner)
            return inner

        container = origin or tp
        if container in _LIST_ORIGINS:
            return family.list(self._resolve(args[0] if args else Any, family))
        if container is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return family.tuple(self._resolve(args[0], family))
            if not args:
                return family.tuple(self._resolve(Any, family))
            return self._derive(tp, family)
        if container is frozenset:
            return family.frozenset(self._resolve(args[0] if args else Any, family))
        if container in _SET_ORIGINS:
            return family.set(self._resolve(args[0] if args else Any, family))
        if container in _MAP_ORIGINS:
            key_type, value_type = args if args else (Any, Any)
            return family.map(self._resolve(key_type, family), self._resolve(value_type, family))
        if container in _SEQUENCE_ORIGINS:
            return family.sequence(self._resolve(args[0] if args else Any, family))

        if self.auto_derive and _is_record(tp):
            return self._derive(tp, family)

        if isinstance(tp, type):
            for base in tp.__mro__[1:]:
                if base is object:
                    continue
                found = self._lookup(base, family)
                if found is not None:
                    return found

        raise NotFoundError(
            f"No validator registered for {type_name(tp)}",
            context={"type": type_name(tp), "registry": self._name},
        )

    def _resolve_union(self, members: list[Any], family: _Family) -> Any:
        first = self._resolve(members[0], family)
        if len(members) == 1:
            return first
        rest = members[1:]
        rest_type = rest[0] if len(rest) == 1 else Union[tuple(rest)]
        return family.union(first, members[0], self._resolve_union(rest, family), rest_type)

    def _lift(self, validator: Validator[Any], family: _Family) -> Any:
        return AsyncValidator.from_sync(validator) if family.is_async else validator

    def _coerce(self, validator: Any, family: _Family) -> Any:
        if family.is_async:
            return validator if isinstance(validator, AsyncValidator) else AsyncValidator.from_sync(validator)
        if isinstance(validator, AsyncValidator):
            raise NotFoundError(
                "An AsyncValidator cannot be used where a synchronous Validator is required",
                context={"validator": repr(validator)},
            )
        return validator

    def _derive(self, tp: Any, family: _Family) -> Any:
        from .derivation import derive, derive_async

        key = (family.is_async, tp)
        if key in self._derived:
            return self._derived[key]

        deferred = family.deferred(tp)
        self._derived[key] = deferred
        try:
            if family.is_async:
                derived = derive_async(tp, registry=self)
            else:
                derived = derive(tp, registry=self)
        except Exception:
            self._derived.pop(key, None)
            raise
        deferred.target = derived
        self._derived[key] = derived
        return derived


def _is_record(tp: Any) -> bool:
    from .derivation import is_record_type

    return is_record_type(tp)


def builtin_registry(name: str = "builtin") -> ValidatorRegistry:
    """Create a registry holding pass-through validators for the built-in scalars."""
    registry = ValidatorRegistry(name)
    for scalar in BUILTIN_SCALARS:
        registry.register(scalar, PassThroughValidator(scalar.__name__))
    return registry


default_registry = builtin_registry("default")
