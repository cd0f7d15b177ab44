"""Record validator derivation.

Builds a validator for a record type from validators for its fields. Three
record shapes are supported:

- dataclasses (nominal: fields read by attribute, record rebuilt by keyword)
- ``typing.NamedTuple`` classes (positional, labelled by the field names)
- fixed ``tuple[A, B, ...]`` annotations (positional, labelled ``_1``, ``_2``, ...)

Field validators are resolved once, when the record validator is built. If
any field has no validator, ``DerivationError`` lists every such field at
once. At validation time every field is checked, in declaration order, and
all errors are returned together; the record is rebuilt only when every
field is valid.

Example:
    ```python
    @dataclass
    class User:
        name: Annotated[str, NON_EMPTY_STRING]
        age: Annotated[int, NON_NEGATIVE_INT]
        nickname: str | None = None

    result = derive(User).validate(User(name="", age=-1))
    [e.field_path for e in result.errors]
    # [('name',), ('age',)]
    ```
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import types
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Union

from .async_validator import AsyncValidator
from .effect import ASYNC, SYNC, ValidationEffect
from .errors import ValidationError
from .exceptions import DerivationError, MissingValidator, NotFoundError
from .logic import aggregate
from .result import Invalid, ValidationResult, type_name
from .validator import FunctionValidator, Validator

if TYPE_CHECKING:
    from .registry import ValidatorRegistry

logger = logging.getLogger(__name__)

ASYNC_UNEXPECTED_FAILURE = "validation.async.unexpected_failure"
RECORD_SHAPE_MISMATCH = "validation.record.shape_mismatch"


class RecordKind(enum.Enum):
    NOMINAL = "nominal"
    NAMED_TUPLE = "named_tuple"
    TUPLE = "tuple"


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of a record type, in declaration order."""

    name: str
    annotation: Any
    optional: bool
    index: int


def is_optional_type(annotation: Any) -> bool:
    """Whether ``None`` is an accepted value for ``annotation``."""
    if annotation is Any or annotation is None or annotation is type(None):
        return True
    origin = typing.get_origin(annotation)
    if origin is typing.Annotated:
        return is_optional_type(typing.get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        return type(None) in typing.get_args(annotation)
    return False


def _is_fixed_tuple(tp: Any) -> bool:
    if typing.get_origin(tp) is not tuple:
        return False
    args = typing.get_args(tp)
    return bool(args) and not (len(args) == 2 and args[1] is Ellipsis)


def _is_named_tuple(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, tuple) and hasattr(tp, "_fields")


def is_record_type(tp: Any) -> bool:
    """Whether ``tp`` is a dataclass, a NamedTuple class or a fixed-size tuple annotation."""
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return True
    return _is_named_tuple(tp) or _is_fixed_tuple(tp)


def _type_hints(cls: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(cls, localns={cls.__name__: cls}, include_extras=True)
    except NameError as e:
        # forward reference that cannot be resolved yet; the raw annotations
        # are kept and reported as missing validators
        logger.debug(f"Could not resolve type hints for {cls.__name__}: {e}")
        return dict(getattr(cls, "__annotations__", {}))


class RecordShape:
    """Field layout of a record type plus access and reconstruction rules."""

    def __init__(self, record_type: Any, kind: RecordKind, fields: List[FieldDescriptor]):
        self.record_type = record_type
        self.kind = kind
        self.fields = fields

    @property
    def name(self) -> str:
        return type_name(self.record_type)

    @classmethod
    def from_type(cls, record_type: Any) -> RecordShape:
        """Introspect ``record_type``.

        Raises:
            TypeError: If ``record_type`` is not a supported record shape
        """
        if isinstance(record_type, type) and dataclasses.is_dataclass(record_type):
            hints = _type_hints(record_type)
            init_fields = [f for f in dataclasses.fields(record_type) if f.init]
            return cls(
                record_type,
                RecordKind.NOMINAL,
                [cls._descriptor(f.name, hints.get(f.name, f.type), i) for i, f in enumerate(init_fields)],
            )
        if _is_named_tuple(record_type):
            hints = _type_hints(record_type)
            return cls(
                record_type,
                RecordKind.NAMED_TUPLE,
                [cls._descriptor(name, hints.get(name, Any), i) for i, name in enumerate(record_type._fields)],
            )
        if _is_fixed_tuple(record_type):
            return cls(
                record_type,
                RecordKind.TUPLE,
                [cls._descriptor(f"_{i + 1}", arg, i) for i, arg in enumerate(typing.get_args(record_type))],
            )
        raise TypeError(f"{type_name(record_type)} is not a dataclass, NamedTuple or fixed-size tuple")

    @staticmethod
    def _descriptor(name: str, annotation: Any, index: int) -> FieldDescriptor:
        return FieldDescriptor(name=name, annotation=annotation, optional=is_optional_type(annotation), index=index)

    def check(self, value: Any) -> ValidationError | None:
        """Return an error if ``value`` does not have this shape's layout."""
        if self.kind is RecordKind.NOMINAL:
            if isinstance(value, self.record_type):
                return None
        elif isinstance(value, tuple) and len(value) == len(self.fields):
            return None
        return ValidationError(
            f"Expected a value of type {self.name}",
            code=RECORD_SHAPE_MISMATCH,
            expected=self.name,
            actual=type(value).__name__,
        )

    def get(self, value: Any, descriptor: FieldDescriptor) -> Any:
        if self.kind is RecordKind.NOMINAL:
            return getattr(value, descriptor.name)
        return value[descriptor.index]

    def rebuild(self, original: Any, values: List[Any]) -> Any:
        """Reconstruct the record from field values given in declaration order.

        When every validated value is the very object read from ``original``,
        ``original`` itself is returned. Otherwise a new record is built; for
        dataclasses, fields outside ``__init__`` are copied from ``original``.
        """
        if all(v is self.get(original, f) for f, v in zip(self.fields, values)):
            return original
        if self.kind is RecordKind.NOMINAL:
            rebuilt = self.record_type(**{f.name: v for f, v in zip(self.fields, values)})
            for f in dataclasses.fields(self.record_type):
                if not f.init and hasattr(original, f.name):
                    object.__setattr__(rebuilt, f.name, getattr(original, f.name))
            return rebuilt
        if self.kind is RecordKind.NAMED_TUPLE:
            return self.record_type(*values)
        return tuple(values)

    def __repr__(self) -> str:
        return f"RecordShape({self.name}, {[f.name for f in self.fields]})"


def null_field_error(field_name: str) -> ValidationError:
    return ValidationError(
        f"Field '{field_name}' must not be null.",
        field_path=(field_name,),
        expected="non-null value",
        actual="null",
    )


def _annotate(result: ValidationResult[Any], descriptor: FieldDescriptor, raw: Any) -> ValidationResult[Any]:
    if isinstance(result, Invalid):
        type_label = type(raw).__name__
        return Invalid(tuple(error.annotate_field(descriptor.name, type_label) for error in result.errors))
    return result


def validate_record(
    effect: ValidationEffect,
    shape: RecordShape,
    value: Any,
    fields: List[tuple[FieldDescriptor, Callable[[Any], Any]]],
) -> Any:
    """Validate every field of ``value`` and rebuild it when all are valid.

    A ``None`` in a field whose type is not optional is reported without
    calling that field's validator. Field errors are annotated with the field
    name and the runtime type of the value, and kept in declaration order.

    Args:
        effect: Execution strategy for the field validators
        shape: Layout of the record
        value: Record instance to validate
        fields: Each field descriptor paired with its validation callable

    Returns:
        A ``ValidationResult`` in ``effect``
    """
    mismatch = shape.check(value)
    if mismatch is not None:
        return effect.pure(Invalid((mismatch,)))

    def validate_field(item: tuple[FieldDescriptor, Callable[[Any], Any]]) -> Any:
        descriptor, validate = item
        raw = shape.get(value, descriptor)
        if raw is None and not descriptor.optional:
            return effect.pure(Invalid((null_field_error(descriptor.name),)))
        return effect.map(validate(raw), lambda result: _annotate(result, descriptor, raw))

    results = effect.traverse(fields, validate_field)
    return effect.map(results, lambda rs: aggregate(rs, lambda values: shape.rebuild(value, values)))


class DerivedValidator(Validator[Any]):
    """Synchronous validator for a record type, one validator per field."""

    def __init__(self, shape: RecordShape, field_validators: Mapping[str, Validator[Any]]):
        self.shape = shape
        self.field_validators = dict(field_validators)
        self._fields = [(f, self.field_validators[f.name].validate) for f in shape.fields]

    def validate(self, value: Any) -> ValidationResult[Any]:
        return validate_record(SYNC, self.shape, value, self._fields)

    def __repr__(self) -> str:
        return f"DerivedValidator({self.shape.name})"


def unexpected_failure(exc: BaseException) -> ValidationError:
    return ValidationError(
        f"Asynchronous validation failed unexpectedly: {exc}",
        code=ASYNC_UNEXPECTED_FAILURE,
        actual=type(exc).__name__,
    )


class AsyncDerivedValidator(AsyncValidator[Any]):
    """Asynchronous validator for a record type.

    All fields are validated concurrently. An exception raised by a field
    validator becomes an ``Invalid`` for that field; ``validate_async`` itself
    always returns a ``ValidationResult``.
    """

    def __init__(self, shape: RecordShape, field_validators: Mapping[str, AsyncValidator[Any]]):
        self.shape = shape
        self.field_validators = dict(field_validators)
        self._fields = [(f, self._guarded(f, self.field_validators[f.name])) for f in shape.fields]

    def _guarded(self, descriptor: FieldDescriptor, validator: AsyncValidator[Any]) -> Callable[[Any], Any]:
        record_name = self.shape.name

        async def validate_field(raw: Any) -> ValidationResult[Any]:
            try:
                return await validator.validate_async(raw)
            except Exception as e:
                logger.warning(f"Async validation of {record_name}.{descriptor.name} raised {type(e).__name__}: {e}")
                return Invalid((unexpected_failure(e),))

        return validate_field

    async def validate_async(self, value: Any) -> ValidationResult[Any]:
        try:
            return await validate_record(ASYNC, self.shape, value, self._fields)
        except Exception as e:
            logger.warning(f"Async validation of {self.shape.name} raised {type(e).__name__}: {e}")
            return Invalid((unexpected_failure(e),))

    def __repr__(self) -> str:
        return f"AsyncDerivedValidator({self.shape.name})"


def _suggestion(descriptor: FieldDescriptor, async_mode: bool) -> str:
    name = type_name(descriptor.annotation)
    if async_mode:
        return f"registry.register_async({name}, <AsyncValidator[{name}]>)"
    return f"registry.register({name}, <Validator[{name}]>)"


def _as_sync(validator: Any) -> Validator[Any]:
    if isinstance(validator, Validator):
        return validator
    if isinstance(validator, AsyncValidator):
        raise TypeError("An AsyncValidator cannot be used in a synchronous record validator")
    if callable(validator):
        return FunctionValidator(validator)
    raise TypeError(f"Expected a Validator or callable, got {type(validator).__name__}")


def _as_async(validator: Any) -> AsyncValidator[Any]:
    if isinstance(validator, AsyncValidator):
        return validator
    return AsyncValidator.from_sync(_as_sync(validator))


def _resolve_fields(
    shape: RecordShape,
    registry: ValidatorRegistry | None,
    overrides: Mapping[str, Any] | None,
    async_mode: bool,
    use_registry: bool = True,
) -> Dict[str, Any]:
    overrides = dict(overrides or {})
    unknown = set(overrides) - {f.name for f in shape.fields}
    if unknown:
        raise ValueError(f"{shape.name} has no field(s) named {', '.join(sorted(unknown))}")

    if registry is None:
        from .registry import default_registry

        registry = default_registry

    resolved: Dict[str, Any] = {}
    missing: List[MissingValidator] = []
    for descriptor in shape.fields:
        if descriptor.name in overrides:
            override = overrides[descriptor.name]
            resolved[descriptor.name] = _as_async(override) if async_mode else _as_sync(override)
            continue
        if not use_registry:
            missing.append(MissingValidator(descriptor.name, type_name(descriptor.annotation), _suggestion(descriptor, async_mode)))
            continue
        try:
            if async_mode:
                resolved[descriptor.name] = registry.resolve_async(descriptor.annotation)
            else:
                resolved[descriptor.name] = registry.resolve(descriptor.annotation)
        except (NotFoundError, DerivationError) as e:
            logger.debug(f"No validator for {shape.name}.{descriptor.name}: {e}")
            missing.append(MissingValidator(descriptor.name, type_name(descriptor.annotation), _suggestion(descriptor, async_mode)))

    if missing:
        raise DerivationError(shape.name, missing, async_mode=async_mode)
    return resolved


def derive(
    record_type: Any,
    registry: ValidatorRegistry | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> DerivedValidator:
    """Derive a synchronous validator for a record type.

    Args:
        record_type: A dataclass, NamedTuple class or fixed ``tuple[...]`` annotation
        registry: Where field validators are resolved (``default_registry`` if None)
        overrides: Validators to use for specific fields, by field name

    Returns:
        The record validator

    Raises:
        DerivationError: If any field has no resolvable validator
        ValueError: If ``overrides`` names a field the record does not have
    """
    shape = RecordShape.from_type(record_type)
    validators = _resolve_fields(shape, registry, overrides, async_mode=False)
    logger.debug(f"Derived validator for {shape.name} with {len(shape.fields)} field(s)")
    return DerivedValidator(shape, validators)


def derive_async(
    record_type: Any,
    registry: ValidatorRegistry | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> AsyncDerivedValidator:
    """Derive an asynchronous validator for a record type.

    Native async registrations are used where present; synchronous ones are lifted.

    Raises:
        DerivationError: If any field has no resolvable validator
        ValueError: If ``overrides`` names a field the record does not have
    """
    shape = RecordShape.from_type(record_type)
    validators = _resolve_fields(shape, registry, overrides, async_mode=True)
    logger.debug(f"Derived async validator for {shape.name} with {len(shape.fields)} field(s)")
    return AsyncDerivedValidator(shape, validators)


class RecordValidatorBuilder:
    """Assemble a record validator field by field.

    Fields not given explicitly are resolved from the registry unless
    ``use_registry`` is False, in which case every field must be supplied.

    Example:
        ```python
        validator = (
            RecordValidatorBuilder(User)
            .field("name", NON_EMPTY_STRING)
            .field("age", lambda age: non_negative_int(age))
            .build()
        )
        ```
    """

    def __init__(
        self,
        record_type: Any,
        registry: ValidatorRegistry | None = None,
        use_registry: bool = True,
    ):
        self.shape = RecordShape.from_type(record_type)
        self.registry = registry
        self.use_registry = use_registry
        self._fields: Dict[str, Any] = {}

    def field(self, name: str, validator: Validator[Any] | AsyncValidator[Any] | Callable[[Any], Any]) -> RecordValidatorBuilder:
        if name not in {f.name for f in self.shape.fields}:
            raise ValueError(f"{self.shape.name} has no field named {name}")
        self._fields[name] = validator
        return self

    def build(self) -> DerivedValidator:
        validators = _resolve_fields(self.shape, self.registry, self._fields, False, self.use_registry)
        return DerivedValidator(self.shape, validators)

    def build_async(self) -> AsyncDerivedValidator:
        validators = _resolve_fields(self.shape, self.registry, self._fields, True, self.use_registry)
        return AsyncDerivedValidator(self.shape, validators)


def derived(
    cls: Any = None,
    *,
    registry: ValidatorRegistry | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Any:
    """Class decorator: derive validators for a record class and register them.

    Both the synchronous and the asynchronous validator are registered, so
    other records can use the class as a field type.

    Example:
        ```python
        @derived
        @dataclass
        class Address:
            street: str
            city: str
        ```
    """

    def decorate(record_type: Any) -> Any:
        from .registry import default_registry

        target = registry if registry is not None else default_registry
        target.register(record_type, derive(record_type, registry=target, overrides=overrides), allow_overwrite=True)
        target.register_async(
            record_type, derive_async(record_type, registry=target, overrides=overrides), allow_overwrite=True
        )
        return record_type

    if cls is not None:
        return decorate(cls)
    return decorate
