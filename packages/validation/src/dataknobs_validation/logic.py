"""Collection and map validation, written once for both validator families.

Each function takes a ``ValidationEffect`` and per-element validation
callables returning values in that effect. With ``SYNC`` the functions return
a ``ValidationResult``; with ``ASYNC`` they return an awaitable of one.
"""

from __future__ import annotations

import collections.abc
from collections.abc import Callable, Collection, Iterable, Mapping
from typing import Any

from .config import ValidationConfig
from .effect import ValidationEffect
from .errors import ValidationError
from .result import Invalid, Valid, ValidationResult

CONTAINER_TYPE_MISMATCH = "validation.collection.type_mismatch"

TEXT_TYPES = (str, bytes, bytearray)


def _annotate(result: ValidationResult[Any], label: str, raw: Any) -> ValidationResult[Any]:
    if isinstance(result, Invalid):
        type_label = type(raw).__name__
        return Invalid(tuple(error.annotate_field(label, type_label) for error in result.errors))
    return result


def check_container(value: Any, container: Any, collection_label: str) -> ValidationResult[Any] | None:
    """Return an ``Invalid`` if ``value`` is not an instance of ``container``.

    Text values never count as a collection, so a ``str`` is not accepted
    where a sequence of strings is expected.
    """
    if isinstance(value, container) and not isinstance(value, TEXT_TYPES):
        return None
    return Invalid(
        (
            ValidationError(
                f"Expected a {collection_label}, got {type(value).__name__}",
                code=CONTAINER_TYPE_MISMATCH,
                expected=collection_label,
                actual=type(value).__name__,
            ),
        )
    )


def aggregate(results: Iterable[ValidationResult[Any]], build: Callable[[list[Any]], Any]) -> ValidationResult[Any]:
    """Accumulate every error in order; build from the values only if there are none."""
    errors: list[ValidationError] = []
    values: list[Any] = []
    for result in results:
        if isinstance(result, Valid):
            values.append(result.value)
        else:
            errors.extend(result.errors)  # type: ignore[attr-defined]
    if errors:
        return Invalid(tuple(errors))
    return Valid(build(values))


def validate_collection(
    effect: ValidationEffect,
    items: Collection[Any],
    build: Callable[[list[Any]], Any],
    collection_label: str,
    validate_item: Callable[[Any], Any],
    config: ValidationConfig,
    container: Any = collections.abc.Collection,
) -> Any:
    """Validate every element of ``items``.

    A value that is not a ``container`` (or is text) is rejected before
    anything else. The size check runs next; when it fails no element
    validator is called. Otherwise all elements are validated (no early
    exit), every error is kept in iteration order, and ``build`` receives
    the validated values only when there were no errors.

    Args:
        effect: Execution strategy for ``validate_item``
        items: The collection to validate
        build: Rebuilds the collection from the validated element values
        collection_label: Collection kind used in size-limit errors
        validate_item: Element validation returning an effect of a result
        config: Size policy for this call
        container: Type (or tuple of types) ``items`` must be an instance of

    Returns:
        A ``ValidationResult`` in ``effect``
    """
    mismatch = check_container(items, container, collection_label)
    if mismatch is not None:
        return effect.pure(mismatch)

    size_check = config.check_collection_size(len(items), collection_label)
    if isinstance(size_check, Invalid):
        return effect.pure(size_check)

    results = effect.traverse(list(items), validate_item)
    return effect.map(results, lambda rs: aggregate(rs, build))


def validate_map(
    effect: ValidationEffect,
    mapping: Mapping[Any, Any],
    build: Callable[[list[tuple[Any, Any]]], Any],
    validate_key: Callable[[Any], Any],
    validate_value: Callable[[Any], Any],
    config: ValidationConfig,
) -> Any:
    """Validate every key and value of ``mapping`` independently.

    Key errors are annotated with ``"key"`` and value errors with ``"value"``,
    each carrying the runtime type name of the offending key or value. The
    key and value of one entry are combined with ``zip`` so a bad key and a
    bad value in the same entry both surface. A value that is not a
    ``Mapping`` is rejected before the size check.
    """
    mismatch = check_container(mapping, collections.abc.Mapping, "Map")
    if mismatch is not None:
        return effect.pure(mismatch)

    size_check = config.check_collection_size(len(mapping), "Map")
    if isinstance(size_check, Invalid):
        return effect.pure(size_check)

    def validate_part(part: tuple[str, Any, Callable[[Any], Any]]) -> Any:
        label, raw, validate = part
        return effect.map(validate(raw), lambda r: _annotate(r, label, raw))

    def validate_entry(entry: tuple[Any, Any]) -> Any:
        key, value = entry
        parts = effect.traverse([("key", key, validate_key), ("value", value, validate_value)], validate_part)
        return effect.map(parts, lambda rs: rs[0].zip(rs[1]))

    results = effect.traverse(list(mapping.items()), validate_entry)
    return effect.map(results, lambda rs: aggregate(rs, build))
