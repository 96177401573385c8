"""Convenience constructors that pick the right store for a target."""

from collections.abc import Mapping
from typing import Any, Optional, Type

from objectreplay.config import AlgorithmKind, get_default_algorithm_kind, get_default_repeatable
from objectreplay.errors import InvalidArgumentError
from objectreplay.store import ClassStore, MappingStore, create_store
from objectreplay.visitor import InstanceVisitor


def _resolve_kind(kind: Optional[AlgorithmKind]) -> AlgorithmKind:
    return kind if kind is not None else get_default_algorithm_kind()


def _resolve_repeatable(repeatable: Optional[bool]) -> bool:
    return repeatable if repeatable is not None else get_default_repeatable()


def for_type(
    source_type: Type,
    kind: Optional[AlgorithmKind] = None,
    repeatable: Optional[bool] = None,
    initial_values: Optional[Mapping] = None,
) -> InstanceVisitor:
    """Visitor over a freshly constructed instance of source_type."""
    kind = _resolve_kind(kind)
    store = create_store(source_type, kind)
    return InstanceVisitor(store, source_type, kind, _resolve_repeatable(repeatable), initial_values)


def for_instance(
    instance: Any,
    kind: Optional[AlgorithmKind] = None,
    repeatable: Optional[bool] = None,
) -> InstanceVisitor:
    """Visitor over an existing instance; sets write straight through to it."""
    if instance is None:
        raise InvalidArgumentError("instance must not be None")
    kind = _resolve_kind(kind)
    source_type = type(instance)
    store = create_store(source_type, kind, instance=instance)
    return InstanceVisitor(store, source_type, kind, _resolve_repeatable(repeatable))


def for_mapping(
    mapping: Optional[Mapping] = None,
    repeatable: Optional[bool] = None,
    initial_values: Optional[Mapping] = None,
) -> InstanceVisitor:
    """Visitor over a dict (a new empty dict when mapping is None)."""
    source_type = type(mapping) if mapping is not None else dict
    store = MappingStore(source_type, AlgorithmKind.PRECISION, instance=mapping)
    return InstanceVisitor(store, source_type, AlgorithmKind.PRECISION, _resolve_repeatable(repeatable),
                           initial_values)


def for_class(source_type: Type, kind: Optional[AlgorithmKind] = None) -> InstanceVisitor:
    """Static visitor over class attributes. Static visitors never record history."""
    if not isinstance(source_type, type):
        raise InvalidArgumentError(f"for_class() needs a class, got {type(source_type).__name__}")
    kind = _resolve_kind(kind)
    return InstanceVisitor(ClassStore(source_type, kind), source_type, kind, repeatable=False)
