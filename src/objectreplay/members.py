"""Member metadata: what members a source type has, and what they look like."""

import logging
import typing
from collections.abc import Mapping
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple, Type

from objectreplay.errors import MemberNotFoundError
from objectreplay.store import MappingStore, ValueStore, _is_public, _is_routine

logger = logging.getLogger(__name__)


class MemberKind(Enum):
    """Where a member lives on the underlying object."""
    FIELD = "field"            # dataclass field
    PROPERTY = "property"      # property on the class
    ATTRIBUTE = "attribute"    # annotated or instance/class attribute
    KEY = "key"                # mapping key


@dataclass(frozen=True)
class Member:
    """Resolved descriptor of one named member."""
    name: str
    member_type: Any
    can_read: bool = True
    can_write: bool = True
    kind: MemberKind = MemberKind.FIELD


# Type-derived member tables, keyed by (source_type, is_static)
_member_cache: Dict[Tuple[type, bool], Dict[str, Member]] = {}


def clear_member_cache() -> None:
    """Clear the type-derived member cache (useful for testing)."""
    _member_cache.clear()


def _type_hints(source_type: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(source_type)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to raw annotations
        hints: Dict[str, Any] = {}
        for cls in reversed(source_type.__mro__):
            hints.update(cls.__dict__.get('__annotations__', {}))
        return hints


def _class_attributes(source_type: type):
    """Yield (name, attr) for class attributes along the MRO, most derived first."""
    seen = set()
    for cls in source_type.__mro__:
        if cls is object:
            continue
        for name, attr in cls.__dict__.items():
            if name in seen:
                continue
            seen.add(name)
            yield name, attr


def _property_member(name: str, prop: property) -> Member:
    return_type = Any
    if prop.fget is not None:
        return_type = getattr(prop.fget, '__annotations__', {}).get('return', Any)
    return Member(
        name=name,
        member_type=return_type,
        can_read=prop.fget is not None,
        can_write=prop.fset is not None,
        kind=MemberKind.PROPERTY,
    )


def _analyze_instance_type(source_type: type) -> Dict[str, Member]:
    members: Dict[str, Member] = {}
    hints = _type_hints(source_type)

    if is_dataclass(source_type):
        frozen = source_type.__dataclass_params__.frozen
        for f in fields(source_type):
            members[f.name] = Member(f.name, hints.get(f.name, f.type), True, not frozen, MemberKind.FIELD)
    else:
        for name, hint in hints.items():
            if not _is_public(name) or typing.get_origin(hint) is typing.ClassVar:
                continue
            members[name] = Member(name, hint, True, True, MemberKind.ATTRIBUTE)

    for name, attr in _class_attributes(source_type):
        if isinstance(attr, property) and _is_public(name) and name not in members:
            members[name] = _property_member(name, attr)

    return members


def _analyze_static_type(source_type: type) -> Dict[str, Member]:
    members: Dict[str, Member] = {}
    hints = _type_hints(source_type)
    for name, attr in _class_attributes(source_type):
        if not _is_public(name) or _is_routine(attr) or isinstance(attr, (property, type)):
            continue
        members[name] = Member(name, hints.get(name, type(attr)), True, True, MemberKind.ATTRIBUTE)
    return members


def get_type_members(source_type: type, is_static: bool = False) -> Dict[str, Member]:
    """Get (and cache) the members that can be derived from the type alone."""
    key = (source_type, is_static)
    if key in _member_cache:
        return _member_cache[key]

    if isinstance(source_type, type) and issubclass(source_type, Mapping) and not is_static:
        # Mapping keys are data, not schema
        members: Dict[str, Member] = {}
    elif is_static:
        members = _analyze_static_type(source_type)
    else:
        members = _analyze_instance_type(source_type)

    _member_cache[key] = members
    logger.debug(f"Resolved {len(members)} members for {source_type.__name__} (static={is_static})")
    return members


class MemberHandler:
    """Member metadata for one store.

    Combines the cached, type-derived table with the names the store's
    instance carries itself (instance __dict__ entries, mapping keys), which
    are re-read on every call since they change as values are set.

    Write-only properties are resolvable through get_member() but are not
    listed by get_names(), which only reports members that hold a value.
    Declared members with nothing behind them (init=False fields without a
    default, properties whose getter raises AttributeError) are skipped too.
    """

    def __init__(self, store: ValueStore, source_type: Type):
        self._store = store
        self._source_type = source_type
        self._type_members = get_type_members(source_type, store.is_static)
        self._dynamic_kind = MemberKind.KEY if isinstance(store, MappingStore) else MemberKind.ATTRIBUTE

    def _candidate_names(self) -> List[str]:
        names = [name for name, member in self._type_members.items() if member.can_read]
        for name in self._store.names():
            if name not in self._type_members:
                names.append(name)
        return names

    def read_all(self) -> List[Tuple[str, Any]]:
        """(name, current value) for every member that can be read right now."""
        items = []
        for name in self._candidate_names():
            if not self._store.contains(name):
                continue
            try:
                items.append((name, self._store.get(name)))
            except MemberNotFoundError:
                logger.debug(f"Skipping unreadable member {self._source_type.__name__}.{name}")
        return items

    def get_names(self) -> List[str]:
        return [name for name, _ in self.read_all()]

    def get_member(self, name: str) -> Member:
        member = self._type_members.get(name)
        if member is not None:
            return member
        if name in self._store.names():
            value = self._store.get(name)
            return Member(name, type(value), True, True, self._dynamic_kind)
        raise MemberNotFoundError(self._source_type, name)
