"""
Backing stores: the objects that actually hold a visitor's values.

A store owns one underlying instance and exposes it through a small by-name
contract (new / instance / get / get_typed / __setitem__ / contains / names).
InstanceVisitor and HistoryLog only ever talk to this contract, so the same
recorded history can be replayed onto any store for the source type.

Stores:
- InstanceStore: class instances and dataclasses (attribute access)
- MappingStore: dict-like targets (key access)
- ClassStore: static target, reads and writes class attributes
"""

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import MISSING, fields, is_dataclass
from typing import Any, List, Optional, Type, get_origin

from objectreplay.config import AlgorithmKind
from objectreplay.errors import InvalidArgumentError, MemberNotFoundError

logger = logging.getLogger(__name__)

_MISSING = object()


def _is_public(name: str) -> bool:
    return not name.startswith('_')


def _is_routine(attr: Any) -> bool:
    """True for methods, functions, staticmethods and classmethods."""
    return inspect.isroutine(attr) or isinstance(attr, (staticmethod, classmethod))


def _has_required_init_params(source_type: type) -> bool:
    try:
        sig = inspect.signature(source_type)
    except (ValueError, TypeError):
        # Builtins without signature metadata take no required arguments
        return False
    return any(
        p.default is inspect.Parameter.empty
        and p.kind in (inspect.Parameter.POSITIONAL_ONLY,
                       inspect.Parameter.POSITIONAL_OR_KEYWORD,
                       inspect.Parameter.KEYWORD_ONLY)
        for p in sig.parameters.values()
    )


def construct_instance(source_type: type) -> Any:
    """Create a blank instance of source_type.

    Types whose constructor takes no required arguments are simply called.
    Dataclasses with required fields are allocated with object.__new__ and
    every field is populated with its default (None where no default exists).
    Other classes with required constructor arguments are allocated with
    object.__new__ and left empty.
    """
    if not _has_required_init_params(source_type):
        return source_type()

    instance = object.__new__(source_type)
    if is_dataclass(source_type):
        for f in fields(source_type):
            if f.default is not MISSING:
                value = f.default
            elif f.default_factory is not MISSING:
                value = f.default_factory()
            else:
                value = None
            # object.__setattr__ so frozen dataclasses can be populated too
            object.__setattr__(instance, f.name, value)
    logger.debug(f"Allocated {source_type.__name__} without calling __init__")
    return instance


def check_value_type(value: Any, value_type: Any, name: str) -> Any:
    """Return value if it matches value_type, raise TypeError otherwise.

    None always matches (it is the default of an unset member). Subscripted
    generics are checked against their origin (List[int] -> list).
    """
    if value is None or value_type is Any or value_type is None:
        return value
    check_type = get_origin(value_type) or value_type
    if isinstance(check_type, type) and not isinstance(value, check_type):
        raise TypeError(
            f"Member '{name}' holds {type(value).__name__}, not {getattr(value_type, '__name__', value_type)}"
        )
    return value


class ValueStore(ABC):
    """Abstract by-name access to one underlying instance.

    Subclasses implement new(), get(), __setitem__(), contains() and names().
    """

    is_static = False

    def __init__(self, source_type: Type, kind: AlgorithmKind = AlgorithmKind.PRECISION):
        if source_type is None:
            raise InvalidArgumentError("source_type must not be None")
        self._source_type = source_type
        self._kind = kind
        self._instance: Any = None

    @property
    def source_type(self) -> Type:
        return self._source_type

    @property
    def algorithm_kind(self) -> AlgorithmKind:
        return self._kind

    @property
    def instance(self) -> Any:
        """The current underlying instance (None until new() is called)."""
        return self._instance

    @abstractmethod
    def new(self) -> Any:
        """Create or adopt the underlying instance and return it."""

    @abstractmethod
    def get(self, name: str) -> Any:
        """Return the current value of a member, raising MemberNotFoundError if absent."""

    @abstractmethod
    def __setitem__(self, name: str, value: Any) -> None:
        """Write a member value; visible to the next get() immediately."""

    @abstractmethod
    def contains(self, name: str) -> bool:
        """True if the instance currently has a readable member with this name."""

    @abstractmethod
    def names(self) -> List[str]:
        """Member names carried by the instance itself rather than its type."""

    def get_typed(self, name: str, value_type: Any) -> Any:
        return check_value_type(self.get(name), value_type, name)

    def set(self, name: str, value: Any) -> None:
        self[name] = value

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __contains__(self, name: str) -> bool:
        return self.contains(name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._source_type.__name__}, kind={self._kind.name})"


class InstanceStore(ValueStore):
    """Store over a class instance, using attribute access.

    PRECISION reads/writes through getattr/setattr. RAW goes through
    object.__getattribute__/object.__setattr__, which bypasses lazy
    __getattribute__ overrides and frozen-dataclass __setattr__ guards.
    """

    def __init__(self, source_type: Type, kind: AlgorithmKind = AlgorithmKind.PRECISION,
                 instance: Optional[Any] = None):
        super().__init__(source_type, kind)
        if instance is not None and not isinstance(instance, source_type):
            raise InvalidArgumentError(
                f"Expected instance of {source_type.__name__}, got {type(instance).__name__}"
            )
        self._seed = instance

    def new(self) -> Any:
        if self._seed is not None:
            self._instance = self._seed
        else:
            self._instance = construct_instance(self._source_type)
        return self._instance

    def contains(self, name: str) -> bool:
        if not name or name.startswith('__'):
            return False
        instance_dict = getattr(self._instance, '__dict__', None)
        if instance_dict is not None and name in instance_dict:
            return True
        attr = inspect.getattr_static(type(self._instance), name, _MISSING)
        if attr is _MISSING or _is_routine(attr):
            return False
        # Unset __slots__ entries are descriptors with nothing behind them
        if inspect.ismemberdescriptor(attr):
            try:
                object.__getattribute__(self._instance, name)
            except AttributeError:
                return False
        return True

    def get(self, name: str) -> Any:
        if not self.contains(name):
            raise MemberNotFoundError(self._source_type, name)
        try:
            if self._kind is AlgorithmKind.RAW:
                return object.__getattribute__(self._instance, name)
            return getattr(self._instance, name)
        except AttributeError as e:
            # Write-only properties and descriptors that refuse to read
            raise MemberNotFoundError(self._source_type, name) from e

    def __setitem__(self, name: str, value: Any) -> None:
        if self._kind is AlgorithmKind.RAW:
            object.__setattr__(self._instance, name, value)
        else:
            setattr(self._instance, name, value)

    def names(self) -> List[str]:
        instance_dict = getattr(self._instance, '__dict__', None) or {}
        return [name for name in instance_dict if _is_public(name)]


class MappingStore(ValueStore):
    """Store over a dict-like instance, using key access."""

    def __init__(self, source_type: Type = dict, kind: AlgorithmKind = AlgorithmKind.PRECISION,
                 instance: Optional[Mapping] = None):
        super().__init__(source_type, kind)
        if instance is not None and not isinstance(instance, Mapping):
            raise InvalidArgumentError(f"Expected a mapping, got {type(instance).__name__}")
        self._seed = instance

    def new(self) -> Any:
        self._instance = self._seed if self._seed is not None else self._source_type()
        return self._instance

    def contains(self, name: str) -> bool:
        return name in self._instance

    def get(self, name: str) -> Any:
        try:
            return self._instance[name]
        except KeyError:
            raise MemberNotFoundError(self._source_type, name) from None

    def __setitem__(self, name: str, value: Any) -> None:
        self._instance[name] = value

    def names(self) -> List[str]:
        return list(self._instance.keys())


class ClassStore(ValueStore):
    """Static store: the "instance" is the class itself.

    Members are the public, non-callable class attributes along the MRO.
    """

    is_static = True

    def new(self) -> Any:
        self._instance = self._source_type
        return self._instance

    def contains(self, name: str) -> bool:
        if not _is_public(name):
            return False
        attr = inspect.getattr_static(self._source_type, name, _MISSING)
        return attr is not _MISSING and not _is_routine(attr) and not isinstance(attr, property)

    def get(self, name: str) -> Any:
        if not self.contains(name):
            raise MemberNotFoundError(self._source_type, name)
        if self._kind is AlgorithmKind.RAW:
            return type.__getattribute__(self._source_type, name)
        return getattr(self._source_type, name)

    def __setitem__(self, name: str, value: Any) -> None:
        if self._kind is AlgorithmKind.RAW:
            type.__setattr__(self._source_type, name, value)
        else:
            setattr(self._source_type, name, value)

    def names(self) -> List[str]:
        # Class attributes are schema, reported by the member handler
        return []


def create_store(source_type: Type, kind: AlgorithmKind = AlgorithmKind.PRECISION,
                 instance: Optional[Any] = None) -> ValueStore:
    """Pick the store for a source type: MappingStore for mappings, InstanceStore otherwise."""
    if source_type is None:
        raise InvalidArgumentError("source_type must not be None")
    if isinstance(source_type, type) and issubclass(source_type, Mapping):
        return MappingStore(source_type, kind, instance=instance)
    return InstanceStore(source_type, kind, instance=instance)
