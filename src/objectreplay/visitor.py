"""
InstanceVisitor: uniform get/set/enumerate/replay facade over one object.

Composes three collaborators:
- a ValueStore that holds the live instance (exclusively owned)
- a MemberHandler for member metadata (created lazily, once)
- a HistoryLog of recorded assignments (only when repeatable=True)

Lifecycle:
    Constructed -> Tracking (repeatable, non-static) | Inert (otherwise)
There is no further transition; replay never clears or alters the log.

Thread safety: Not thread-safe. set_value() and replay both touch the store
and the log without locking. Only the member-handler initialization is
guarded, so racing first calls to get_member_names() build it once.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type

from objectreplay.config import AlgorithmKind
from objectreplay.errors import InvalidArgumentError
from objectreplay.history import HistoryLog
from objectreplay.looper import Looper, Selector
from objectreplay.members import Member, MemberHandler
from objectreplay.repeater import EmptyRepeater, HistoryRepeater, Repeater
from objectreplay.selector import resolve_member_name
from objectreplay.store import ValueStore

logger = logging.getLogger(__name__)


class InstanceVisitor:
    """Get, set, enumerate and replay the members of an underlying instance.

    Example:
        visitor = InstanceVisitor(InstanceStore(Point), Point, repeatable=True)
        visitor.set_value('x', 1)
        visitor.set_value_by(lambda p: p.y, 2)
        ok, copy_of_point = visitor.try_repeat()
    """

    def __init__(
        self,
        store: ValueStore,
        source_type: Type,
        kind: AlgorithmKind = AlgorithmKind.PRECISION,
        repeatable: bool = False,
        initial_values: Optional[Mapping[str, Any]] = None,
    ):
        """
        Args:
            store: Backing store; initialized here via store.new()
            source_type: Type of the underlying instance
            kind: Algorithm kind, recorded on the history log for replay
            repeatable: Record every set into a HistoryLog
            initial_values: Applied through set_values() (recorded if repeatable)
        """
        if store is None:
            raise InvalidArgumentError("store must not be None")
        if source_type is None:
            raise InvalidArgumentError("source_type must not be None")

        self._store = store
        self._source_type = source_type
        self._kind = kind

        self._store.new()

        # Tagged union, chosen once: Tracking(log) or Inert
        self._history: Optional[HistoryLog] = None
        if repeatable and not self.is_static:
            self._history = HistoryLog(source_type, kind)
            self._repeater: Repeater = HistoryRepeater(self._history)
        else:
            self._repeater = EmptyRepeater(source_type)

        self._member_handler: Optional[MemberHandler] = None
        self._member_handler_lock = threading.Lock()

        logger.debug(
            f"InstanceVisitor created: type={source_type.__name__} kind={kind.name} "
            f"tracking={self._history is not None}"
        )

        if initial_values is not None:
            self.set_values(initial_values)

    # === Identity ===

    @property
    def source_type(self) -> Type:
        return self._source_type

    @property
    def algorithm_kind(self) -> AlgorithmKind:
        return self._kind

    @property
    def is_static(self) -> bool:
        return self._store.is_static

    @property
    def is_repeatable(self) -> bool:
        return self._history is not None

    @property
    def history(self) -> Optional[HistoryLog]:
        return self._history

    @property
    def instance(self) -> Any:
        return self._store.instance

    # === Set ===

    def set_value(self, name: str, value: Any) -> None:
        """Write a member; recorded only once the store accepted the write."""
        self._store[name] = value
        if self._history is not None:
            self._history.record(name, value)

    def set_value_by(self, selector: Any, value: Any) -> None:
        """Set the member a selector reads. A None selector is ignored."""
        if selector is None:
            logger.warning(f"set_value_by() called with no selector on {self._source_type.__name__}; ignored")
            return
        self.set_value(resolve_member_name(selector), value)

    def set_values(self, values: Mapping[str, Any]) -> None:
        """Set several members, in the mapping's iteration order."""
        if values is None:
            raise InvalidArgumentError("values must not be None")
        for name, value in values.items():
            self.set_value(name, value)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set_value(name, value)

    # === Get ===

    def get_value(self, name: str) -> Any:
        return self._store.get(name)

    def get_typed(self, name: str, value_type: Any) -> Any:
        return self._store.get_typed(name, value_type)

    def get_value_by(self, selector: Any) -> Any:
        if selector is None:
            raise InvalidArgumentError("selector must not be None")
        return self._store.get(resolve_member_name(selector))

    def get_typed_by(self, selector: Any, value_type: Any) -> Any:
        if selector is None:
            raise InvalidArgumentError("selector must not be None")
        return self._store.get_typed(resolve_member_name(selector), value_type)

    def __getitem__(self, name: str) -> Any:
        return self.get_value(name)

    def contains(self, name: str) -> bool:
        return self._store.contains(name)

    def __contains__(self, name: str) -> bool:
        return self.contains(name)

    # === Members ===

    @property
    def _members(self) -> MemberHandler:
        handler = self._member_handler
        if handler is None:
            with self._member_handler_lock:
                if self._member_handler is None:
                    self._member_handler = MemberHandler(self._store, self._source_type)
                handler = self._member_handler
        return handler

    def get_member_names(self) -> List[str]:
        return self._members.get_names()

    def get_member(self, name: str) -> Member:
        return self._members.get_member(name)

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of every known member's current value (independent of history)."""
        return dict(self.read_members())

    def read_members(self) -> List[Tuple[str, Any]]:
        """(name, value) pairs in get_member_names() order, each member read once."""
        return self._members.read_all()

    # === Replay ===

    def _can_repeat(self) -> bool:
        return not self.is_static and self._history is not None

    def try_repeat(self) -> Tuple[bool, Any]:
        """Replay onto a fresh instance. Returns (False, None) without history."""
        if not self._can_repeat():
            return False, None
        return True, self._history.repeat()

    def try_repeat_onto(self, instance: Any) -> Tuple[bool, Any]:
        """Replay onto a supplied instance. Returns (False, None) without history."""
        if not self._can_repeat():
            return False, None
        return True, self._history.repeat_onto(instance)

    def try_repeat_with(self, overrides: Optional[Mapping[str, Any]]) -> Tuple[bool, Any]:
        """Replay onto a fresh instance seeded from overrides. Returns (False, None) without history."""
        if not self._can_repeat():
            return False, None
        return True, self._history.repeat_with(overrides)

    def for_repeat(self) -> Repeater:
        return self._repeater

    # === Adapters ===

    def for_each(self, callback: Callable) -> Looper:
        return Looper(self, callback)

    def select(self, func: Callable) -> Selector:
        return Selector(self, func)

    def __repr__(self) -> str:
        state = 'tracking' if self._history is not None else 'inert'
        return f"InstanceVisitor({self._source_type.__name__}, kind={self._kind.name}, {state})"
