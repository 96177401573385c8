"""
History log: append-only record of member assignments, replayable in order.

Each recorded mutation is an Assign command value, not a closure, so the log
is inspectable and a recorded operation carries no reference to the facade
or store it was recorded from. Replay builds a fresh store for the log's
source type and applies every command, in recording order, to it.

Design Philosophy:
- Append-only: operations are never rewritten, merged or removed
- Strict order: replay applies commands exactly in the order recorded
- Call-time capture: values are deep-copied when recorded; values that
  cannot be copied (locks, open files, generators) are kept by reference
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterator, List, Mapping, Optional, Tuple, Type

from objectreplay.config import AlgorithmKind
from objectreplay.errors import InvalidArgumentError
from objectreplay.store import ValueStore, create_store

logger = logging.getLogger(__name__)


def capture(value: Any) -> Any:
    """Deep copy of value, or value itself when it cannot be deep-copied."""
    try:
        return copy.deepcopy(value)
    except (TypeError, copy.Error) as e:
        logger.debug(f"Keeping a reference to uncopyable {type(value).__name__}: {e}")
        return value


@dataclass(frozen=True)
class Assign:
    """Immutable "assign value to member name" command."""
    kind: ClassVar[str] = 'assign'

    name: str
    value: Any

    def apply(self, target: Any) -> None:
        """Apply to any target exposing a by-name setter (target[name] = value).

        The target receives its own copy of the value, so replays never share
        mutable state with each other or with the log.
        """
        target[self.name] = capture(self.value)

    def copy(self) -> 'Assign':
        return Assign(self.name, capture(self.value))

    def to_dict(self) -> Dict[str, Any]:
        """Export as a plain dict for inspection; the value is a copy."""
        return {'kind': self.kind, 'name': self.name, 'value': capture(self.value)}


class HistoryLog:
    """Ordered, append-only log of Assign operations for one source type.

    Replay entry points:
        repeat()               -> fresh instance of source_type
        repeat_onto(instance)  -> the supplied instance, mutated in place
        repeat_with(overrides) -> fresh instance seeded from overrides first

    operations, iteration, record() and to_list() hand out copies, so
    editing a returned value never changes what later replays produce.

    Thread safety: Not thread-safe; callers sharing a log across threads
    must serialize record() and the repeat methods themselves.
    """

    def __init__(self, source_type: Type, kind: AlgorithmKind = AlgorithmKind.PRECISION):
        if source_type is None:
            raise InvalidArgumentError("source_type must not be None")
        self._source_type = source_type
        self._kind = kind
        self._operations: List[Assign] = []

    @property
    def source_type(self) -> Type:
        return self._source_type

    @property
    def algorithm_kind(self) -> AlgorithmKind:
        return self._kind

    @property
    def operations(self) -> Tuple[Assign, ...]:
        return tuple(operation.copy() for operation in self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __iter__(self) -> Iterator[Assign]:
        return iter(self.operations)

    def record(self, name: str, value: Any) -> Assign:
        """Append an assignment, capturing the value as of this call."""
        operation = Assign(name, capture(value))
        self._operations.append(operation)
        logger.debug(f"Recorded #{len(self._operations)} {self._source_type.__name__}.{name}")
        return operation.copy()

    def to_list(self) -> List[Dict[str, Any]]:
        return [operation.to_dict() for operation in self._operations]

    def repeat(self) -> Any:
        """Replay onto a freshly constructed instance and return it."""
        return self._replay(create_store(self._source_type, self._kind))

    def repeat_onto(self, instance: Any) -> Any:
        """Replay onto the supplied instance, on top of whatever state it already has."""
        if instance is None:
            raise InvalidArgumentError("instance must not be None")
        return self._replay(create_store(self._source_type, self._kind, instance=instance))

    def repeat_with(self, overrides: Optional[Mapping[str, Any]]) -> Any:
        """Replay onto a fresh instance seeded from overrides.

        Override entries for names the log never touches survive; names the
        log does touch end up with the log's value.
        """
        return self._replay(create_store(self._source_type, self._kind), overrides or {})

    def _replay(self, store: ValueStore, overrides: Optional[Mapping[str, Any]] = None) -> Any:
        store.new()

        if overrides:
            for name, value in overrides.items():
                store[name] = value

        operations = tuple(self._operations)
        for operation in operations:
            operation.apply(store)

        logger.debug(
            f"Replayed {len(operations)} operations onto {self._source_type.__name__} "
            f"({len(overrides or {})} overrides)"
        )
        return store.instance

    def __repr__(self) -> str:
        return f"HistoryLog({self._source_type.__name__}, kind={self._kind.name}, operations={len(self)})"
