"""
Replay handles returned by InstanceVisitor.for_repeat().

Both variants share one surface so callers never branch on whether history
exists: HistoryRepeater replays its log, EmptyRepeater returns None.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Type

from objectreplay.errors import InvalidArgumentError
from objectreplay.history import HistoryLog

logger = logging.getLogger(__name__)


class Repeater(ABC):
    """Deferred access to the three replay forms."""

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """True if calls actually replay a history."""

    @abstractmethod
    def repeat(self) -> Any:
        """Replay onto a freshly constructed instance."""

    @abstractmethod
    def repeat_onto(self, instance: Any) -> Any:
        """Replay onto a supplied instance."""

    @abstractmethod
    def repeat_with(self, overrides: Optional[Mapping[str, Any]]) -> Any:
        """Replay onto a fresh instance seeded from overrides."""


class HistoryRepeater(Repeater):
    """Replay handle over a HistoryLog; results are returned directly."""

    def __init__(self, history: HistoryLog):
        if history is None:
            raise InvalidArgumentError("history must not be None")
        self._history = history

    @property
    def is_active(self) -> bool:
        return True

    @property
    def history(self) -> HistoryLog:
        return self._history

    def repeat(self) -> Any:
        return self._history.repeat()

    def repeat_onto(self, instance: Any) -> Any:
        return self._history.repeat_onto(instance)

    def repeat_with(self, overrides: Optional[Mapping[str, Any]]) -> Any:
        return self._history.repeat_with(overrides)

    def __repr__(self) -> str:
        return f"HistoryRepeater({self._history!r})"


class EmptyRepeater(Repeater):
    """No-op replay handle for visitors without history (or static targets)."""

    def __init__(self, source_type: Type):
        self._source_type = source_type

    @property
    def is_active(self) -> bool:
        return False

    @property
    def source_type(self) -> Type:
        return self._source_type

    def _nothing(self) -> None:
        logger.debug(f"Replay requested for {self._source_type.__name__} without history; nothing to replay")
        return None

    def repeat(self) -> Any:
        return self._nothing()

    def repeat_onto(self, instance: Any) -> Any:
        return self._nothing()

    def repeat_with(self, overrides: Optional[Mapping[str, Any]]) -> Any:
        return self._nothing()

    def __repr__(self) -> str:
        return f"EmptyRepeater({self._source_type.__name__})"
