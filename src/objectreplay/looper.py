"""
Iteration and mapping adapters over a visitor's members.

The callback's positional arity picks how it is called:
    1 -> callback(LoopContext)
    2 -> callback(name, value)
    3 -> callback(name, value, member)
"""

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Generic, Iterator, List, TypeVar

from objectreplay.errors import InvalidArgumentError
from objectreplay.members import Member

if TYPE_CHECKING:
    from objectreplay.visitor import InstanceVisitor

T = TypeVar('T')

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True)
class LoopContext:
    """Everything known about one member during a loop."""
    name: str
    value: Any
    member: Member
    index: int


def callback_arity(callback: Callable) -> int:
    """Number of positional arguments (1-3) the callback should receive."""
    if not callable(callback):
        raise InvalidArgumentError(f"Expected a callable, got {type(callback).__name__}")
    try:
        sig = inspect.signature(callback)
    except (ValueError, TypeError) as e:
        raise InvalidArgumentError(f"Cannot inspect callback {callback!r}: {e}") from e

    params = list(sig.parameters.values())
    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
        return 3
    arity = sum(1 for p in params if p.kind in _POSITIONAL)
    if arity not in (1, 2, 3):
        raise InvalidArgumentError(f"Callback must take 1, 2 or 3 positional arguments, takes {arity}")
    return arity


class _MemberWalk:
    """Shared member walk for Looper and Selector."""

    def __init__(self, visitor: 'InstanceVisitor', callback: Callable):
        self._visitor = visitor
        self._callback = callback
        self._arity = callback_arity(callback)

    def _contexts(self) -> Iterator[LoopContext]:
        for index, (name, value) in enumerate(self._visitor.read_members()):
            yield LoopContext(
                name=name,
                value=value,
                member=self._visitor.get_member(name),
                index=index,
            )

    def _invoke(self, context: LoopContext) -> Any:
        if self._arity == 1:
            return self._callback(context)
        if self._arity == 2:
            return self._callback(context.name, context.value)
        return self._callback(context.name, context.value, context.member)


class Looper(_MemberWalk):
    """Runs a callback once per member, in member-name order."""

    def run(self) -> int:
        """Call the callback for every member; returns how many were visited."""
        count = 0
        for context in self._contexts():
            self._invoke(context)
            count += 1
        return count


class Selector(_MemberWalk, Generic[T]):
    """Maps every member through a function.

    Iterating is lazy (values are read as the walk proceeds); fire() and
    to_dict() materialize the whole walk.
    """

    def __iter__(self) -> Iterator[T]:
        for context in self._contexts():
            yield self._invoke(context)

    def fire(self) -> List[T]:
        return list(self)

    def to_dict(self) -> Dict[str, T]:
        return {context.name: self._invoke(context) for context in self._contexts()}
