"""
Property selectors: turn `lambda o: o.name` (and friends) into "name".

Accepted selector forms:
- str: returned unchanged
- property: the getter's __name__
- dataclasses.Field: the field's name
- any callable taking one argument, e.g. `lambda o: o.name` or
  `operator.attrgetter("name")`, which is run against a recording proxy
"""

import dataclasses
from typing import Any, List

from objectreplay.errors import InvalidArgumentError


class _MemberRecorder:
    """Stand-in object that records every attribute looked up on it.

    Chained lookups return the same recorder, so `o.a.b` records ['a', 'b'].
    """

    def __init__(self):
        object.__setattr__(self, '_objectreplay_accessed', [])

    def __getattr__(self, name: str) -> Any:
        self._objectreplay_accessed.append(name)
        return self

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Selectors must read a member, not assign one")


def _record_access(selector: Any) -> List[str]:
    recorder = _MemberRecorder()
    try:
        selector(recorder)
    except Exception as e:
        raise InvalidArgumentError(f"Selector {selector!r} could not be evaluated: {e}") from e
    return object.__getattribute__(recorder, '_objectreplay_accessed')


def resolve_member_name(selector: Any) -> str:
    """Resolve a property selector to the member name it reads.

    Raises:
        InvalidArgumentError: selector is None, of an unsupported kind, or a
            callable that does not read exactly one member.
    """
    if selector is None:
        raise InvalidArgumentError("selector must not be None")

    if isinstance(selector, str):
        if not selector:
            raise InvalidArgumentError("selector must not be an empty string")
        return selector

    if isinstance(selector, property):
        if selector.fget is None:
            raise InvalidArgumentError("Cannot resolve a property without a getter")
        return selector.fget.__name__

    if isinstance(selector, dataclasses.Field):
        return selector.name

    if callable(selector):
        accessed = _record_access(selector)
        if len(accessed) != 1:
            path = '.'.join(accessed) or '<nothing>'
            raise InvalidArgumentError(f"Selector must read exactly one member, read {path}")
        return accessed[0]

    raise InvalidArgumentError(f"Unsupported selector type: {type(selector).__name__}")
