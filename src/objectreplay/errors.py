"""
Exception types for objectreplay.
"""


class ObjectReplayError(Exception):
    """Base class for all objectreplay errors."""
    pass


class InvalidArgumentError(ObjectReplayError, ValueError):
    """Raised when a required argument is missing or malformed."""
    pass


class MemberNotFoundError(ObjectReplayError, AttributeError, KeyError):
    """Raised when a member name is not known to a store or member handler.

    Subclasses both AttributeError and KeyError so callers can catch it the
    same way they catch a missing attribute or a missing mapping key.
    """

    def __init__(self, source_type: type, name: str):
        type_name = getattr(source_type, '__name__', str(source_type))
        super().__init__(f"{type_name} has no member '{name}'")
        self.source_type = source_type
        self.member_name = name

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]
