"""
Process-wide defaults used by the factory functions.

Visitors built directly through InstanceVisitor always receive their
settings explicitly; these defaults only apply when a factory function is
called with kind=None or repeatable=None.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class AlgorithmKind(Enum):
    """How a store reads and writes members on the underlying instance.

    PRECISION goes through getattr/setattr, so properties, descriptors and
    overridden __getattribute__/__setattr__ all run.
    RAW goes through object.__getattribute__/object.__setattr__ and skips
    class-level attribute hooks (lazy resolution, validation, etc.).
    """
    PRECISION = "precision"
    RAW = "raw"


_default_algorithm_kind: AlgorithmKind = AlgorithmKind.PRECISION
_default_repeatable: bool = False


def set_default_algorithm_kind(kind: AlgorithmKind) -> None:
    """Set the algorithm kind used when a factory is called with kind=None."""
    global _default_algorithm_kind
    if not isinstance(kind, AlgorithmKind):
        raise TypeError(f"Expected AlgorithmKind, got {type(kind).__name__}")
    _default_algorithm_kind = kind
    logger.debug(f"Default algorithm kind set to {kind.name}")


def get_default_algorithm_kind() -> AlgorithmKind:
    """Get the algorithm kind used when a factory is called with kind=None."""
    return _default_algorithm_kind


def set_default_repeatable(repeatable: bool) -> None:
    """Set whether factory-built visitors record history by default."""
    global _default_repeatable
    _default_repeatable = bool(repeatable)
    logger.debug(f"Default repeatable set to {_default_repeatable}")


def get_default_repeatable() -> bool:
    """Get whether factory-built visitors record history by default."""
    return _default_repeatable


def reset_defaults() -> None:
    """Restore the built-in defaults (PRECISION, not repeatable)."""
    global _default_algorithm_kind, _default_repeatable
    _default_algorithm_kind = AlgorithmKind.PRECISION
    _default_repeatable = False
