"""
Mutation history and replay for dynamically addressed objects.

objectreplay lets you read and write the named members of any object through
one facade, optionally recording every write as an ordered operation log that
can later be replayed onto a brand-new instance.

Key Features:
- Uniform get/set by name, by typed name, or by property selector
- Append-only history of assignments with call-time value capture
- Three replay forms: fresh instance, supplied instance, override-seeded
- Lazily resolved, cached member metadata
- ForEach/Select adapters over all members

Quick Start:
    >>> from dataclasses import dataclass
    >>> from objectreplay import for_type
    >>>
    >>> @dataclass
    ... class Point:
    ...     x: int = 0
    ...     y: int = 0
    >>>
    >>> visitor = for_type(Point, repeatable=True)
    >>> visitor.set_value('x', 3)
    >>> visitor.set_value_by(lambda p: p.y, 4)
    >>> ok, replayed = visitor.try_repeat()
    >>> replayed
    Point(x=3, y=4)

Modules:
    - visitor: InstanceVisitor facade
    - history: Assign command and HistoryLog replay engine
    - repeater: active and empty replay handles
    - store: backing stores (instance, mapping, class)
    - members: member descriptors and metadata cache
    - selector: property-selector resolution
    - looper: ForEach/Select adapters
    - factory: convenience constructors
    - config: process-wide defaults
"""

# Errors
from objectreplay.errors import (
    ObjectReplayError,
    InvalidArgumentError,
    MemberNotFoundError,
)

# Configuration
from objectreplay.config import (
    AlgorithmKind,
    set_default_algorithm_kind,
    get_default_algorithm_kind,
    set_default_repeatable,
    get_default_repeatable,
    reset_defaults,
)

# Stores
from objectreplay.store import (
    ValueStore,
    InstanceStore,
    MappingStore,
    ClassStore,
    create_store,
    construct_instance,
)

# Members
from objectreplay.members import (
    Member,
    MemberKind,
    MemberHandler,
    get_type_members,
    clear_member_cache,
)

# Selector
from objectreplay.selector import resolve_member_name

# History
from objectreplay.history import Assign, HistoryLog

# Replay handles
from objectreplay.repeater import Repeater, HistoryRepeater, EmptyRepeater

# Adapters
from objectreplay.looper import LoopContext, Looper, Selector

# Facade
from objectreplay.visitor import InstanceVisitor

# Factory
from objectreplay.factory import for_type, for_instance, for_mapping, for_class

__all__ = [
    # Errors
    'ObjectReplayError',
    'InvalidArgumentError',
    'MemberNotFoundError',
    # Configuration
    'AlgorithmKind',
    'set_default_algorithm_kind',
    'get_default_algorithm_kind',
    'set_default_repeatable',
    'get_default_repeatable',
    'reset_defaults',
    # Stores
    'ValueStore',
    'InstanceStore',
    'MappingStore',
    'ClassStore',
    'create_store',
    'construct_instance',
    # Members
    'Member',
    'MemberKind',
    'MemberHandler',
    'get_type_members',
    'clear_member_cache',
    # Selector
    'resolve_member_name',
    # History
    'Assign',
    'HistoryLog',
    # Replay handles
    'Repeater',
    'HistoryRepeater',
    'EmptyRepeater',
    # Adapters
    'LoopContext',
    'Looper',
    'Selector',
    # Facade
    'InstanceVisitor',
    # Factory
    'for_type',
    'for_instance',
    'for_mapping',
    'for_class',
]

__version__ = '1.0.0'
__description__ = 'Mutation history and replay for dynamically addressed objects'
