"""Tests for the InstanceVisitor facade."""
import threading

import pytest

from objectreplay import (
    AlgorithmKind,
    EmptyRepeater,
    HistoryRepeater,
    InstanceStore,
    InstanceVisitor,
    InvalidArgumentError,
    MemberNotFoundError,
    MemberKind,
    for_type,
)


def test_construction_rejects_missing_store(point_type):
    """A visitor needs a store."""
    with pytest.raises(InvalidArgumentError):
        InstanceVisitor(None, point_type)


def test_construction_rejects_missing_source_type(point_type):
    """A visitor needs a source type."""
    with pytest.raises(InvalidArgumentError):
        InstanceVisitor(InstanceStore(point_type), None)


def test_construction_initializes_store(point_type):
    """The store's instance exists as soon as the visitor does."""
    visitor = InstanceVisitor(InstanceStore(point_type), point_type)
    assert visitor.instance == point_type()
    assert visitor.source_type is point_type
    assert visitor.algorithm_kind is AlgorithmKind.PRECISION
    assert not visitor.is_static


def test_initial_values_are_recorded(point_type):
    """Initial values go through the normal set path."""
    visitor = for_type(point_type, repeatable=True, initial_values={'x': 5, 'label': 'start'})

    assert visitor.get_value('x') == 5
    assert [op.name for op in visitor.history] == ['x', 'label']
    ok, result = visitor.try_repeat()
    assert ok
    assert result == point_type(x=5, label='start')


class TestGetAndSet:
    """Test get/set by name, selector and typed name."""

    def test_set_and_get_by_name(self, point_type):
        """set_value() is visible to get_value() immediately."""
        visitor = for_type(point_type)
        visitor.set_value('x', 3)
        assert visitor.get_value('x') == 3
        assert visitor.instance.x == 3

    def test_item_access(self, point_type):
        """Indexing reads and writes members."""
        visitor = for_type(point_type, repeatable=True)
        visitor['y'] = 8
        assert visitor['y'] == 8
        assert len(visitor.history) == 1

    def test_set_and_get_by_selector(self, point_type):
        """Selectors resolve to member names."""
        visitor = for_type(point_type, repeatable=True)
        visitor.set_value_by(lambda p: p.label, 'named')

        assert visitor.get_value_by(lambda p: p.label) == 'named'
        assert visitor.history.operations[0].name == 'label'

    def test_get_typed(self, point_type):
        """get_typed() checks the value's type."""
        visitor = for_type(point_type, initial_values={'x': 2})
        assert visitor.get_typed('x', int) == 2
        assert visitor.get_typed_by(lambda p: p.x, int) == 2
        with pytest.raises(TypeError):
            visitor.get_typed('label', int)

    def test_get_unknown_member(self, point_type):
        """Unknown names raise MemberNotFoundError."""
        visitor = for_type(point_type)
        with pytest.raises(MemberNotFoundError, match="no member 'missing'"):
            visitor.get_value('missing')

    def test_none_selector_set_is_ignored(self, point_type):
        """set_value_by(None, ...) is a silent no-op."""
        visitor = for_type(point_type, repeatable=True)
        visitor.set_value_by(None, 1)
        assert len(visitor.history) == 0
        assert visitor.instance == point_type()

    def test_none_selector_get_is_rejected(self, point_type):
        """get_value_by(None) raises."""
        visitor = for_type(point_type)
        with pytest.raises(InvalidArgumentError):
            visitor.get_value_by(None)
        with pytest.raises(InvalidArgumentError):
            visitor.get_typed_by(None, int)

    def test_set_values_in_order(self, point_type):
        """Batch set applies and records every pair."""
        visitor = for_type(point_type, repeatable=True)
        visitor.set_values({'x': 1, 'y': 2})
        assert visitor.instance == point_type(x=1, y=2)
        assert [op.name for op in visitor.history] == ['x', 'y']

    def test_set_values_none_rejected(self, point_type):
        """A None batch raises without mutating or recording."""
        visitor = for_type(point_type, repeatable=True)
        with pytest.raises(InvalidArgumentError):
            visitor.set_values(None)
        assert len(visitor.history) == 0
        assert visitor.instance == point_type()

    def test_contains(self, point_type):
        """contains() reflects the store."""
        visitor = for_type(point_type)
        assert visitor.contains('x')
        assert 'label' in visitor
        assert 'missing' not in visitor


class TestMembers:
    """Test enumeration and the snapshot."""

    def test_member_names(self, point_type):
        """Dataclass fields are listed in declaration order."""
        visitor = for_type(point_type)
        assert visitor.get_member_names() == ['x', 'y', 'label']

    def test_get_member(self, point_type):
        """get_member() returns the field descriptor."""
        member = for_type(point_type).get_member('x')
        assert member.name == 'x'
        assert member.member_type is int
        assert member.kind is MemberKind.FIELD
        assert member.can_write

    def test_get_member_unknown(self, point_type):
        """Unknown members raise MemberNotFoundError."""
        with pytest.raises(MemberNotFoundError):
            for_type(point_type).get_member('missing')

    def test_member_handler_built_once(self, point_type):
        """The member handler is created lazily and reused."""
        visitor = for_type(point_type)
        assert visitor._member_handler is None
        visitor.get_member_names()
        handler = visitor._member_handler
        visitor.get_member('x')
        assert visitor._member_handler is handler

    def test_to_dict_reflects_store_not_history(self, point_type):
        """to_dict() reads current values for every known member."""
        visitor = for_type(point_type, repeatable=True)
        visitor.set_value('x', 4)
        visitor.instance.y = 9  # changed behind the visitor's back

        assert visitor.to_dict() == {'x': 4, 'y': 9, 'label': ''}
        assert len(visitor.history) == 1


class TestReplay:
    """Test the try_repeat forms and for_repeat()."""

    def test_record_replay_equivalence(self, pipeline_config_type):
        """Replaying gives the same values the visitor holds."""
        visitor = for_type(pipeline_config_type, repeatable=True)
        visitor.set_value('batch_size', 128)
        visitor.set_value('learning_rate', 0.1)
        visitor.set_value('tags', ['a'])
        visitor.set_value('output_dir', '/data')

        ok, result = visitor.try_repeat()
        assert ok
        assert result == visitor.instance
        assert result is not visitor.instance

    def test_replay_captures_call_time_value(self, pipeline_config_type):
        """In-place changes after set_value() do not reach the replay."""
        visitor = for_type(pipeline_config_type, repeatable=True)
        tags = ['a']
        visitor.set_value('tags', tags)
        tags.append('b')

        assert visitor.get_value('tags') == ['a', 'b']
        _, result = visitor.try_repeat()
        assert result.tags == ['a']

    def test_uncopyable_value_replayed_by_reference(self):
        """Values deepcopy rejects (locks) are still recorded and replayed."""
        class Holder:
            lock = None

        lock = threading.Lock()
        visitor = for_type(Holder, repeatable=True)
        visitor.set_value('lock', lock)

        assert visitor.get_value('lock') is lock
        assert len(visitor.history) == 1
        ok, result = visitor.try_repeat()
        assert ok
        assert result.lock is lock

    def test_editing_history_values_does_not_change_replay(self, pipeline_config_type):
        """Values read back from the history are copies."""
        visitor = for_type(pipeline_config_type, repeatable=True)
        visitor.set_value('tags', ['a'])

        visitor.history.operations[0].value.append('x')
        visitor.history.to_list()[0]['value'].append('y')
        for operation in visitor.history:
            operation.value.append('z')

        _, result = visitor.try_repeat()
        assert result.tags == ['a']

    def test_append_order_determinism(self, point_type):
        """Last write by recording order wins."""
        visitor = for_type(point_type, repeatable=True)
        visitor.set_value('x', 1)
        visitor.set_value('y', 2)
        visitor.set_value('x', 3)

        _, result = visitor.try_repeat()
        assert (result.x, result.y) == (3, 2)

    def test_replay_is_idempotent(self, point_type):
        """Replaying twice gives equal, independent instances and keeps the log."""
        visitor = for_type(point_type, repeatable=True, initial_values={'x': 1})
        _, first = visitor.try_repeat()
        _, second = visitor.try_repeat()
        assert first == second
        assert first is not second
        assert len(visitor.history) == 1

    def test_try_repeat_onto(self, point_type):
        """The supplied instance receives the log on top of its own state."""
        visitor = for_type(point_type, repeatable=True, initial_values={'x': 1})
        existing = point_type(y=5)

        ok, result = visitor.try_repeat_onto(existing)
        assert ok
        assert result is existing
        assert existing == point_type(x=1, y=5)

    def test_try_repeat_with_overrides(self, point_type):
        """Overrides seed names the log never sets."""
        visitor = for_type(point_type, repeatable=True)
        visitor.set_value('x', 9)

        ok, result = visitor.try_repeat_with({'x': 1, 'y': 2})
        assert ok
        assert (result.x, result.y) == (9, 2)

    def test_no_history_never_replays(self, point_type):
        """Without tracking every try_repeat form reports failure."""
        visitor = for_type(point_type, repeatable=False)
        for i in range(5):
            visitor.set_value('x', i)

        assert not visitor.is_repeatable
        assert visitor.history is None
        assert visitor.try_repeat() == (False, None)
        assert visitor.try_repeat_onto(point_type()) == (False, None)
        assert visitor.try_repeat_with({'x': 1}) == (False, None)
        assert isinstance(visitor.for_repeat(), EmptyRepeater)

    def test_for_repeat_active_handle(self, point_type):
        """for_repeat() defers the choice of replay form."""
        visitor = for_type(point_type, repeatable=True)
        handle = visitor.for_repeat()
        visitor.set_value('x', 2)  # recorded after the handle was taken

        assert isinstance(handle, HistoryRepeater)
        assert handle.repeat().x == 2
        assert handle.repeat_with({'y': 3}) == point_type(x=2, y=3)

    def test_raw_visitor_replays_raw(self):
        """RAW visitors bypass __setattr__ hooks both live and on replay."""
        class Shouting:
            def __init__(self):
                object.__setattr__(self, 'name', '')

            def __setattr__(self, name, value):
                object.__setattr__(self, name, value.upper())

        visitor = for_type(Shouting, kind=AlgorithmKind.RAW, repeatable=True)
        visitor.set_value('name', 'quiet')
        assert visitor.get_value('name') == 'quiet'
        _, result = visitor.try_repeat()
        assert result.name == 'quiet'

    def test_repr(self, point_type):
        """repr shows type, kind and tracking state."""
        assert 'tracking' in repr(for_type(point_type, repeatable=True))
        assert 'inert' in repr(for_type(point_type))
