import copy

import pytest

from contracts import DEFAULT_VALUE, State


def test_update_then_lookup_reads_back_written_values():
    base = State.of({3: 42})
    s = base.update(0, 5).update(1, 9)
    assert s.lookup(0) == 5
    assert s.lookup(1) == 9
    # pozostałe identyfikatory jak w stanie bazowym
    assert s.lookup(3) == 42
    assert s.lookup(77) == base.lookup(77) == DEFAULT_VALUE


def test_update_does_not_modify_base_state():
    base = State.initial()
    base.update(0, 5)
    assert base.lookup(0) == 0
    assert base.bindings == {}


def test_later_update_of_same_ident_wins():
    s = State.initial().update(0, 1).update(0, 2)
    assert s.lookup(0) == 2


def test_state_equality_is_extensional():
    # jawne zero nie różni się od braku wpisu
    assert State.of({0: 0, 1: 4}) == State.of({1: 4})
    assert State.initial().update(2, 7).update(2, 0) == State.initial()
    assert State.of({1: 4, 0: 3}) == State.of({0: 3, 1: 4})


def test_equal_states_hash_equal():
    a = State.of({0: 1, 1: 0})
    b = State.initial().update(0, 1)
    assert hash(a) == hash(b)
    assert len({a, b}) == 1


def test_state_json_roundtrip_keeps_int_keys():
    s = State.of({0: 5, 12: -3})
    restored = State.model_validate_json(s.model_dump_json())
    assert restored == s
    assert restored.lookup(12) == -3


def test_bindings_cannot_be_mutated_in_place():
    s = State.of({0: 1})
    h = hash(s)
    with pytest.raises(TypeError):
        s.bindings[0] = 5
    with pytest.raises(TypeError):
        s.bindings.update({1: 2})
    with pytest.raises(TypeError):
        del s.bindings[0]
    with pytest.raises(TypeError):
        s.bindings.pop(0)
    with pytest.raises(TypeError):
        State().bindings[3] = 1
    assert s.lookup(0) == 1
    assert hash(s) == h


def test_read_only_state_still_copies():
    s = State.of({0: 1, 2: -4})
    assert copy.deepcopy(s) == s
    assert copy.copy(s).bindings == {0: 1, 2: -4}
    assert s.update(0, 0).bindings == {2: -4}
