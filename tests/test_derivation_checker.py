import pytest

from adapters.interpreter.fuel_interpreter import FuelInterpreter
from adapters.natural.derivation_checker import (
    DerivationChecker,
    flatten_derivation,
    unflatten_derivation,
)
from adapters.program_library.catalog import Q, R, X, conditional, countdown, diverge, euclid
from adapters.program_library.generator import ProgramGenerator
from contracts import (
    AssignCmd,
    Derivation,
    NumberNode,
    SeqCmd,
    SkipCmd,
    State,
)
from ports.natural import NaturalSemantics


def _assign(ident: int, value: int) -> AssignCmd:
    return AssignCmd(ident=ident, expr=NumberNode(value=value))


def _codes(issues) -> set[str]:
    return {i.code for i in issues}


def test_derivation_checker_satisfies_port():
    assert isinstance(DerivationChecker(), NaturalSemantics)


def test_conditional_derivation_uses_if_true():
    entry = conditional()
    d = DerivationChecker().derive(10, State.initial(), entry.command)
    assert d is not None
    assert d.rule == "if_true"
    assert d.premises[0].rule == "assign"
    assert d.post.lookup(X) == 3
    assert DerivationChecker().verify(d) == []


def test_euclid_derivation_is_valid():
    entry = euclid()
    checker = DerivationChecker()
    d = checker.derive(1_000, entry.initial, entry.command)
    assert d is not None
    assert checker.holds(d)
    assert d.post.lookup(Q) == 14
    assert d.post.lookup(R) == 3
    assert checker.relates(entry.initial, entry.command, d.post, 1_000)


def test_divergent_loop_has_no_derivation():
    checker = DerivationChecker()
    for budget in (0, 1, 10, 500):
        assert checker.derive(budget, State.initial(), diverge().command) is None
        assert checker.exec_big(State.initial(), diverge().command, budget) is None
        assert not checker.relates(State.initial(), diverge().command, State.initial(), budget)


def test_derive_matches_interpreter_on_random_programs():
    gen = ProgramGenerator(seed=21)
    checker = DerivationChecker()
    interp = FuelInterpreter()
    for _ in range(80):
        command, state = gen.command(), gen.state()
        for budget in (1, 4, 12, 30):
            assert checker.exec_big(state, command, budget) == interp.interp(budget, command, state)


def test_derivations_from_same_start_agree():
    entry = euclid()
    checker = DerivationChecker()
    small = checker.derive(200, entry.initial, entry.command)
    large = checker.derive(2_000, entry.initial, entry.command)
    assert small is not None and large is not None
    assert small.post == large.post
    assert small == large


def test_long_loop_derivation_builds_and_verifies():
    entry = countdown()
    start = State.of({X: 3_000})
    checker = DerivationChecker()
    d = checker.derive(5_000, start, entry.command)
    assert d is not None
    assert d.post.lookup(X) == 0
    assert checker.verify(d) == []


def test_tampered_conclusion_is_reported_at_root():
    checker = DerivationChecker()
    d = checker.derive(5, State.initial(), _assign(0, 4))
    forged = d.model_copy(update={"post": State.of({0: 5})})
    issues = checker.verify(forged)
    assert _codes(issues) == {"CONCLUSION_STATE"}
    assert issues[0].field_path == "root"


def test_wrong_if_rule_is_a_guard_error():
    entry = conditional()
    checker = DerivationChecker()
    d = checker.derive(10, State.initial(), entry.command)
    forged = d.model_copy(update={"rule": "if_false"})
    assert "GUARD_VALUE" in _codes(checker.verify(forged))


def test_premise_from_wrong_state_is_reported_with_path():
    checker = DerivationChecker()
    cmd = SeqCmd(first=_assign(0, 1), second=_assign(1, 2))
    d = checker.derive(5, State.initial(), cmd)
    stray = checker.derive(5, State.of({0: 9}), _assign(1, 2))
    forged = d.model_copy(update={"premises": (d.premises[0], stray)})
    issues = checker.verify(forged)
    assert "PREMISE_STATE" in _codes(issues)
    assert all(i.field_path == "root" for i in issues)


def test_nested_error_path_points_at_premise():
    checker = DerivationChecker()
    cmd = SeqCmd(first=_assign(0, 1), second=SkipCmd())
    d = checker.derive(5, State.initial(), cmd)
    bad_first = d.premises[0].model_copy(update={"post": State.of({0: 2})})
    forged = d.model_copy(update={"premises": (bad_first, d.premises[1])})
    paths = {i.field_path for i in checker.verify(forged)}
    assert "root.premises[0]" in paths


def test_rule_shape_errors():
    checker = DerivationChecker()
    s = State.initial()
    wrong_rule = Derivation(rule="skip", command=_assign(0, 1), pre=s, post=s)
    assert _codes(checker.verify(wrong_rule)) == {"RULE_MISMATCH"}

    cmd = SeqCmd(first=SkipCmd(), second=SkipCmd())
    missing = Derivation(rule="seq", command=cmd, pre=s, post=s)
    assert _codes(checker.verify(missing)) == {"PREMISE_COUNT"}


def test_negative_budget_is_rejected():
    with pytest.raises(ValueError):
        DerivationChecker().derive(-1, State.initial(), SkipCmd())


def test_flatten_keeps_premises_after_their_node():
    entry = euclid()
    d = DerivationChecker().derive(1_000, entry.initial, entry.command)
    nodes = flatten_derivation(d)
    assert nodes[0].rule == d.rule
    assert nodes[0].post == d.post
    for i, node in enumerate(nodes):
        assert all(j > i for j in node.premises)
    assert unflatten_derivation(nodes) == d


def test_long_loop_survives_flat_form():
    checker = DerivationChecker()
    d = checker.derive(5000, State.of({X: 3000}), countdown().command)
    nodes = flatten_derivation(d)
    assert len(nodes) == 1 + 2 * 3000
    rebuilt = unflatten_derivation(nodes)
    assert rebuilt.post == State.initial()
    assert checker.verify(rebuilt) == []


def test_unflatten_rejects_bad_node_lists():
    d = DerivationChecker().derive(10, State.initial(), SeqCmd(first=_assign(X, 1), second=SkipCmd()))
    nodes = flatten_derivation(d)
    assert [n.premises for n in nodes] == [(1, 2), (), ()]

    with pytest.raises(ValueError):
        unflatten_derivation([])
    with pytest.raises(ValueError, match="indeks"):
        unflatten_derivation([nodes[0].model_copy(update={"premises": (0, 2)})] + nodes[1:])
    with pytest.raises(ValueError, match="więcej niż raz"):
        unflatten_derivation([nodes[0].model_copy(update={"premises": (1, 1)})] + nodes[1:])
    with pytest.raises(ValueError, match="nieosiągalne"):
        unflatten_derivation(nodes + [nodes[2]])
