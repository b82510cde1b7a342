import pytest

from adapters.denotation.fuel_limit import FuelLimitDenotation
from adapters.interpreter.fuel_interpreter import FuelInterpreter
from adapters.natural.derivation_checker import DerivationChecker
from adapters.program_library.catalog import X, conditional, diverge, euclid, to_zero
from adapters.program_library.generator import ProgramGenerator
from contracts import (
    AssignCmd,
    IfCmd,
    LessEqualNode,
    NumberNode,
    PlusNode,
    SeqCmd,
    SkipCmd,
    State,
    Terminated,
    Undetermined,
    VariableNode,
    WhileCmd,
)
from ports.denotation import Denotation


def _denotation(max_budget: int = 1_000) -> FuelLimitDenotation:
    return FuelLimitDenotation(max_budget=max_budget)


def test_fuel_limit_denotation_satisfies_port():
    assert isinstance(_denotation(), Denotation)


def test_approximations_follow_interpreter():
    entry = euclid()
    approx = _denotation().approximations(entry.initial, entry.command, [0, 1, 500])
    assert [a.budget for a in approx] == [0, 1, 500]
    assert approx[0].state is None
    assert approx[1].state is None
    assert approx[2].state is not None


def test_least_budget_is_the_first_terminating_budget():
    den = _denotation()
    interp = FuelInterpreter()
    for entry in (conditional(), euclid()):
        least = den.least_budget(entry.initial, entry.command)
        assert least is not None
        assert interp.interp(least, entry.command, entry.initial) is not None
        assert interp.interp(least - 1, entry.command, entry.initial) is None
    assert den.least_budget(State.initial(), SkipCmd()) == 1
    assert den.least_budget(State.initial(), conditional().command) == 2


def test_least_budget_none_when_not_reached():
    den = _denotation(max_budget=300)
    assert den.least_budget(State.initial(), diverge().command) is None
    entry = euclid()
    assert den.least_budget(entry.initial, entry.command, upper=3) is None


def test_denote_divergent_loop_is_undetermined_at_ceiling():
    assert _denotation(400).denote(State.initial(), diverge().command) == Undetermined(budget=400)


def test_denote_basic_equations():
    den = _denotation()
    s = State.of({0: 4})
    assert den.denote(s, SkipCmd()) == Terminated(state=s)
    assign = AssignCmd(ident=1, expr=PlusNode(left=VariableNode(ident=0), right=NumberNode(value=1)))
    assert den.denote(s, assign) == Terminated(state=s.update(1, 5))


def test_denote_satisfies_compositional_equations_on_random_programs():
    gen = ProgramGenerator(seed=8)
    den = _denotation()
    for _ in range(120):
        command, state = gen.bounded_command(), gen.state()
        assert den.unfold(state, command) == den.denote(state, command)


def test_unfold_for_each_command_shape():
    den = _denotation()
    s = State.of({0: 2})
    one = AssignCmd(ident=1, expr=NumberNode(value=1))
    seq = SeqCmd(first=one, second=AssignCmd(ident=0, expr=VariableNode(ident=1)))
    branch = IfCmd(
        cond=LessEqualNode(left=VariableNode(ident=0), right=NumberNode(value=1)),
        then_branch=SkipCmd(),
        else_branch=one,
    )
    loop = to_zero().command
    for command in (SkipCmd(), one, seq, branch, loop):
        assert den.unfold(s, command) == den.denote(s, command)
    assert den.unfold(State.initial(), diverge().command) == den.denote(State.initial(), diverge().command)


def test_denote_agrees_with_big_step():
    gen = ProgramGenerator(seed=13)
    den = _denotation()
    natural = DerivationChecker()
    for _ in range(60):
        command, state = gen.bounded_command(), gen.state()
        outcome = den.denote(state, command)
        final = natural.exec_big(state, command, den.max_budget)
        assert isinstance(outcome, Terminated)
        assert final == outcome.state


def test_kleene_approximants_grow_towards_the_loop_meaning():
    loop = to_zero().command
    den = _denotation()
    start = State.of({X: 2})
    assert den.kleene(loop.cond, loop.body, 0)(start) is None
    assert den.kleene(loop.cond, loop.body, 2)(start) is None
    assert den.kleene(loop.cond, loop.body, 3)(start) == State.initial()
    # approksymanty są coraz bardziej określone i zgodne z denotacją
    for n in range(6):
        f = den.kleene(loop.cond, loop.body, n)
        for x in range(-2, 6):
            s = State.of({X: x})
            if f(s) is not None:
                assert f(s) == den.meaning(s, loop)
                assert den.kleene(loop.cond, loop.body, n + 1)(s) == f(s)


def test_kleene_rejects_negative_n():
    loop = to_zero().command
    with pytest.raises(ValueError):
        _denotation().kleene(loop.cond, loop.body, -1)


def test_any_fixpoint_agrees_where_loop_terminates():
    loop = to_zero().command
    den = _denotation(max_budget=300)
    states = [State.of({X: x}) for x in range(-3, 6)]

    # f jest określone wszędzie, także tam, gdzie pętla się nie kończy (x < 0)
    def everywhere_zero(s: State):
        return s.update(X, 0)

    assert den.is_fixpoint(loop.cond, loop.body, everywhere_zero, states)
    assert den.agrees_with(loop.cond, loop.body, everywhere_zero, states)
    assert den.meaning(State.of({X: -1}), loop) is None


def test_identity_is_not_a_fixpoint_of_countdown():
    loop = to_zero().command
    den = _denotation()
    assert not den.is_fixpoint(loop.cond, loop.body, lambda s: s, [State.of({X: 1})])
    assert not den.agrees_with(loop.cond, loop.body, lambda s: s, [State.of({X: 1})])


def test_while_functional_exits_when_guard_false():
    loop = WhileCmd(cond=LessEqualNode(left=NumberNode(value=1), right=VariableNode(ident=0)), body=SkipCmd())
    den = _denotation()
    functional = den.while_functional(loop.cond, loop.body, lambda s: None)
    assert functional(State.initial()) == State.initial()
    assert functional(State.of({0: 1})) is None
