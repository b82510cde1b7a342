import logging

import pytest

from adapters.interpreter.fuel_interpreter import FuelInterpreter, chain, to_outcome
from adapters.program_library.catalog import ACC, Q, R, S, X, conditional, diverge, euclid, factorial, summation
from adapters.program_library.generator import ProgramGenerator
from contracts import (
    AssignCmd,
    IfCmd,
    LessEqualNode,
    NumberNode,
    SeqCmd,
    SkipCmd,
    State,
    Terminated,
    Undetermined,
    WhileCmd,
)
from ports.interpreter import Interpreter


def _assign(ident: int, value: int) -> AssignCmd:
    return AssignCmd(ident=ident, expr=NumberNode(value=value))


def test_fuel_interpreter_satisfies_port():
    assert isinstance(FuelInterpreter(), Interpreter)


def test_budget_zero_is_undetermined_even_for_skip():
    interp = FuelInterpreter()
    assert interp.interp(0, SkipCmd(), State.initial()) is None
    assert interp.run(SkipCmd(), State.initial(), 0) == Undetermined(budget=0)


def test_budget_one_runs_skip_and_assign():
    interp = FuelInterpreter()
    assert interp.interp(1, SkipCmd(), State.of({0: 2})) == State.of({0: 2})
    assert interp.interp(1, _assign(0, 7), State.initial()) == State.of({0: 7})


def test_seq_spends_one_unit_then_budget_k_on_each_side():
    interp = FuelInterpreter()
    cmd = SeqCmd(first=_assign(0, 1), second=_assign(1, 2))
    assert interp.interp(1, cmd, State.initial()) is None
    assert interp.interp(2, cmd, State.initial()) == State.of({0: 1, 1: 2})


def test_seq_does_not_run_second_when_first_is_undetermined():
    calls = []

    class _Recording(FuelInterpreter):
        def _interp(self, budget, command, state):
            calls.append(command)
            return super()._interp(budget, command, state)

    second = _assign(1, 2)
    cmd = SeqCmd(first=diverge().command, second=second)
    assert _Recording().interp(10, cmd, State.initial()) is None
    assert second not in calls


def test_if_guard_costs_nothing_beyond_the_node():
    interp = FuelInterpreter()
    cmd = IfCmd(
        cond=LessEqualNode(left=NumberNode(value=1), right=NumberNode(value=2)),
        then_branch=_assign(0, 3),
        else_branch=_assign(0, 0),
    )
    assert interp.interp(1, cmd, State.initial()) is None
    assert interp.interp(2, cmd, State.initial()) == State.of({0: 3})


def test_conditional_assignment_sets_x_to_three():
    entry = conditional()
    outcome = FuelInterpreter().run(entry.command, State.initial(), 10)
    assert isinstance(outcome, Terminated)
    assert outcome.state.lookup(X) == 3


def test_euclid_quotient_and_remainder():
    entry = euclid()
    outcome = FuelInterpreter().run(entry.command, State.of({X: 101, 1: 7}), 1_000)
    assert isinstance(outcome, Terminated)
    assert outcome.state.lookup(Q) == 14
    assert outcome.state.lookup(R) == 3


def test_catalog_arithmetic_programs():
    interp = FuelInterpreter()
    fact = factorial()
    assert interp.run(fact.command, fact.initial).state.lookup(ACC) == 120
    total = summation()
    assert interp.run(total.command, total.initial).state.lookup(S) == 55


@pytest.mark.parametrize("budget", [0, 1, 2, 10, 100, 5_000])
def test_divergent_loop_is_undetermined_for_every_budget(budget):
    assert FuelInterpreter().run(diverge().command, State.initial(), budget) == Undetermined(budget=budget)


def test_large_budget_does_not_exhaust_python_stack():
    loop = WhileCmd(cond=LessEqualNode(left=NumberNode(value=0), right=NumberNode(value=0)), body=SkipCmd())
    assert FuelInterpreter().interp(50_000, loop, State.initial()) is None


def test_negative_budget_is_rejected():
    with pytest.raises(ValueError):
        FuelInterpreter().interp(-1, SkipCmd(), State.initial())


def test_run_uses_default_budget():
    outcome = FuelInterpreter(default_budget=3).run(diverge().command, State.initial())
    assert outcome == Undetermined(budget=3)


def test_run_logs_warning_when_budget_exhausted(caplog):
    with caplog.at_level(logging.WARNING, logger="impsem.interpreter"):
        FuelInterpreter().run(diverge().command, State.initial(), 5)
    assert any("5" in record.getMessage() for record in caplog.records)


def test_monotonic_in_budget_on_random_programs():
    gen = ProgramGenerator(seed=5)
    interp = FuelInterpreter()
    for _ in range(60):
        command, state = gen.command(), gen.state()
        first = None
        for budget in (0, 1, 2, 3, 5, 8, 13, 21, 34):
            result = interp.interp(budget, command, state)
            if first is not None:
                assert result == first
            elif result is not None:
                first = result


def test_chain_short_circuits_on_none():
    assert chain(None, lambda s: pytest.fail("continuation called")) is None
    s = State.of({0: 1})
    assert chain(s, lambda t: t.update(1, 2)) == State.of({0: 1, 1: 2})


def test_to_outcome():
    assert to_outcome(None, 7) == Undetermined(budget=7)
    assert to_outcome(State.initial(), 7) == Terminated(state=State.initial())
