from adapters.denotation.fuel_limit import FuelLimitDenotation
from adapters.interpreter.fuel_interpreter import FuelInterpreter
from adapters.program_library.catalog import X, conditional, diverge, euclid, list_programs, to_zero
from adapters.program_library.generator import ProgramGenerator
from adapters.equivalence.semantics_validator import SemanticsValidator
from contracts import Configuration, State, Terminated, Undetermined
from ports.equivalence import EquivalenceChecker


def test_semantics_validator_satisfies_port():
    assert isinstance(SemanticsValidator(), EquivalenceChecker)


def test_all_semantics_agree_on_terminating_catalog_programs():
    validator = SemanticsValidator()
    for entry in list_programs():
        if entry.name in ("diverge",):
            continue
        report = validator.compare(entry.command, entry.initial, budget=1_000, max_steps=100_000)
        assert report.agree, (entry.name, report.issues)
        assert report.issues == []
        assert isinstance(report.small_step, Terminated)
        assert report.small_step == report.big_step == report.interpreter == report.denotation
        assert report.least_budget is not None


def test_divergent_program_is_undetermined_everywhere():
    report = SemanticsValidator().compare(diverge().command, State.initial(), budget=100, max_steps=500)
    assert report.agree
    assert report.small_step == Undetermined(budget=500)
    assert report.big_step == Undetermined(budget=100)
    assert report.interpreter == Undetermined(budget=100)
    assert isinstance(report.denotation, Undetermined)
    assert report.least_budget is None


def test_all_semantics_agree_on_random_terminating_programs():
    gen = ProgramGenerator(seed=42)
    validator = SemanticsValidator()
    for _ in range(40):
        report = validator.compare(gen.bounded_command(), gen.state(), budget=1_000, max_steps=100_000)
        assert report.agree
        assert report.issues == []
        assert isinstance(report.small_step, Terminated)


def test_no_state_mismatch_on_random_programs_with_unbounded_loops():
    gen = ProgramGenerator(seed=5)
    interpreter = FuelInterpreter()
    validator = SemanticsValidator(
        interpreter=interpreter,
        denotation=FuelLimitDenotation(interpreter, max_budget=60),
    )
    for _ in range(40):
        report = validator.compare(gen.command(), gen.state(), budget=40, max_steps=2_000)
        assert report.agree, report.issues
        assert {i.code for i in report.issues} <= {"BUDGET_MISMATCH"}

    report = validator.compare(to_zero().command, State.of({X: -1}), budget=40, max_steps=2_000)
    assert report.agree
    assert report.issues == []
    assert report.least_budget is None

def test_small_budget_is_reported_as_warning_not_disagreement():
    entry = euclid()
    report = SemanticsValidator().compare(entry.command, entry.initial, budget=3, max_steps=100_000)
    assert report.agree
    assert isinstance(report.interpreter, Undetermined)
    assert isinstance(report.small_step, Terminated)
    assert [i.code for i in report.issues] == ["BUDGET_MISMATCH"]
    assert report.issues[0].severity == "warning"


class _OffByOneInterpreter(FuelInterpreter):
    def run(self, command, state, budget=None):
        outcome = super().run(command, state, budget)
        if isinstance(outcome, Terminated):
            return Terminated(state=outcome.state.update(X, outcome.state.lookup(X) + 1))
        return outcome


def test_disagreeing_interpreter_is_detected():
    entry = conditional()
    validator = SemanticsValidator(interpreter=_OffByOneInterpreter())
    report = validator.compare(entry.command, entry.initial, budget=100, max_steps=100)
    assert not report.agree
    mismatch = [i for i in report.issues if i.code == "STATE_MISMATCH"]
    assert [i.field_path for i in mismatch] == ["interpreter"]


def test_check_determinism_on_random_configurations():
    gen = ProgramGenerator(seed=9)
    validator = SemanticsValidator()
    for _ in range(100):
        config = Configuration(command=gen.command(), state=gen.state())
        assert validator.check_determinism(config) == []


def test_check_monotonicity_holds_for_interpreter():
    entry = euclid()
    issues = SemanticsValidator().check_monotonicity(
        entry.command, entry.initial, [5_000, 0, 5, 50, 500],
    )
    assert issues == []


class _ForgetfulInterpreter(FuelInterpreter):
    def interp(self, budget, command, state):
        if budget > 100:
            return None
        return super().interp(budget, command, state)


def test_check_monotonicity_reports_lost_result():
    validator = SemanticsValidator(interpreter=_ForgetfulInterpreter())
    issues = validator.check_monotonicity(conditional().command, State.initial(), [10, 1_000])
    assert [i.code for i in issues] == ["MONOTONICITY_VIOLATION"]
    assert issues[0].field_path == "budget=1000"


def test_check_optimizer_on_random_expressions():
    gen = ProgramGenerator(seed=2)
    validator = SemanticsValidator()
    states = [gen.state() for _ in range(5)]
    for _ in range(100):
        assert validator.check_optimizer(gen.aexp(), states) == []


def test_check_fixpoint():
    loop = to_zero().command
    validator = SemanticsValidator()
    states = [State.of({X: x}) for x in range(0, 6)]
    assert validator.check_fixpoint(loop.cond, loop.body, lambda s: s.update(X, 0), states) == []

    issues = validator.check_fixpoint(loop.cond, loop.body, lambda s: s, states)
    assert [(i.code, i.severity) for i in issues] == [("NOT_A_FIXPOINT", "warning")]
