"""
Adapter: SemanticsValidator
Implementuje port EquivalenceChecker - sprawdzanie niezmienników łączących
cztery semantyki IMP oraz porównanie ich wyników na konkretnym programie.

Kody problemów:
  NONDETERMINISTIC_STEP   - konfiguracja ma więcej niż jeden następnik
  STUCK_CONFIGURATION     - komenda różna od skip bez następnika
  MONOTONICITY_VIOLATION  - większy budżet zmienił/utracił wynik
  OPTIMIZER_UNSOUND       - optymalizacja zmieniła wartość wyrażenia
  NOT_A_FIXPOINT          - f nie spełnia równania pętli (ostrzeżenie)
  FIXPOINT_DISAGREES      - punkt stały różny od denotacji tam, gdzie ona się kończy
  INVALID_DERIVATION      - zbudowane wyprowadzenie nie przechodzi weryfikacji
  STATE_MISMATCH          - dwie semantyki zakończyły się w różnych stanach
  BUDGET_MISMATCH         - część semantyk zakończyła się, część nie (ostrzeżenie)
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from adapters.denotation.fuel_limit import FuelLimitDenotation
from adapters.evaluator.imp_evaluator import ImpEvaluator
from adapters.interpreter.fuel_interpreter import FuelInterpreter
from adapters.natural.derivation_checker import DerivationChecker
from adapters.optimizer.zero_plus import optimize_zero_plus
from adapters.small_step.structural_stepper import StructuralStepper
from contracts import (
    AExp,
    BExp,
    Command,
    Configuration,
    EquivalenceReport,
    Outcome,
    SkipCmd,
    State,
    Terminated,
    Undetermined,
    ValidationIssue,
)
from ports.denotation import Denotation, StateFn
from ports.evaluator import Evaluator
from ports.interpreter import Interpreter
from ports.natural import NaturalSemantics
from ports.small_step import SmallStepSemantics

logger = logging.getLogger("impsem.equivalence")


class SemanticsValidator:
    """Zgodność semantyk: determinizm, monotoniczność, punkt stały, równoważność."""

    def __init__(
        self,
        evaluator: Optional[Evaluator] = None,
        stepper: Optional[SmallStepSemantics] = None,
        natural: Optional[NaturalSemantics] = None,
        interpreter: Optional[Interpreter] = None,
        denotation: Optional[Denotation] = None,
    ) -> None:
        self._eval = evaluator or ImpEvaluator()
        self._stepper = stepper or StructuralStepper(self._eval)
        self._natural = natural or DerivationChecker(self._eval)
        self._interp = interpreter or FuelInterpreter(self._eval)
        self._denotation = denotation or FuelLimitDenotation(self._interp, self._eval)

    # -- EquivalenceChecker protocol ---------------------------------------

    def check_determinism(self, config: Configuration) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        found = self._stepper.successors(config)

        if len(found) > 1:
            issues.append(ValidationIssue(
                severity="error", code="NONDETERMINISTIC_STEP",
                message=f"Konfiguracja ma {len(found)} następników.",
                field_path="command",
            ))
        if not found and not isinstance(config.command, SkipCmd):
            issues.append(ValidationIssue(
                severity="error", code="STUCK_CONFIGURATION",
                message=f"Komenda {config.command.node_type!r} nie ma następnika.",
                field_path="command",
            ))
        return issues

    def check_monotonicity(
        self,
        command: Command,
        state: State,
        budgets: Iterable[int],
    ) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        first: Optional[tuple[int, State]] = None

        for budget in sorted(budgets):
            result = self._interp.interp(budget, command, state)
            if first is None:
                if result is not None:
                    first = (budget, result)
                continue
            if result != first[1]:
                issues.append(ValidationIssue(
                    severity="error", code="MONOTONICITY_VIOLATION",
                    message=(
                        f"Budżet {first[0]} dał stan końcowy, "
                        f"a budżet {budget} dał inny wynik."
                    ),
                    field_path=f"budget={budget}",
                ))
        return issues

    def check_optimizer(
        self,
        expr: AExp,
        states: Iterable[State],
    ) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        optimized = optimize_zero_plus(expr)
        for i, s in enumerate(states):
            before = self._eval.eval_aexp(s, expr)
            after = self._eval.eval_aexp(s, optimized)
            if before != after:
                issues.append(ValidationIssue(
                    severity="error", code="OPTIMIZER_UNSOUND",
                    message=f"Wartość zmieniona z {before} na {after}.",
                    field_path=f"states[{i}]",
                ))
        return issues

    def check_fixpoint(
        self,
        cond: BExp,
        body: Command,
        f: StateFn,
        states: Iterable[State],
    ) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        states = list(states)

        if not self._denotation.is_fixpoint(cond, body, f, states):
            issues.append(ValidationIssue(
                severity="warning", code="NOT_A_FIXPOINT",
                message="Funkcja nie spełnia równania pętli na podanych stanach.",
            ))
            return issues

        if not self._denotation.agrees_with(cond, body, f, states):
            issues.append(ValidationIssue(
                severity="error", code="FIXPOINT_DISAGREES",
                message="Punkt stały różni się od denotacji tam, gdzie ta się kończy.",
            ))
        return issues

    def compare(
        self,
        command: Command,
        state: State,
        budget: int,
        max_steps: int,
    ) -> EquivalenceReport:
        trace = self._stepper.trace(
            Configuration(command=command, state=state), max_steps, record=False,
        )
        small: Outcome = (
            Terminated(state=trace.final.state) if trace.terminated
            else Undetermined(budget=max_steps)
        )

        issues: list[ValidationIssue] = []
        derivation = self._natural.derive(budget, state, command)
        if derivation is None:
            big: Outcome = Undetermined(budget=budget)
        else:
            big = Terminated(state=derivation.post)
            problems = self._natural.verify(derivation)
            if problems:
                issues.append(ValidationIssue(
                    severity="error", code="INVALID_DERIVATION",
                    message=f"Wyprowadzenie ma {len(problems)} błędów: {problems[0].message}",
                    field_path="big_step",
                ))

        interp = self._interp.run(command, state, budget)
        denotation = self._denotation.denote(state, command)
        least = self._denotation.least_budget(state, command)

        outcomes = {
            "small_step": small,
            "big_step": big,
            "interpreter": interp,
            "denotation": denotation,
        }
        issues.extend(_compare_outcomes(outcomes))

        report = EquivalenceReport(
            initial=state,
            small_step=small,
            steps_taken=trace.steps,
            big_step=big,
            interpreter=interp,
            denotation=denotation,
            least_budget=least,
            agree=not any(i.severity == "error" for i in issues),
            issues=issues,
        )
        logger.debug("compare: agree=%s, issues=%d", report.agree, len(issues))
        return report


def _compare_outcomes(outcomes: dict[str, Outcome]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    terminated = {k: o.state for k, o in outcomes.items() if isinstance(o, Terminated)}

    if terminated:
        ref_name, ref_state = next(iter(terminated.items()))
        for name, s in terminated.items():
            if s != ref_state:
                issues.append(ValidationIssue(
                    severity="error", code="STATE_MISMATCH",
                    message=f"{name} i {ref_name} zakończyły się w różnych stanach.",
                    field_path=name,
                ))

    undetermined = [k for k, o in outcomes.items() if isinstance(o, Undetermined)]
    if terminated and undetermined:
        issues.append(ValidationIssue(
            severity="warning", code="BUDGET_MISMATCH",
            message=(
                f"Nieustalone w swoim budżecie: {', '.join(undetermined)}; "
                f"zakończone: {', '.join(terminated)}."
            ),
        ))
    return issues
