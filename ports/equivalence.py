"""
Port: EquivalenceChecker
Odpowiedzialność: sprawdzanie zgodności semantyk i ich niezmienników.
"""
from typing import Iterable, Protocol, runtime_checkable

from contracts import (
    AExp,
    BExp,
    Command,
    Configuration,
    EquivalenceReport,
    State,
    ValidationIssue,
)
from ports.denotation import StateFn


@runtime_checkable
class EquivalenceChecker(Protocol):
    def check_determinism(self, config: Configuration) -> list[ValidationIssue]:
        """
        Reports a configuration with more than one successor, or a
        non-Skip configuration with none.
        Returns list of ValidationIssue; empty = invariant holds here.
        """
        ...

    def check_monotonicity(
        self,
        command: Command,
        state: State,
        budgets: Iterable[int],
    ) -> list[ValidationIssue]:
        """
        Reports any budget at which an earlier terminated result changes
        or disappears.
        """
        ...

    def check_optimizer(
        self,
        expr: AExp,
        states: Iterable[State],
    ) -> list[ValidationIssue]:
        """
        Reports every state in which the optimised expression evaluates
        differently from the original.
        """
        ...

    def check_fixpoint(
        self,
        cond: BExp,
        body: Command,
        f: StateFn,
        states: Iterable[State],
    ) -> list[ValidationIssue]:
        """
        Checks that f satisfies the while equation on states and agrees
        with the denotation wherever the denotation terminates.
        """
        ...

    def compare(
        self,
        command: Command,
        state: State,
        budget: int,
        max_steps: int,
    ) -> EquivalenceReport:
        """
        Runs all semantics on (state, command) and reports their outcomes.
        Two terminated outcomes with different states is an error;
        terminated vs undetermined is a warning (budgets of different
        semantics are not comparable).
        """
        ...
