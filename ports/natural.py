"""
Port: NaturalSemantics
Odpowiedzialność: relacja dużych kroków jako sprawdzalne drzewa wyprowadzeń.
"""
from typing import Optional, Protocol, runtime_checkable

from contracts import Command, Derivation, State, ValidationIssue


@runtime_checkable
class NaturalSemantics(Protocol):
    def derive(
        self,
        budget: int,
        state: State,
        command: Command,
    ) -> Optional[Derivation]:
        """
        Builds the derivation of state --command--> s' within budget.
        Budget is consumed exactly like the fuel interpreter, so a
        derivation is found iff interp(budget, command, state) terminates.
        Returns None when no derivation exists within the budget.
        Raises ValueError for a negative budget.
        """
        ...

    def verify(self, derivation: Derivation) -> list[ValidationIssue]:
        """
        Checks every node of the tree against its inference rule.
        Returns list of ValidationIssue; empty = derivation is valid.
        Never searches: the check is structural and always terminates.
        """
        ...

    def exec_big(
        self,
        state: State,
        command: Command,
        budget: int,
    ) -> Optional[State]:
        """
        Final state of the derivation found within budget, or None.
        """
        ...

    def relates(
        self,
        state: State,
        command: Command,
        final: State,
        budget: int,
    ) -> bool:
        """
        True iff state --command--> final is derivable within budget.
        """
        ...
