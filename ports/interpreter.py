"""
Port: Interpreter
Odpowiedzialność: interpreter z jawnym budżetem (paliwem), zawsze kończy pracę.
"""
from typing import Optional, Protocol, runtime_checkable

from contracts import Command, Outcome, State


@runtime_checkable
class Interpreter(Protocol):
    def interp(
        self,
        budget: int,
        command: Command,
        state: State,
    ) -> Optional[State]:
        """
        Runs command from state with the given budget.
        Returns the final state, or None if the budget ran out.
        None means "unknown within this budget", not divergence.
        Monotone: a result obtained with budget i is returned unchanged
        for every budget >= i.
        Raises ValueError for a negative budget.
        """
        ...

    def run(
        self,
        command: Command,
        state: State,
        budget: Optional[int] = None,
    ) -> Outcome:
        """
        Caller-facing entry point: Terminated(state) or Undetermined(budget).
        budget=None uses the interpreter's default budget.
        """
        ...
