"""
Port: SmallStepSemantics
Odpowiedzialność: relacja przejścia na konfiguracjach (komenda, stan).
"""
from typing import Optional, Protocol, runtime_checkable

from contracts import Command, Configuration, Outcome, State, StepTrace


@runtime_checkable
class SmallStepSemantics(Protocol):
    def successors(self, config: Configuration) -> list[Configuration]:
        """
        Returns every configuration reachable from config by one rule.
        The relation is deterministic: the list has at most one element,
        and it is empty exactly for (Skip, s).
        """
        ...

    def step(self, config: Configuration) -> Optional[Configuration]:
        """
        Advances config by one transition; None for a terminal configuration.
        Raises NondeterministicStepError if more than one rule applies.
        """
        ...

    def trace(
        self,
        config: Configuration,
        max_steps: int,
        record: bool = True,
    ) -> StepTrace:
        """
        Iterates step at most max_steps times.
        Returns StepTrace with the visited configurations (when record=True),
        the number of steps taken and whether (Skip, s) was reached.
        Raises StuckConfigurationError for a non-Skip configuration
        without successor.
        """
        ...

    def run(self, command: Command, state: State, max_steps: int) -> Outcome:
        """
        Runs command from state. Terminated(s) if (Skip, s) is reached
        within max_steps transitions, Undetermined(max_steps) otherwise.
        """
        ...
