"""
Port: Denotation
Odpowiedzialność: znaczenie denotacyjne jako granica interpretera z paliwem.
"""
from typing import Callable, Iterable, Optional, Protocol, runtime_checkable

from contracts import Approximation, BExp, Command, Outcome, State

StateFn = Callable[[State], Optional[State]]


@runtime_checkable
class Denotation(Protocol):
    def approximations(
        self,
        state: State,
        command: Command,
        budgets: Iterable[int],
    ) -> list[Approximation]:
        """
        The sequence budget -> interp(budget, command, state) at the given budgets.
        """
        ...

    def least_budget(
        self,
        state: State,
        command: Command,
        upper: Optional[int] = None,
    ) -> Optional[int]:
        """
        Smallest budget for which the interpreter terminates, searched up to
        upper (default: the configured ceiling). None if it does not
        terminate within upper.
        """
        ...

    def denote(self, state: State, command: Command) -> Outcome:
        """
        The stabilised result of the interpreter, approximated at the
        configured budget ceiling. Undetermined means the sequence has not
        stabilised on a state below the ceiling.
        """
        ...

    def meaning(self, state: State, command: Command) -> Optional[State]:
        """
        denote() as State | None, convenient for composing with chain().
        """
        ...

    def unfold(self, state: State, command: Command) -> Outcome:
        """
        Right-hand side of the compositional equation for command,
        computed with denote on its immediate sub-commands.
        """
        ...

    def while_functional(self, cond: BExp, body: Command, f: StateFn) -> StateFn:
        """
        F(f)(s) = cond(s) ? chain(denote(s, body), f) : s.
        denote on While(cond, body) is the least fixpoint of F.
        """
        ...

    def kleene(self, cond: BExp, body: Command, n: int) -> StateFn:
        """
        The n-th Kleene approximant F^n(bottom), bottom = lambda s: None.
        Raises ValueError for negative n.
        """
        ...

    def is_fixpoint(
        self,
        cond: BExp,
        body: Command,
        f: StateFn,
        states: Iterable[State],
    ) -> bool:
        """
        True iff f(s) == F(f)(s) for every given state.
        """
        ...

    def agrees_with(
        self,
        cond: BExp,
        body: Command,
        f: StateFn,
        states: Iterable[State],
    ) -> bool:
        """
        True iff f(s) equals the loop's denotation on every given state
        where the denotation terminates.
        """
        ...
