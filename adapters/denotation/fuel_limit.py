"""
Adapter: FuelLimitDenotation
Implementuje port Denotation - znaczenie komendy jako granica ciągu
    budżet -> interp(budżet, c, s)

Z monotoniczności interpretera ciąg ten jest od pewnego miejsca stały:
albo stabilizuje się na stanie, albo jest stale None. Dokładna granica
wymaga nieograniczonego przeszukiwania, więc denote() patrzy na ciąg tylko
do max_budget i zwraca Undetermined, jeśli do tego miejsca się nie ustalił.

Równania kompozycyjne (unfold):
  [[skip]](s)        = s
  [[x := e]](s)      = s[x := e(s)]
  [[c1; c2]](s)      = chain([[c1]](s), [[c2]])
  [[if b c1 c2]](s)  = b(s) ? [[c1]](s) : [[c2]](s)
  [[while b c]](s)   = F([[while b c]])(s),
                       F(f)(s) = b(s) ? chain([[c]](s), f) : s

[[while b c]] jest NAJMNIEJ określonym punktem stałym F: każde inne f
spełniające równanie zgadza się z nim wszędzie tam, gdzie ono się kończy.
kleene() daje kolejne przybliżenia F^n(bottom) tego punktu stałego.

Uwaga: przy samym suficie budżetu równania mogą się rozjechać, bo
sekwencja potrzebuje o jeden więcej niż jej składniki.
"""
from __future__ import annotations

from typing import Iterable, Optional

from adapters.evaluator.imp_evaluator import ImpEvaluator
from adapters.interpreter.fuel_interpreter import FuelInterpreter, chain, to_outcome
from contracts import (
    Approximation,
    AssignCmd,
    BExp,
    Command,
    IfCmd,
    Outcome,
    SeqCmd,
    SkipCmd,
    State,
    Terminated,
    WhileCmd,
)
from ports.denotation import StateFn
from ports.evaluator import Evaluator
from ports.interpreter import Interpreter


def _bottom(_state: State) -> Optional[State]:
    return None


class FuelLimitDenotation:
    """Denotacja przybliżana interpreterem z budżetem do max_budget."""

    def __init__(
        self,
        interpreter: Optional[Interpreter] = None,
        evaluator: Optional[Evaluator] = None,
        max_budget: int = 10_000,
    ) -> None:
        self._eval = evaluator or ImpEvaluator()
        self._interp = interpreter or FuelInterpreter(self._eval)
        self._max_budget = max_budget

    @property
    def max_budget(self) -> int:
        return self._max_budget

    # -- Denotation protocol -----------------------------------------------

    def approximations(
        self,
        state: State,
        command: Command,
        budgets: Iterable[int],
    ) -> list[Approximation]:
        return [
            Approximation(budget=b, state=self._interp.interp(b, command, state))
            for b in budgets
        ]

    def least_budget(
        self,
        state: State,
        command: Command,
        upper: Optional[int] = None,
    ) -> Optional[int]:
        upper = self._max_budget if upper is None else upper
        if self._interp.interp(upper, command, state) is None:
            return None
        # interp(lo) == None, interp(hi) != None; monotoniczność => bisekcja
        lo, hi = 0, upper
        while hi - lo > 1:
            mid = (lo + hi) // 2
            if self._interp.interp(mid, command, state) is None:
                lo = mid
            else:
                hi = mid
        return hi

    def denote(self, state: State, command: Command) -> Outcome:
        return to_outcome(self.meaning(state, command), self._max_budget)

    def meaning(self, state: State, command: Command) -> Optional[State]:
        """denote() jako State | None - wygodne do złożeń przez chain()."""
        return self._interp.interp(self._max_budget, command, state)

    def unfold(self, state: State, command: Command) -> Outcome:
        if isinstance(command, SkipCmd):
            return Terminated(state=state)
        if isinstance(command, AssignCmd):
            value = self._eval.eval_aexp(state, command.expr)
            return Terminated(state=state.update(command.ident, value))
        if isinstance(command, SeqCmd):
            result = chain(
                self.meaning(state, command.first),
                lambda s1: self.meaning(s1, command.second),
            )
            return to_outcome(result, self._max_budget)
        if isinstance(command, IfCmd):
            guard = self._eval.eval_bexp(state, command.cond)
            branch = command.then_branch if guard else command.else_branch
            return to_outcome(self.meaning(state, branch), self._max_budget)
        if isinstance(command, WhileCmd):
            functional = self.while_functional(
                command.cond, command.body, lambda s1: self.meaning(s1, command),
            )
            return to_outcome(functional(state), self._max_budget)
        raise TypeError(f"Nieznany typ komendy: {type(command)}")

    def while_functional(self, cond: BExp, body: Command, f: StateFn) -> StateFn:
        def unrolled(state: State) -> Optional[State]:
            if not self._eval.eval_bexp(state, cond):
                return state
            return chain(self.meaning(state, body), f)
        return unrolled

    def kleene(self, cond: BExp, body: Command, n: int) -> StateFn:
        if n < 0:
            raise ValueError(f"n musi być >= 0, jest {n}")
        approx: StateFn = _bottom
        for _ in range(n):
            approx = self.while_functional(cond, body, approx)
        return approx

    # -- Punkt stały -------------------------------------------------------

    def is_fixpoint(
        self,
        cond: BExp,
        body: Command,
        f: StateFn,
        states: Iterable[State],
    ) -> bool:
        """f(s) == F(f)(s) dla każdego podanego stanu."""
        unrolled = self.while_functional(cond, body, f)
        return all(f(s) == unrolled(s) for s in states)

    def agrees_with(
        self,
        cond: BExp,
        body: Command,
        f: StateFn,
        states: Iterable[State],
    ) -> bool:
        """f zgadza się z denotacją pętli tam, gdzie denotacja się kończy."""
        loop = WhileCmd(cond=cond, body=body)
        for s in states:
            meaning = self.meaning(s, loop)
            if meaning is not None and f(s) != meaning:
                return False
        return True
