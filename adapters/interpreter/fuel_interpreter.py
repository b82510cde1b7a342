"""
Adapter: FuelInterpreter
Implementuje port Interpreter - ewaluator komend z jawnym budżetem.

Rozliczanie budżetu (k+1 na wejściu, k dla wywołań wewnętrznych):
  budżet 0             -> None, niezależnie od komendy
  skip                 -> s
  x := e               -> s[x := e(s)]
  c1; c2               -> c1 z budżetem k, potem c2 z budżetem k (None przerywa)
  if b c1 c2           -> wybrana gałąź z budżetem k (test warunku nic nie kosztuje)
  while b c            -> nie b(s): s; b(s): ciało z k, potem ta sama pętla z k

Pozycje ogonowe (druga połowa sekwencji, gałąź if, kontynuacja while)
wykonywane są w pętli zamiast rekurencji, żeby duży budżet nie wyczerpał
stosu Pythona. Rozliczenie budżetu jest identyczne.

None oznacza "nieustalone w tym budżecie", a nie rozbieżność programu.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from adapters.evaluator.imp_evaluator import ImpEvaluator
from contracts import (
    AssignCmd,
    Command,
    IfCmd,
    Outcome,
    SeqCmd,
    SkipCmd,
    State,
    Terminated,
    Undetermined,
    WhileCmd,
)
from ports.evaluator import Evaluator

logger = logging.getLogger("impsem.interpreter")


def chain(
    result: Optional[State],
    k: Callable[[State], Optional[State]],
) -> Optional[State]:
    """Złożenie monadyczne: None propaguje się bez wywołania k."""
    if result is None:
        return None
    return k(result)


def to_outcome(result: Optional[State], budget: int) -> Outcome:
    if result is None:
        return Undetermined(budget=budget)
    return Terminated(state=result)


class FuelInterpreter:
    """Interpreter IMP ograniczony budżetem; zawsze kończy pracę."""

    def __init__(
        self,
        evaluator: Optional[Evaluator] = None,
        default_budget: int = 1_000,
    ) -> None:
        self._eval = evaluator or ImpEvaluator()
        self._default_budget = default_budget

    # -- Interpreter protocol ----------------------------------------------

    def interp(self, budget: int, command: Command, state: State) -> Optional[State]:
        if budget < 0:
            raise ValueError(f"Budżet musi być >= 0, jest {budget}")
        return self._interp(budget, command, state)

    def run(
        self,
        command: Command,
        state: State,
        budget: Optional[int] = None,
    ) -> Outcome:
        budget = self._default_budget if budget is None else budget
        result = self.interp(budget, command, state)
        if result is None:
            logger.warning("Budżet %d wyczerpany, wynik nieustalony.", budget)
        else:
            logger.debug("interp: zakończono w budżecie %d", budget)
        return to_outcome(result, budget)

    # -- Prywatne ----------------------------------------------------------

    def _interp(
        self,
        budget: int,
        command: Command,
        state: State,
    ) -> Optional[State]:
        while True:
            if budget == 0:
                return None
            budget -= 1  # od tego miejsca budget == k

            if isinstance(command, SkipCmd):
                return state

            if isinstance(command, AssignCmd):
                return state.update(command.ident, self._eval.eval_aexp(state, command.expr))

            if isinstance(command, SeqCmd):
                first = self._interp(budget, command.first, state)
                if first is None:
                    return None
                state, command = first, command.second
                continue

            if isinstance(command, IfCmd):
                if self._eval.eval_bexp(state, command.cond):
                    command = command.then_branch
                else:
                    command = command.else_branch
                continue

            if isinstance(command, WhileCmd):
                if not self._eval.eval_bexp(state, command.cond):
                    return state
                after_body = self._interp(budget, command.body, state)
                if after_body is None:
                    return None
                state = after_body
                continue

            raise TypeError(f"Nieznany typ komendy: {type(command)}")
