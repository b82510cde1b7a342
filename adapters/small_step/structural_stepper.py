"""
Adapter: StructuralStepper
Implementuje port SmallStepSemantics - strukturalna semantyka operacyjna.

Reguły przejścia (c, s) -> (c', s'):
  assign      x := e, s            -> skip, s[x := e(s)]
  seq-left    c1; c2, s            -> c1'; c2, s'     jeśli c1, s -> c1', s'
  seq-skip    skip; c2, s          -> c2, s
  if-true     if b c1 c2, s        -> c1, s           jeśli b(s)
  if-false    if b c1 c2, s        -> c2, s           jeśli nie b(s)
  while-true  while b c, s         -> c; while b c, s jeśli b(s)
  while-false while b c, s         -> skip, s         jeśli nie b(s)

Dla (skip, s) żadna reguła nie zachodzi - konfiguracja końcowa.

successors() wylicza WSZYSTKIE reguły, których przesłanki zachodzą, więc
determinizm (co najwyżej jeden następnik) jest sprawdzalną własnością, a
nie założeniem. Każda komenda różna od skip ma regułę dla każdego stanu,
dlatego StuckConfigurationError jest nieosiągalny dla IMP.
"""
from __future__ import annotations

import logging
from typing import Optional

from adapters.evaluator.imp_evaluator import ImpEvaluator
from contracts import (
    AssignCmd,
    Command,
    Configuration,
    IfCmd,
    NondeterministicStepError,
    Outcome,
    SeqCmd,
    SkipCmd,
    State,
    StepTrace,
    StuckConfigurationError,
    Terminated,
    Undetermined,
    WhileCmd,
)
from ports.evaluator import Evaluator

logger = logging.getLogger("impsem.stepper")


class StructuralStepper:
    """Relacja przejścia małych kroków nad konfiguracjami (komenda, stan)."""

    def __init__(self, evaluator: Optional[Evaluator] = None) -> None:
        self._eval = evaluator or ImpEvaluator()

    # -- SmallStepSemantics protocol ---------------------------------------

    def successors(self, config: Configuration) -> list[Configuration]:
        cmd, s = config.command, config.state
        found: list[Configuration] = []

        if isinstance(cmd, SkipCmd):
            return found

        if isinstance(cmd, AssignCmd):
            value = self._eval.eval_aexp(s, cmd.expr)
            found.append(Configuration(command=SkipCmd(), state=s.update(cmd.ident, value)))

        elif isinstance(cmd, SeqCmd):
            # seq-left
            for nxt in self.successors(Configuration(command=cmd.first, state=s)):
                found.append(Configuration(
                    command=SeqCmd(first=nxt.command, second=cmd.second),
                    state=nxt.state,
                ))
            # seq-skip
            if isinstance(cmd.first, SkipCmd):
                found.append(Configuration(command=cmd.second, state=s))

        elif isinstance(cmd, IfCmd):
            guard = self._eval.eval_bexp(s, cmd.cond)
            if guard:
                found.append(Configuration(command=cmd.then_branch, state=s))
            if not guard:
                found.append(Configuration(command=cmd.else_branch, state=s))

        elif isinstance(cmd, WhileCmd):
            guard = self._eval.eval_bexp(s, cmd.cond)
            if guard:
                found.append(Configuration(command=SeqCmd(first=cmd.body, second=cmd), state=s))
            if not guard:
                found.append(Configuration(command=SkipCmd(), state=s))

        else:
            raise TypeError(f"Nieznany typ komendy: {type(cmd)}")

        return found

    def step(self, config: Configuration) -> Optional[Configuration]:
        found = self.successors(config)
        if len(found) > 1:
            raise NondeterministicStepError(
                f"{len(found)} następników dla komendy {config.command.node_type!r}"
            )
        return found[0] if found else None

    def trace(
        self,
        config: Configuration,
        max_steps: int,
        record: bool = True,
    ) -> StepTrace:
        if max_steps < 0:
            raise ValueError(f"max_steps musi być >= 0, jest {max_steps}")

        current = config
        visited = [config] if record else []
        steps = 0

        while steps < max_steps:
            nxt = self.step(current)
            if nxt is None:
                if not isinstance(current.command, SkipCmd):
                    raise StuckConfigurationError(
                        f"Brak reguły dla komendy {current.command.node_type!r}"
                    )
                break
            current = nxt
            steps += 1
            if record:
                visited.append(current)

        return StepTrace(
            configurations=visited,
            steps=steps,
            terminated=isinstance(current.command, SkipCmd),
            final=current,
        )

    def run(self, command: Command, state: State, max_steps: int) -> Outcome:
        result = self.trace(Configuration(command=command, state=state), max_steps, record=False)
        logger.debug("small-step: %d kroków, terminated=%s", result.steps, result.terminated)
        if result.terminated:
            return Terminated(state=result.final.state)
        return Undetermined(budget=max_steps)
