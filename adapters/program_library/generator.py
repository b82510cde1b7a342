"""
adapters/program_library/generator.py - losowe programy IMP z ziarnem.

Używane przez testy własności (determinizm, monotoniczność, zgodność
semantyk) i przez podkomendę `fuzz` CLI. Ten sam seed daje te same drzewa.

command()          - dowolna komenda; pętle mogą się nie kończyć
bounded_command()  - każda pętla ma licznik, którego ciało nie zmienia,
                     więc program zawsze się kończy
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

from contracts import (
    AExp,
    AndNode,
    AssignCmd,
    BExp,
    Command,
    EqualNode,
    FalseNode,
    Ident,
    IfCmd,
    LessEqualNode,
    MinusNode,
    NotNode,
    NumberNode,
    PlusNode,
    SeqCmd,
    SkipCmd,
    State,
    TrueNode,
    VariableNode,
    WhileCmd,
)


@dataclass
class GeneratorConfig:
    idents: tuple[Ident, ...] = (0, 1, 2)
    min_const: int = -5
    max_const: int = 5
    max_expr_depth: int = 3
    max_command_depth: int = 3
    max_loop_count: int = 4
    # pierwszy wolny identyfikator na liczniki pętli w bounded_command()
    counter_base: Ident = 100
    weights: dict[str, int] = field(default_factory=lambda: {
        "skip": 1, "assign": 4, "seq": 3, "if": 2, "while": 1,
    })


class ProgramGenerator:
    def __init__(self, seed: int = 0, config: Optional[GeneratorConfig] = None) -> None:
        self._rng = random.Random(seed)
        self.config = config or GeneratorConfig()
        self._next_counter = self.config.counter_base

    # -- Wyrażenia ---------------------------------------------------------

    def aexp(self, depth: Optional[int] = None) -> AExp:
        depth = self.config.max_expr_depth if depth is None else depth
        if depth <= 0 or self._rng.random() < 0.3:
            if self._rng.random() < 0.5:
                return NumberNode(value=self._const())
            return VariableNode(ident=self._rng.choice(self.config.idents))
        left = self.aexp(depth - 1)
        right = self.aexp(depth - 1)
        roll = self._rng.random()
        if roll < 0.15:
            # jawne zero po lewej, żeby optymalizacja miała co robić
            return PlusNode(left=NumberNode(value=0), right=right)
        if roll < 0.6:
            return PlusNode(left=left, right=right)
        return MinusNode(left=left, right=right)

    def bexp(self, depth: Optional[int] = None) -> BExp:
        depth = self.config.max_expr_depth if depth is None else depth
        if depth <= 0:
            return TrueNode() if self._rng.random() < 0.5 else FalseNode()
        kind = self._rng.choice(["true", "false", "eq", "le", "le", "not", "and"])
        if kind == "true":
            return TrueNode()
        if kind == "false":
            return FalseNode()
        if kind == "eq":
            return EqualNode(left=self.aexp(depth - 1), right=self.aexp(depth - 1))
        if kind == "le":
            return LessEqualNode(left=self.aexp(depth - 1), right=self.aexp(depth - 1))
        if kind == "not":
            return NotNode(operand=self.bexp(depth - 1))
        return AndNode(left=self.bexp(depth - 1), right=self.bexp(depth - 1))

    def state(self) -> State:
        return State.of({x: self._const() for x in self.config.idents})

    # -- Komendy -----------------------------------------------------------

    def command(self, depth: Optional[int] = None) -> Command:
        return self._command(depth, bounded=False)

    def bounded_command(self, depth: Optional[int] = None) -> Command:
        return self._command(depth, bounded=True)

    def _command(self, depth: Optional[int], bounded: bool) -> Command:
        depth = self.config.max_command_depth if depth is None else depth
        if depth <= 0:
            return self._leaf()

        kinds = list(self.config.weights)
        kind = self._rng.choices(kinds, weights=[self.config.weights[k] for k in kinds])[0]

        if kind == "skip":
            return SkipCmd()
        if kind == "assign":
            return self._assign()
        if kind == "seq":
            return SeqCmd(
                first=self._command(depth - 1, bounded),
                second=self._command(depth - 1, bounded),
            )
        if kind == "if":
            return IfCmd(
                cond=self.bexp(),
                then_branch=self._command(depth - 1, bounded),
                else_branch=self._command(depth - 1, bounded),
            )
        if bounded:
            return self._counted_loop(depth)
        return WhileCmd(cond=self.bexp(), body=self._command(depth - 1, bounded))

    def _counted_loop(self, depth: int) -> Command:
        """counter := n; while 1 <= counter do { body; counter := counter - 1 }"""
        counter = self._next_counter
        self._next_counter += 1
        count = self._rng.randint(0, self.config.max_loop_count)
        body = self._command(depth - 1, bounded=True)
        decrement = AssignCmd(
            ident=counter,
            expr=MinusNode(left=VariableNode(ident=counter), right=NumberNode(value=1)),
        )
        cond: BExp = LessEqualNode(left=NumberNode(value=1), right=VariableNode(ident=counter))
        if self._rng.random() < 0.5:
            cond = AndNode(left=cond, right=self.bexp(1))
        return SeqCmd(
            first=AssignCmd(ident=counter, expr=NumberNode(value=count)),
            second=WhileCmd(cond=cond, body=SeqCmd(first=body, second=decrement)),
        )

    def _leaf(self) -> Command:
        return SkipCmd() if self._rng.random() < 0.2 else self._assign()

    def _assign(self) -> AssignCmd:
        return AssignCmd(ident=self._rng.choice(self.config.idents), expr=self.aexp())

    def _const(self) -> int:
        return self._rng.randint(self.config.min_const, self.config.max_const)
