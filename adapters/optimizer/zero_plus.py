"""
Optymalizacja: usuwanie neutralnego zera z lewej strony dodawania.

  Plus(Number(0), e)  ->  optimize_zero_plus(e)

Pozostałe węzły są odbudowywane ze zoptymalizowanymi dziećmi, liście bez
zmian. Przekształcenie zachowuje wartość wyrażenia w każdym stanie.
Wersje dla BExp i komend stosują ten sam krok do każdego AExp wewnątrz.
"""
from __future__ import annotations

from contracts import (
    AExp,
    AndNode,
    AssignCmd,
    BExp,
    Command,
    EqualNode,
    FalseNode,
    IfCmd,
    LessEqualNode,
    MinusNode,
    NotNode,
    NumberNode,
    PlusNode,
    SeqCmd,
    SkipCmd,
    TrueNode,
    VariableNode,
    WhileCmd,
)


def optimize_zero_plus(expr: AExp) -> AExp:
    if isinstance(expr, (NumberNode, VariableNode)):
        return expr
    if isinstance(expr, PlusNode):
        if isinstance(expr.left, NumberNode) and expr.left.value == 0:
            return optimize_zero_plus(expr.right)
        return PlusNode(
            left=optimize_zero_plus(expr.left),
            right=optimize_zero_plus(expr.right),
        )
    if isinstance(expr, MinusNode):
        return MinusNode(
            left=optimize_zero_plus(expr.left),
            right=optimize_zero_plus(expr.right),
        )
    raise TypeError(f"Nieznany typ węzła AExp: {type(expr)}")


def optimize_bexp(cond: BExp) -> BExp:
    if isinstance(cond, (TrueNode, FalseNode)):
        return cond
    if isinstance(cond, EqualNode):
        return EqualNode(
            left=optimize_zero_plus(cond.left),
            right=optimize_zero_plus(cond.right),
        )
    if isinstance(cond, LessEqualNode):
        return LessEqualNode(
            left=optimize_zero_plus(cond.left),
            right=optimize_zero_plus(cond.right),
        )
    if isinstance(cond, NotNode):
        return NotNode(operand=optimize_bexp(cond.operand))
    if isinstance(cond, AndNode):
        return AndNode(left=optimize_bexp(cond.left), right=optimize_bexp(cond.right))
    raise TypeError(f"Nieznany typ węzła BExp: {type(cond)}")


def optimize_command(command: Command) -> Command:
    if isinstance(command, SkipCmd):
        return command
    if isinstance(command, AssignCmd):
        return AssignCmd(ident=command.ident, expr=optimize_zero_plus(command.expr))
    if isinstance(command, SeqCmd):
        return SeqCmd(
            first=optimize_command(command.first),
            second=optimize_command(command.second),
        )
    if isinstance(command, IfCmd):
        return IfCmd(
            cond=optimize_bexp(command.cond),
            then_branch=optimize_command(command.then_branch),
            else_branch=optimize_command(command.else_branch),
        )
    if isinstance(command, WhileCmd):
        return WhileCmd(cond=optimize_bexp(command.cond), body=optimize_command(command.body))
    raise TypeError(f"Nieznany typ komendy: {type(command)}")
