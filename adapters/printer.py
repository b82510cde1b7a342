"""
printer.py - czytelna postać tekstowa drzew IMP, stanów i konfiguracji.

Tylko wypisywanie: nie istnieje parser tej postaci, programy
powstają jako drzewa (w Pythonie albo z JSON modeli z contracts.py).

Zmienne bez nazwy w słowniku names wyświetlane są jako x0, x1, ...
"""
from __future__ import annotations

from typing import Optional

from contracts import (
    AExp,
    AndNode,
    AssignCmd,
    BExp,
    Command,
    Configuration,
    Derivation,
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

Names = Optional[dict[Ident, str]]

_INDENT = "  "


def var_name(ident: Ident, names: Names = None) -> str:
    if names and ident in names:
        return names[ident]
    return f"x{ident}"


def render_aexp(expr: AExp, names: Names = None) -> str:
    if isinstance(expr, NumberNode):
        return str(expr.value)
    if isinstance(expr, VariableNode):
        return var_name(expr.ident, names)
    if isinstance(expr, (PlusNode, MinusNode)):
        op = "+" if isinstance(expr, PlusNode) else "-"
        left = render_aexp(expr.left, names)
        right = render_aexp(expr.right, names)
        # lewostronna łączność: nawias tylko po prawej
        if isinstance(expr.right, (PlusNode, MinusNode)):
            right = f"({right})"
        return f"{left} {op} {right}"
    raise TypeError(f"Nieznany typ węzła AExp: {type(expr)}")


def render_bexp(cond: BExp, names: Names = None) -> str:
    if isinstance(cond, TrueNode):
        return "true"
    if isinstance(cond, FalseNode):
        return "false"
    if isinstance(cond, EqualNode):
        return f"{render_aexp(cond.left, names)} = {render_aexp(cond.right, names)}"
    if isinstance(cond, LessEqualNode):
        return f"{render_aexp(cond.left, names)} <= {render_aexp(cond.right, names)}"
    if isinstance(cond, NotNode):
        return f"!({render_bexp(cond.operand, names)})"
    if isinstance(cond, AndNode):
        parts = []
        for side in (cond.left, cond.right):
            text = render_bexp(side, names)
            if isinstance(side, AndNode):
                text = f"({text})"
            parts.append(text)
        return " && ".join(parts)
    raise TypeError(f"Nieznany typ węzła BExp: {type(cond)}")


def render_command(command: Command, names: Names = None, inline: bool = False) -> str:
    """inline=True: jedna linia (ślady, tabele); inaczej wcięty blok."""
    if inline:
        return _inline(command, names)
    return "\n".join(_block(command, names, 0))


def _inline(command: Command, names: Names) -> str:
    if isinstance(command, SkipCmd):
        return "skip"
    if isinstance(command, AssignCmd):
        return f"{var_name(command.ident, names)} := {render_aexp(command.expr, names)}"
    if isinstance(command, SeqCmd):
        return f"{_inline(command.first, names)}; {_inline(command.second, names)}"
    if isinstance(command, IfCmd):
        return (
            f"if {render_bexp(command.cond, names)} "
            f"then {{ {_inline(command.then_branch, names)} }} "
            f"else {{ {_inline(command.else_branch, names)} }}"
        )
    if isinstance(command, WhileCmd):
        return f"while {render_bexp(command.cond, names)} do {{ {_inline(command.body, names)} }}"
    raise TypeError(f"Nieznany typ komendy: {type(command)}")


def _block(command: Command, names: Names, depth: int) -> list[str]:
    pad = _INDENT * depth
    if isinstance(command, SeqCmd):
        first = _block(command.first, names, depth)
        first[-1] += ";"
        return first + _block(command.second, names, depth)
    if isinstance(command, IfCmd):
        return (
            [f"{pad}if {render_bexp(command.cond, names)} then {{"]
            + _block(command.then_branch, names, depth + 1)
            + [f"{pad}}} else {{"]
            + _block(command.else_branch, names, depth + 1)
            + [f"{pad}}}"]
        )
    if isinstance(command, WhileCmd):
        return (
            [f"{pad}while {render_bexp(command.cond, names)} do {{"]
            + _block(command.body, names, depth + 1)
            + [f"{pad}}}"]
        )
    return [pad + _inline(command, names)]


def render_state(state: State, names: Names = None) -> str:
    if not state.bindings:
        return "{}"
    inner = ", ".join(
        f"{var_name(k, names)} = {v}" for k, v in state.bindings.items()
    )
    return "{" + inner + "}"


def render_configuration(config: Configuration, names: Names = None) -> str:
    return f"<{_inline(config.command, names)}, {render_state(config.state, names)}>"


def render_derivation(derivation: Derivation, names: Names = None) -> list[str]:
    """Drzewo wyprowadzenia jako wcięte linie, przesłanki pod wnioskiem."""
    lines: list[str] = []
    stack: list[tuple[Derivation, int]] = [(derivation, 0)]
    while stack:
        node, depth = stack.pop()
        lines.append(
            f"{_INDENT * depth}[{node.rule}] "
            f"{render_state(node.pre, names)} "
            f"-- {_inline(node.command, names)} --> "
            f"{render_state(node.post, names)}"
        )
        for premise in reversed(node.premises):
            stack.append((premise, depth + 1))
    return lines
