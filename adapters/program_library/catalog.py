"""
adapters/program_library/catalog.py - katalog nazwanych programów IMP.

Każdy wpis to ProgramEntry: drzewo komendy, nazwy zmiennych do wyświetlania
i domyślny stan początkowy. Programy budowane są bezpośrednio z węzłów
contracts.py (nie ma parsera składni konkretnej).

  euclid       dzielenie z resztą przez odejmowanie (x=101, y=7 -> q=14, r=3)
  conditional  if 1 <= 2 then x := 3 else x := 0
  factorial    silnia przez wielokrotne dodawanie (brak mnożenia w IMP)
  sum          s = 1 + 2 + ... + n
  countdown    while 1 <= x do x := x - 1
  to_zero      while !(x = 0) do x := x - 1  (rozbieżne dla x < 0)
  diverge      while true do skip
"""
from __future__ import annotations

from typing import Callable

from contracts import (
    AssignCmd,
    Command,
    EqualNode,
    IfCmd,
    LessEqualNode,
    MinusNode,
    NotNode,
    NumberNode,
    PlusNode,
    ProgramEntry,
    SeqCmd,
    SkipCmd,
    State,
    TrueNode,
    VariableNode,
    WhileCmd,
)

# Identyfikatory zmiennych używanych w katalogu
X, Y, R, Q = 0, 1, 2, 3
N, S, ACC, TMP, C = 4, 5, 6, 7, 8

_NAMES = {X: "x", Y: "y", R: "r", Q: "q", N: "n", S: "s", ACC: "acc", TMP: "tmp", C: "c"}


def _var(ident: int) -> VariableNode:
    return VariableNode(ident=ident)


def _num(value: int) -> NumberNode:
    return NumberNode(value=value)


def seq(*commands: Command) -> Command:
    """c1; c2; ...; cn jako prawostronnie zagnieżdżone SeqCmd."""
    if not commands:
        return SkipCmd()
    result = commands[-1]
    for command in reversed(commands[:-1]):
        result = SeqCmd(first=command, second=result)
    return result


def euclid() -> ProgramEntry:
    command = seq(
        AssignCmd(ident=R, expr=_var(X)),
        AssignCmd(ident=Q, expr=_num(0)),
        WhileCmd(
            cond=LessEqualNode(left=_var(Y), right=_var(R)),
            body=seq(
                AssignCmd(ident=R, expr=MinusNode(left=_var(R), right=_var(Y))),
                AssignCmd(ident=Q, expr=PlusNode(left=_var(Q), right=_num(1))),
            ),
        ),
    )
    return ProgramEntry(
        name="euclid",
        description="Iloraz q i reszta r z dzielenia x przez y",
        command=command,
        names=_NAMES,
        initial=State.of({X: 101, Y: 7}),
    )


def conditional() -> ProgramEntry:
    command = IfCmd(
        cond=LessEqualNode(left=_num(1), right=_num(2)),
        then_branch=AssignCmd(ident=X, expr=_num(3)),
        else_branch=AssignCmd(ident=X, expr=_num(0)),
    )
    return ProgramEntry(
        name="conditional",
        description="Przypisanie warunkowe: x = 3",
        command=command,
        names=_NAMES,
    )


def factorial() -> ProgramEntry:
    # acc := acc * n realizowane jako tmp := acc + acc + ... (n razy)
    multiply = seq(
        AssignCmd(ident=TMP, expr=_num(0)),
        AssignCmd(ident=C, expr=_var(N)),
        WhileCmd(
            cond=LessEqualNode(left=_num(1), right=_var(C)),
            body=seq(
                AssignCmd(ident=TMP, expr=PlusNode(left=_var(TMP), right=_var(ACC))),
                AssignCmd(ident=C, expr=MinusNode(left=_var(C), right=_num(1))),
            ),
        ),
        AssignCmd(ident=ACC, expr=_var(TMP)),
    )
    command = seq(
        AssignCmd(ident=ACC, expr=_num(1)),
        WhileCmd(
            cond=LessEqualNode(left=_num(1), right=_var(N)),
            body=seq(
                multiply,
                AssignCmd(ident=N, expr=MinusNode(left=_var(N), right=_num(1))),
            ),
        ),
    )
    return ProgramEntry(
        name="factorial",
        description="acc = n! przez wielokrotne dodawanie",
        command=command,
        names=_NAMES,
        initial=State.of({N: 5}),
    )


def summation() -> ProgramEntry:
    command = seq(
        AssignCmd(ident=S, expr=_num(0)),
        WhileCmd(
            cond=LessEqualNode(left=_num(1), right=_var(N)),
            body=seq(
                AssignCmd(ident=S, expr=PlusNode(left=_var(S), right=_var(N))),
                AssignCmd(ident=N, expr=MinusNode(left=_var(N), right=_num(1))),
            ),
        ),
    )
    return ProgramEntry(
        name="sum",
        description="s = 1 + 2 + ... + n",
        command=command,
        names=_NAMES,
        initial=State.of({N: 10}),
    )


def countdown() -> ProgramEntry:
    command = WhileCmd(
        cond=LessEqualNode(left=_num(1), right=_var(X)),
        body=AssignCmd(ident=X, expr=MinusNode(left=_var(X), right=_num(1))),
    )
    return ProgramEntry(
        name="countdown",
        description="Odliczanie x do zera",
        command=command,
        names=_NAMES,
        initial=State.of({X: 10}),
    )


def to_zero() -> ProgramEntry:
    command = WhileCmd(
        cond=NotNode(operand=EqualNode(left=_var(X), right=_num(0))),
        body=AssignCmd(ident=X, expr=MinusNode(left=_var(X), right=_num(1))),
    )
    return ProgramEntry(
        name="to_zero",
        description="Zmniejszanie x aż do zera; dla x < 0 pętla się nie kończy",
        command=command,
        names=_NAMES,
        initial=State.of({X: 5}),
    )


def diverge() -> ProgramEntry:
    return ProgramEntry(
        name="diverge",
        description="while true do skip - brak wyniku w każdym budżecie",
        command=WhileCmd(cond=TrueNode(), body=SkipCmd()),
        names=_NAMES,
    )


_PROGRAMS: dict[str, Callable[[], ProgramEntry]] = {
    "euclid": euclid,
    "conditional": conditional,
    "factorial": factorial,
    "sum": summation,
    "countdown": countdown,
    "to_zero": to_zero,
    "diverge": diverge,
}


def program_names() -> list[str]:
    return list(_PROGRAMS)


def get_program(name: str) -> ProgramEntry:
    """Raises KeyError dla nieznanej nazwy."""
    try:
        factory = _PROGRAMS[name]
    except KeyError:
        raise KeyError(f"Nieznany program: {name!r}") from None
    return factory()


def list_programs() -> list[ProgramEntry]:
    return [factory() for factory in _PROGRAMS.values()]
