"""
contracts.py - Jedyne źródło prawdy dla wszystkich typów danych w impsem.
Wszystkie moduły importują typy WYŁĄCZNIE stąd. Nie modyfikować bez versioning.

Drzewa składni są niemutowalne (frozen) i rozróżniane polem node_type,
dzięki czemu dają się porównywać, hashować i serializować do JSON.
"""
from __future__ import annotations

from typing import Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONTRACTS_VERSION = "1.0.0"

# Identyfikator zmiennej: nieprzezroczysty klucz całkowity
Ident = int

# Wartość każdej zmiennej, której nikt jeszcze nie przypisał
DEFAULT_VALUE = 0


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ─────────────────────────── Stan ────────────────────────────────────────

class _Bindings(dict):
    """dict tylko do odczytu: każda mutacja w miejscu rzuca TypeError."""

    def _read_only(self, *args, **kwargs):
        raise TypeError("State.bindings jest tylko do odczytu, użyj State.update()")

    __setitem__ = __delitem__ = __ior__ = _read_only
    clear = pop = popitem = setdefault = update = _read_only

    def __reduce__(self):
        return (_Bindings, (dict(self),))


class State(_Frozen):
    """
    Totalne odwzorowanie Ident -> int, trzymane jako skończony słownik.
    Brakujące klucze czytane są jako DEFAULT_VALUE, a wpisy równe wartości
    domyślnej są usuwane przy konstrukcji, więc równość stanów jest
    ekstensjonalna. bindings jest tylko do odczytu.
    """
    bindings: dict[Ident, int] = Field(default_factory=dict, validate_default=True)

    @field_validator("bindings")
    @classmethod
    def _drop_defaults(cls, v: dict[Ident, int]) -> dict[Ident, int]:
        return _Bindings(
            (k, val) for k, val in sorted(v.items()) if val != DEFAULT_VALUE
        )

    def __hash__(self) -> int:
        return hash(frozenset(self.bindings.items()))

    @classmethod
    def initial(cls) -> State:
        return cls()

    @classmethod
    def of(cls, mapping: Mapping[Ident, int]) -> State:
        return cls(bindings=dict(mapping))

    def lookup(self, ident: Ident) -> int:
        return self.bindings.get(ident, DEFAULT_VALUE)

    def update(self, ident: Ident, value: int) -> State:
        """Nowy stan równy temu wszędzie poza ident, gdzie ma wartość value."""
        return State(bindings={**self.bindings, ident: value})


# ─────────────────────────── Wyrażenia arytmetyczne ──────────────────────

class NumberNode(_Frozen):
    node_type: Literal["number"] = "number"
    value: int


class VariableNode(_Frozen):
    node_type: Literal["variable"] = "variable"
    ident: Ident


class PlusNode(_Frozen):
    node_type: Literal["plus"] = "plus"
    left: AExp
    right: AExp


class MinusNode(_Frozen):
    node_type: Literal["minus"] = "minus"
    left: AExp
    right: AExp


AExp = Union[NumberNode, VariableNode, PlusNode, MinusNode]
PlusNode.model_rebuild()
MinusNode.model_rebuild()


# ─────────────────────────── Wyrażenia logiczne ──────────────────────────

class TrueNode(_Frozen):
    node_type: Literal["true"] = "true"


class FalseNode(_Frozen):
    node_type: Literal["false"] = "false"


class EqualNode(_Frozen):
    node_type: Literal["equal"] = "equal"
    left: AExp
    right: AExp


class LessEqualNode(_Frozen):
    node_type: Literal["less_equal"] = "less_equal"
    left: AExp
    right: AExp


class NotNode(_Frozen):
    node_type: Literal["not"] = "not"
    operand: BExp


class AndNode(_Frozen):
    node_type: Literal["and"] = "and"
    left: BExp
    right: BExp


BExp = Union[TrueNode, FalseNode, EqualNode, LessEqualNode, NotNode, AndNode]
EqualNode.model_rebuild()
LessEqualNode.model_rebuild()
NotNode.model_rebuild()
AndNode.model_rebuild()


# ─────────────────────────── Komendy ─────────────────────────────────────

class SkipCmd(_Frozen):
    node_type: Literal["skip"] = "skip"


class AssignCmd(_Frozen):
    node_type: Literal["assign"] = "assign"
    ident: Ident
    expr: AExp


class SeqCmd(_Frozen):
    node_type: Literal["seq"] = "seq"
    first: Command
    second: Command


class IfCmd(_Frozen):
    node_type: Literal["if"] = "if"
    cond: BExp
    then_branch: Command
    else_branch: Command


class WhileCmd(_Frozen):
    node_type: Literal["while"] = "while"
    cond: BExp
    body: Command


Command = Union[SkipCmd, AssignCmd, SeqCmd, IfCmd, WhileCmd]
AssignCmd.model_rebuild()
SeqCmd.model_rebuild()
IfCmd.model_rebuild()
WhileCmd.model_rebuild()


# ─────────────────────────── Semantyka małych kroków ─────────────────────

class Configuration(_Frozen):
    """Para (komenda, stan), na której działa relacja przejścia."""
    command: Command
    state: State


class StepTrace(BaseModel):
    configurations: list[Configuration] = Field(default_factory=list)  # pusta gdy record=False
    steps: int
    terminated: bool
    final: Configuration


# ─────────────────────────── Wynik wykonania ─────────────────────────────

class Terminated(_Frozen):
    outcome: Literal["terminated"] = "terminated"
    state: State


class Undetermined(_Frozen):
    """Budżet wyczerpany. To NIE jest dowód rozbieżności programu."""
    outcome: Literal["undetermined"] = "undetermined"
    budget: int


Outcome = Union[Terminated, Undetermined]


class Approximation(BaseModel):
    budget: int
    state: Optional[State] = None  # None = nieustalone w tym budżecie


# ─────────────────────────── Semantyka naturalna ─────────────────────────

DerivationRule = Literal[
    "skip",
    "assign",
    "seq",
    "if_true",
    "if_false",
    "while_false",
    "while_true",
]


class Derivation(_Frozen):
    """Węzeł drzewa wyprowadzenia: pre --command--> post z przesłankami."""
    rule: DerivationRule
    command: Command
    pre: State
    post: State
    premises: tuple[Derivation, ...] = ()


Derivation.model_rebuild()


class DerivationNode(_Frozen):
    """
    Węzeł płaskiej postaci drzewa wyprowadzenia (lista węzłów, korzeń pod
    indeksem 0). premises to indeksy przesłanek w tej samej liście, zawsze
    większe od indeksu węzła. Głębokość drzewa nie zwiększa zagnieżdżenia JSON.
    """
    rule: DerivationRule
    command: Command
    pre: State
    post: State
    premises: tuple[int, ...] = ()


# ─────────────────────────── Ewaluator ───────────────────────────────────

class EvalResult(BaseModel):
    value: Union[bool, int]
    steps: list[str] = Field(default_factory=list)  # czytelne kroki


# ─────────────────────────── Walidacja ───────────────────────────────────

class ValidationIssue(BaseModel):
    severity: Literal["error", "warning", "info"]
    code: str      # np. "STATE_MISMATCH", "RULE_MISMATCH", "NONDETERMINISTIC_STEP"
    message: str
    field_path: Optional[str] = None


class EquivalenceReport(BaseModel):
    initial: State
    small_step: Outcome
    steps_taken: int
    big_step: Outcome
    interpreter: Outcome
    denotation: Outcome
    least_budget: Optional[int] = None
    agree: bool
    issues: list[ValidationIssue] = Field(default_factory=list)


# ─────────────────────────── Katalog programów ───────────────────────────

class ProgramEntry(BaseModel):
    name: str
    description: str
    command: Command
    names: dict[Ident, str] = Field(default_factory=dict)  # nazwy do wyświetlania
    initial: State = Field(default_factory=State)


# ─────────────────────────── Błędy ───────────────────────────────────────

class NondeterministicStepError(RuntimeError):
    """Konfiguracja ma więcej niż jeden następnik. Dla IMP nieosiągalne."""


class StuckConfigurationError(RuntimeError):
    """Konfiguracja różna od Skip bez następnika. Dla IMP nieosiągalne."""
