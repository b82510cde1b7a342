"""
schemas.py - Request/Response modele FastAPI.
Oddzielone od contracts.py żeby API mogło ewoluować niezależnie.
"""
from __future__ import annotations

from typing import Annotated, Optional, Union

from pydantic import BaseModel, Field, model_validator

from contracts import (
    AExp,
    Approximation,
    BExp,
    Command,
    Configuration,
    DerivationNode,
    Ident,
    Outcome,
    ProgramEntry,
    State,
    StepTrace,
    ValidationIssue,
)


# ─────────────────────────── wspólne ─────────────────────────────

class ProgramRequest(BaseModel):
    """
    Program podany nazwą z katalogu albo jawnym drzewem komendy.
    state (jeśli podany) zastępuje stan początkowy wpisu z katalogu.
    """
    program: Optional[str] = None
    command: Optional[Command] = None
    state: Optional[State] = None

    @model_validator(mode="after")
    def _exactly_one_source(self) -> ProgramRequest:
        if (self.program is None) == (self.command is None):
            raise ValueError("Podaj dokładnie jedno z pól: program, command")
        return self

    def resolve(self) -> ProgramEntry:
        """Raises KeyError dla nieznanej nazwy programu."""
        from adapters.program_library.catalog import get_program

        if self.program is not None:
            entry = get_program(self.program)
        else:
            entry = ProgramEntry(name="inline", description="", command=self.command)
        if self.state is not None:
            entry = entry.model_copy(update={"initial": self.state})
        return entry


# ─────────────────────────── /health ─────────────────────────────

class HealthResponse(BaseModel):
    status: str
    version: str
    programs: int


# ─────────────────────────── /programs ───────────────────────────

class ProgramSummary(BaseModel):
    name: str
    description: str
    initial: State
    rendered_initial: str


class ProgramDetail(BaseModel):
    entry: ProgramEntry
    source: str


# ─────────────────────────── /run, /step, /trace ─────────────────

class RunRequest(ProgramRequest):
    budget: Optional[int] = Field(None, ge=0)  # None = Settings.default_budget, limit max_budget


class RunResponse(BaseModel):
    outcome: Outcome
    budget: int
    rendered_state: Optional[str] = None


class StepResponse(BaseModel):
    configuration: Configuration
    successor: Optional[Configuration] = None
    terminal: bool
    rendered: Optional[str] = None


class TraceRequest(ProgramRequest):
    max_steps: Optional[int] = Field(None, ge=0)  # None i limit = Settings.max_steps
    record: bool = True


class TraceResponse(BaseModel):
    trace: StepTrace
    outcome: Outcome
    rendered: list[str] = []


# ─────────────────────────── /derive, /verify ────────────────────

class DeriveRequest(ProgramRequest):
    budget: Optional[int] = Field(None, ge=0)


class DeriveResponse(BaseModel):
    nodes: Optional[list[DerivationNode]] = None  # płaskie drzewo, korzeń pod indeksem 0
    valid: bool
    issues: list[ValidationIssue] = []
    lines: list[str] = []


class VerifyRequest(BaseModel):
    nodes: list[DerivationNode] = Field(min_length=1)
    names: dict[Ident, str] = {}


class VerifyResponse(BaseModel):
    valid: bool
    issues: list[ValidationIssue]
    lines: list[str] = []


# ─────────────────────────── /denote, /equivalence ───────────────

class DenoteRequest(ProgramRequest):
    budgets: list[Annotated[int, Field(ge=0)]] = Field(default=[], max_length=64)  # punkty, w których pokazać przybliżenia


class DenoteResponse(BaseModel):
    outcome: Outcome
    least_budget: Optional[int] = None
    max_budget: int
    approximations: list[Approximation] = []


class EquivalenceRequest(ProgramRequest):
    budget: Optional[int] = Field(None, ge=0)
    max_steps: Optional[int] = Field(None, ge=0)


# ─────────────────────────── /optimize, /eval ────────────────────

class OptimizeResponse(BaseModel):
    command: Command
    changed: bool
    before: str
    after: str


class EvalRequest(BaseModel):
    expr: Union[AExp, BExp]
    state: State = Field(default_factory=State)


class EvalResponse(BaseModel):
    value: Union[bool, int]
    steps: list[str]
    simplified: Optional[AExp] = None  # tylko dla wyrażeń arytmetycznych
