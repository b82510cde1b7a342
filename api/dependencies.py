"""
dependencies.py - FastAPI Dependency Injection.
Każda zależność zwraca odpowiedni adapter przez Request.app.state.
"""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request

from adapters.denotation.fuel_limit import FuelLimitDenotation
from adapters.equivalence.semantics_validator import SemanticsValidator
from adapters.evaluator.imp_evaluator import ImpEvaluator
from adapters.interpreter.fuel_interpreter import FuelInterpreter
from adapters.natural.derivation_checker import DerivationChecker
from adapters.small_step.structural_stepper import StructuralStepper
from config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_evaluator(request: Request) -> ImpEvaluator:
    return request.app.state.evaluator


def get_stepper(request: Request) -> StructuralStepper:
    return request.app.state.stepper


def get_natural(request: Request) -> DerivationChecker:
    return request.app.state.natural


def get_interpreter(request: Request) -> FuelInterpreter:
    return request.app.state.interpreter


def get_denotation(request: Request) -> FuelLimitDenotation:
    return request.app.state.denotation


def get_validator(request: Request) -> SemanticsValidator:
    return request.app.state.validator


def bounded(value: Optional[int], default: int, limit: int, field: str) -> int:
    """
    Wartość z żądania albo domyślna z Settings.
    Raises HTTPException(422), gdy wartość przekracza limit z Settings.
    """
    if value is None:
        return default
    if value > limit:
        raise HTTPException(status_code=422, detail=f"{field}={value} przekracza limit {limit}")
    return value
