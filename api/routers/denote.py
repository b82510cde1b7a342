"""
Router: POST /denote, POST /equivalence
Denotacja jako granica interpretera oraz porównanie wszystkich semantyk.
"""
from fastapi import APIRouter, Depends

from api.dependencies import bounded, get_denotation, get_settings, get_validator
from api.schemas import DenoteRequest, DenoteResponse, EquivalenceRequest
from contracts import EquivalenceReport

router = APIRouter(tags=["denotation"])


@router.post("/denote", response_model=DenoteResponse)
def denote(
    body: DenoteRequest,
    denotation=Depends(get_denotation),
) -> DenoteResponse:
    for b in body.budgets:
        bounded(b, b, denotation.max_budget, "budgets")
    entry = body.resolve()
    return DenoteResponse(
        outcome=denotation.denote(entry.initial, entry.command),
        least_budget=denotation.least_budget(entry.initial, entry.command),
        max_budget=denotation.max_budget,
        approximations=denotation.approximations(entry.initial, entry.command, body.budgets),
    )


@router.post("/equivalence", response_model=EquivalenceReport)
def equivalence(
    body: EquivalenceRequest,
    validator=Depends(get_validator),
    settings=Depends(get_settings),
) -> EquivalenceReport:
    budget = bounded(body.budget, settings.default_budget, settings.max_budget, "budget")
    max_steps = bounded(body.max_steps, settings.max_steps, settings.max_steps, "max_steps")
    entry = body.resolve()
    return validator.compare(entry.command, entry.initial, budget, max_steps)
