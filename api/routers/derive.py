"""
Router: POST /derive, POST /verify
Semantyka naturalna: budowa i sprawdzanie drzew wyprowadzenia.
Drzewa przechodzą przez HTTP w postaci płaskiej listy węzłów, więc
długie pętle nie zwiększają zagnieżdżenia JSON.
"""
from fastapi import APIRouter, Depends, HTTPException

from adapters.natural.derivation_checker import flatten_derivation, unflatten_derivation
from adapters.printer import render_derivation
from api.dependencies import bounded, get_natural, get_settings
from api.schemas import DeriveRequest, DeriveResponse, VerifyRequest, VerifyResponse

router = APIRouter(tags=["natural"])


@router.post("/derive", response_model=DeriveResponse)
def derive(
    body: DeriveRequest,
    natural=Depends(get_natural),
    settings=Depends(get_settings),
) -> DeriveResponse:
    budget = bounded(body.budget, settings.default_budget, settings.max_budget, "budget")
    entry = body.resolve()
    derivation = natural.derive(budget, entry.initial, entry.command)
    if derivation is None:
        return DeriveResponse(nodes=None, valid=False)

    issues = natural.verify(derivation)
    return DeriveResponse(
        nodes=flatten_derivation(derivation),
        valid=not issues,
        issues=issues,
        lines=render_derivation(derivation, entry.names),
    )


@router.post("/verify", response_model=VerifyResponse)
def verify(
    body: VerifyRequest,
    natural=Depends(get_natural),
) -> VerifyResponse:
    try:
        derivation = unflatten_derivation(body.nodes)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    issues = natural.verify(derivation)
    return VerifyResponse(
        valid=not issues,
        issues=issues,
        lines=render_derivation(derivation, body.names),
    )
