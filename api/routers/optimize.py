"""
Router: POST /optimize, POST /eval
Usuwanie Plus(0, e) oraz ewaluacja wyrażeń z opisem kroków.
"""
from fastapi import APIRouter, Depends

from adapters.optimizer.zero_plus import optimize_command
from adapters.printer import render_command
from api.dependencies import get_evaluator
from api.schemas import EvalRequest, EvalResponse, OptimizeResponse, ProgramRequest
from contracts import AndNode, EqualNode, FalseNode, LessEqualNode, NotNode, TrueNode

router = APIRouter(tags=["optimize"])

_BEXP_NODES = (TrueNode, FalseNode, EqualNode, LessEqualNode, NotNode, AndNode)


@router.post("/optimize", response_model=OptimizeResponse)
async def optimize(body: ProgramRequest) -> OptimizeResponse:
    entry = body.resolve()
    optimized = optimize_command(entry.command)
    return OptimizeResponse(
        command=optimized,
        changed=optimized != entry.command,
        before=render_command(entry.command, entry.names),
        after=render_command(optimized, entry.names),
    )


@router.post("/eval", response_model=EvalResponse)
async def evaluate(
    body: EvalRequest,
    evaluator=Depends(get_evaluator),
) -> EvalResponse:
    result = evaluator.explain(body.state, body.expr)
    simplified = None if isinstance(body.expr, _BEXP_NODES) else evaluator.simplify(body.expr)
    return EvalResponse(value=result.value, steps=result.steps, simplified=simplified)
