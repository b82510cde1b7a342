"""
Router: POST /run, POST /step, POST /trace
Interpreter z budżetem i semantyka małych kroków.
"""
import logging

from fastapi import APIRouter, Depends

from adapters.printer import render_configuration, render_state
from api.dependencies import bounded, get_interpreter, get_settings, get_stepper
from api.schemas import (
    ProgramRequest,
    RunRequest,
    RunResponse,
    StepResponse,
    TraceRequest,
    TraceResponse,
)
from contracts import Configuration, Terminated, Undetermined

logger = logging.getLogger("impsem.api")

router = APIRouter(tags=["run"])


@router.post("/run", response_model=RunResponse)
def run(
    body: RunRequest,
    interpreter=Depends(get_interpreter),
    settings=Depends(get_settings),
) -> RunResponse:
    budget = bounded(body.budget, settings.default_budget, settings.max_budget, "budget")
    entry = body.resolve()
    outcome = interpreter.run(entry.command, entry.initial, budget)
    rendered = (
        render_state(outcome.state, entry.names)
        if isinstance(outcome, Terminated) else None
    )
    return RunResponse(outcome=outcome, budget=budget, rendered_state=rendered)


@router.post("/step", response_model=StepResponse)
async def step(
    body: ProgramRequest,
    stepper=Depends(get_stepper),
) -> StepResponse:
    entry = body.resolve()
    config = Configuration(command=entry.command, state=entry.initial)
    successor = stepper.step(config)
    return StepResponse(
        configuration=config,
        successor=successor,
        terminal=successor is None,
        rendered=render_configuration(successor, entry.names) if successor else None,
    )


@router.post("/trace", response_model=TraceResponse)
def trace(
    body: TraceRequest,
    stepper=Depends(get_stepper),
    settings=Depends(get_settings),
) -> TraceResponse:
    max_steps = bounded(body.max_steps, settings.max_steps, settings.max_steps, "max_steps")
    entry = body.resolve()
    result = stepper.trace(
        Configuration(command=entry.command, state=entry.initial),
        max_steps,
        record=body.record,
    )
    outcome = (
        Terminated(state=result.final.state) if result.terminated
        else Undetermined(budget=max_steps)
    )
    logger.debug("trace: %d steps, terminated=%s", result.steps, result.terminated)
    return TraceResponse(
        trace=result,
        outcome=outcome,
        rendered=[render_configuration(c, entry.names) for c in result.configurations],
    )
