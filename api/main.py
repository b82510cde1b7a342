"""
api/main.py - punkt wejścia FastAPI.

Lifespan:
  - Inicjalizuje adaptery (Evaluator, SmallStep, Natural, Interpreter,
    Denotation, EquivalenceChecker) jeden raz; wszystkie są bezstanowe
  - Budżety domyślne pochodzą z Settings (IMPSEM_DEFAULT_BUDGET itd.)

Błędy:
  - KeyError (nieznany program)      -> 404
  - ValueError (np. ujemny budżet)   -> 422
  - budżet ponad limit z Settings    -> 422
  - PydanticSerializationError       -> 500 (błąd serwera, nie wejścia)
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic_core import PydanticSerializationError

from adapters.denotation.fuel_limit import FuelLimitDenotation
from adapters.equivalence.semantics_validator import SemanticsValidator
from adapters.evaluator.imp_evaluator import ImpEvaluator
from adapters.interpreter.fuel_interpreter import FuelInterpreter
from adapters.natural.derivation_checker import DerivationChecker
from adapters.program_library.catalog import program_names
from adapters.small_step.structural_stepper import StructuralStepper
from api.routers import derive, denote, optimize, programs, run
from api.schemas import HealthResponse
from config import Settings

logger = logging.getLogger("impsem")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    # Adaptery bezstanowe - tworzone raz, dzielą jeden ewaluator
    evaluator = ImpEvaluator()
    interpreter = FuelInterpreter(evaluator, default_budget=settings.default_budget)
    app.state.evaluator = evaluator
    app.state.stepper = StructuralStepper(evaluator)
    app.state.natural = DerivationChecker(evaluator)
    app.state.interpreter = interpreter
    app.state.denotation = FuelLimitDenotation(
        interpreter, evaluator, max_budget=settings.max_budget,
    )
    app.state.validator = SemanticsValidator(
        evaluator=evaluator,
        stepper=app.state.stepper,
        natural=app.state.natural,
        interpreter=interpreter,
        denotation=app.state.denotation,
    )

    logger.info(
        "impsem API ready (default_budget=%d, max_budget=%d, max_steps=%d).",
        settings.default_budget, settings.max_budget, settings.max_steps,
    )
    yield
    logger.info("Shutting down.")


def create_app() -> FastAPI:
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Routers
    app.include_router(programs.router)
    app.include_router(run.router)
    app.include_router(derive.router)
    app.include_router(denote.router)
    app.include_router(optimize.router)

    # Health
    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health():
        return HealthResponse(
            status="ok",
            version=settings.app_version,
            programs=len(program_names()),
        )

    # Globalne handlery błędów
    @app.exception_handler(KeyError)
    async def key_error_handler(request: Request, exc: KeyError):
        detail = exc.args[0] if exc.args else str(exc)
        return JSONResponse(status_code=404, content={"detail": str(detail)})

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        if isinstance(exc, PydanticSerializationError):
            logger.error("Serialization failed on %s: %s", request.url.path, exc)
            return JSONResponse(status_code=500, content={"detail": "Internal serialization error"})
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    return app


app = create_app()
