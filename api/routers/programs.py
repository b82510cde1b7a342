"""
Router: GET /programs, GET /programs/{name}
Katalog nazwanych programów IMP.
"""
from fastapi import APIRouter

from adapters.printer import render_command, render_state
from adapters.program_library.catalog import get_program, list_programs
from api.schemas import ProgramDetail, ProgramSummary

router = APIRouter(prefix="/programs", tags=["programs"])


@router.get("", response_model=list[ProgramSummary])
async def programs() -> list[ProgramSummary]:
    return [
        ProgramSummary(
            name=entry.name,
            description=entry.description,
            initial=entry.initial,
            rendered_initial=render_state(entry.initial, entry.names),
        )
        for entry in list_programs()
    ]


@router.get("/{name}", response_model=ProgramDetail)
async def program(name: str) -> ProgramDetail:
    # KeyError -> 404 przez globalny handler
    entry = get_program(name)
    return ProgramDetail(entry=entry, source=render_command(entry.command, entry.names))
