#!/usr/bin/env python3
"""
impsem.py - CLI narzędzie impsem.

Działa całkowicie lokalnie, nie wymaga uruchomionego serwera API.
Programem jest nazwa z katalogu (patrz `programs`) albo ścieżka do pliku
JSON z serializowanym drzewem komendy (same drzewo Command albo obiekt
ProgramEntry z polami command / names / initial).

Konfiguracja: zmienne środowiskowe z prefiksem IMPSEM_ lub plik .env
(np. IMPSEM_DEFAULT_BUDGET=5000).

Podkomendy:
    programs  - listuj katalog programów
    show      - wypisz program
    run       - wykonaj interpreterem z budżetem
    trace     - ślad semantyki małych kroków
    derive    - drzewo wyprowadzenia semantyki naturalnej
    denote    - denotacja: przybliżenia i najmniejszy budżet
    check     - porównaj wszystkie semantyki na programie
    fuzz      - porównaj semantyki na losowych programach
    optimize  - usuń Plus(0, e) z programu

Użycie:
    python impsem.py programs
    python impsem.py run euclid --set x=100 --set y=9
    python impsem.py trace conditional
    python impsem.py derive euclid --budget 200
    python impsem.py denote diverge --max-budget 2000
    python impsem.py check factorial --set n=6
    python impsem.py fuzz --count 50 --seed 7
    python impsem.py run program.json --budget 10000
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from contracts import Command, Ident, Outcome, ProgramEntry, State, Terminated

# -- helpers ---------------------------------------------------------------

_CONSOLE: Console | None = None

_COMMAND_ADAPTER: TypeAdapter[Any] = TypeAdapter(Command)


def _console() -> Console:
    global _CONSOLE
    if _CONSOLE is None:
        _CONSOLE = Console(highlight=False)
    return _CONSOLE


def _safe_terminal_text(value: Any) -> str:
    s = str(value)
    encoding = sys.stdout.encoding or "utf-8"
    try:
        s.encode(encoding)
        return s
    except UnicodeEncodeError:
        return s.encode(encoding, errors="replace").decode(encoding, errors="replace")


def _short(value: Any, limit: int = 64) -> str:
    s = _safe_terminal_text(value).replace("\n", " ").strip()
    if len(s) <= limit:
        return s
    return s[: limit - 3] + "..."


def _fail(message: str) -> None:
    print(f"Błąd: {message}", file=sys.stderr)
    sys.exit(1)


def _print_kv_table(title: str, rows: list[tuple[str, Any]]) -> None:
    table = Table(title=title, box=box.ASCII, show_header=False, pad_edge=False)
    table.add_column("Key", no_wrap=True, style="bold cyan")
    table.add_column("Value")
    for key, value in rows:
        table.add_row(_safe_terminal_text(key), _safe_terminal_text(value))
    _console().print(table)


def _print_state_table(title: str, state: State, names: dict[Ident, str]) -> None:
    from adapters.printer import var_name

    table = Table(title=title, box=box.ASCII)
    table.add_column("Var", no_wrap=True, style="cyan")
    table.add_column("Ident", justify="right", no_wrap=True)
    table.add_column("Value", justify="right")
    for ident, value in state.bindings.items():
        table.add_row(var_name(ident, names), str(ident), str(value))
    _console().print(table)


def _settings():
    from config import Settings
    return Settings()


def _load_program(source: str) -> ProgramEntry:
    """Nazwa z katalogu albo plik JSON z drzewem komendy lub ProgramEntry."""
    from adapters.program_library.catalog import get_program

    path = Path(source)
    if path.suffix != ".json" and not path.exists():
        return get_program(source)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"nie można odczytać pliku {source}: {exc}") from exc
    try:
        return ProgramEntry.model_validate_json(raw)
    except ValidationError:
        pass
    try:
        command = _COMMAND_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise ValueError(f"{source} nie zawiera poprawnego drzewa komendy: {exc}") from exc
    return ProgramEntry(name=path.stem, description=str(path), command=command)


def _parse_binding(raw: str, names: dict[Ident, str]) -> tuple[Ident, int]:
    """'x=5' lub '0=5' -> (ident, wartość)."""
    if "=" not in raw:
        raise ValueError(f"oczekiwano NAZWA=WARTOŚĆ, jest {raw!r}")
    key, _, value_raw = raw.partition("=")
    key = key.strip()
    by_name = {name: ident for ident, name in names.items()}
    if key in by_name:
        ident = by_name[key]
    elif key.isdigit():
        ident = int(key)
    elif key.startswith("x") and key[1:].isdigit():
        ident = int(key[1:])
    else:
        raise ValueError(f"nieznana zmienna {key!r}")
    try:
        value = int(value_raw.strip())
    except ValueError:
        raise ValueError(f"wartość {value_raw!r} nie jest liczbą całkowitą") from None
    return ident, value


def _initial_state(entry: ProgramEntry, bindings: list[str]) -> State:
    state = entry.initial
    for raw in bindings:
        ident, value = _parse_binding(raw, entry.names)
        state = state.update(ident, value)
    return state


def _outcome_text(outcome: Outcome, names: dict[Ident, str]) -> str:
    from adapters.printer import render_state

    if isinstance(outcome, Terminated):
        return f"terminated {render_state(outcome.state, names)}"
    return f"undetermined (budżet {outcome.budget})"


# -- podkomendy ------------------------------------------------------------

def _programs(args: argparse.Namespace) -> None:
    from adapters.printer import render_state
    from adapters.program_library.catalog import list_programs

    table = Table(title="Programy", box=box.ASCII)
    table.add_column("Name", no_wrap=True, style="cyan")
    table.add_column("Description")
    table.add_column("Initial state")
    for entry in list_programs():
        table.add_row(
            entry.name,
            _short(entry.description, 60),
            render_state(entry.initial, entry.names),
        )
    _console().print(table)


def _show(args: argparse.Namespace) -> None:
    from adapters.printer import render_command, render_state

    entry = _load_program(args.program)
    if args.json:
        print(_COMMAND_ADAPTER.dump_json(entry.command, indent=2).decode("utf-8"))
        return
    print(f"# {entry.name}: {entry.description}")
    print(f"# start: {render_state(entry.initial, entry.names)}")
    print(render_command(entry.command, entry.names))


def _run(args: argparse.Namespace) -> None:
    from adapters.interpreter.fuel_interpreter import FuelInterpreter

    settings = _settings()
    entry = _load_program(args.program)
    state = _initial_state(entry, args.set)
    budget = args.budget if args.budget is not None else settings.default_budget

    outcome = FuelInterpreter(default_budget=settings.default_budget).run(
        entry.command, state, budget,
    )
    _print_kv_table(f"run {entry.name}", [
        ("budget", budget),
        ("result", _outcome_text(outcome, entry.names)),
    ])
    if isinstance(outcome, Terminated):
        _print_state_table("Final state", outcome.state, entry.names)


def _trace(args: argparse.Namespace) -> None:
    from adapters.printer import render_command, render_state
    from adapters.small_step.structural_stepper import StructuralStepper
    from contracts import Configuration

    settings = _settings()
    entry = _load_program(args.program)
    state = _initial_state(entry, args.set)
    max_steps = args.max_steps if args.max_steps is not None else settings.max_steps

    trace = StructuralStepper().trace(Configuration(command=entry.command, state=state), max_steps)

    table = Table(title=f"trace {entry.name} [{trace.steps} kroków]", box=box.ASCII)
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("Command")
    table.add_column("State")
    shown = trace.configurations[: args.show] if args.show else trace.configurations
    for i, config in enumerate(shown):
        table.add_row(
            str(i),
            _short(render_command(config.command, entry.names, inline=True), 72),
            render_state(config.state, entry.names),
        )
    _console().print(table)
    if len(shown) < len(trace.configurations):
        print(f"... pominięto {len(trace.configurations) - len(shown)} konfiguracji")
    print(f"terminated: {trace.terminated}")


def _derive(args: argparse.Namespace) -> None:
    from adapters.natural.derivation_checker import DerivationChecker
    from adapters.printer import render_derivation

    settings = _settings()
    entry = _load_program(args.program)
    state = _initial_state(entry, args.set)
    budget = args.budget if args.budget is not None else settings.default_budget

    checker = DerivationChecker()
    derivation = checker.derive(budget, state, entry.command)
    if derivation is None:
        print(f"Brak wyprowadzenia w budżecie {budget}.")
        return

    for line in render_derivation(derivation, entry.names):
        print(_safe_terminal_text(line))
    issues = checker.verify(derivation)
    print(f"valid: {not issues}")
    for issue in issues:
        print(f"  [{issue.severity}] {issue.code} @ {issue.field_path}: {issue.message}")


def _denote(args: argparse.Namespace) -> None:
    from adapters.denotation.fuel_limit import FuelLimitDenotation
    from adapters.printer import render_state

    settings = _settings()
    entry = _load_program(args.program)
    state = _initial_state(entry, args.set)
    max_budget = args.max_budget if args.max_budget is not None else settings.max_budget

    denotation = FuelLimitDenotation(max_budget=max_budget)
    budgets = [0]
    b = 1
    while b < max_budget:
        budgets.append(b)
        b *= 2
    budgets.append(max_budget)

    table = Table(title=f"interp(budget, {entry.name})", box=box.ASCII)
    table.add_column("Budget", justify="right", no_wrap=True)
    table.add_column("Result")
    for approx in denotation.approximations(state, entry.command, budgets):
        text = "-" if approx.state is None else render_state(approx.state, entry.names)
        table.add_row(str(approx.budget), text)
    _console().print(table)

    least = denotation.least_budget(state, entry.command)
    _print_kv_table(f"denote {entry.name}", [
        ("denotation", _outcome_text(denotation.denote(state, entry.command), entry.names)),
        ("least budget", least if least is not None else f"> {max_budget}"),
    ])


def _check(args: argparse.Namespace) -> None:
    settings = _settings()
    entry = _load_program(args.program)
    state = _initial_state(entry, args.set)
    budget = args.budget if args.budget is not None else settings.default_budget

    report = _validator(settings).compare(entry.command, state, budget, settings.max_steps)
    _print_kv_table(f"check {entry.name}", [
        ("small-step", _outcome_text(report.small_step, entry.names)),
        ("steps", report.steps_taken),
        ("big-step", _outcome_text(report.big_step, entry.names)),
        ("interpreter", _outcome_text(report.interpreter, entry.names)),
        ("denotation", _outcome_text(report.denotation, entry.names)),
        ("least budget", report.least_budget if report.least_budget is not None else "-"),
        ("agree", "yes" if report.agree else "NO"),
    ])
    for issue in report.issues:
        print(f"  [{issue.severity}] {issue.code}: {issue.message}")
    if not report.agree:
        sys.exit(2)


def _fuzz(args: argparse.Namespace) -> None:
    from adapters.program_library.generator import ProgramGenerator

    settings = _settings()
    gen = ProgramGenerator(seed=args.seed)
    validator = _validator(settings)

    table = Table(title=f"fuzz seed={args.seed} count={args.count}", box=box.ASCII)
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("Outcome", no_wrap=True)
    table.add_column("Steps", justify="right")
    table.add_column("Least budget", justify="right")
    table.add_column("Agree", no_wrap=True)

    disagreements = 0
    for i in range(args.count):
        command = gen.bounded_command() if args.bounded else gen.command()
        report = validator.compare(command, gen.state(), args.budget, settings.max_steps)
        if not report.agree:
            disagreements += 1
        table.add_row(
            str(i),
            report.interpreter.outcome,
            str(report.steps_taken),
            str(report.least_budget) if report.least_budget is not None else "-",
            "yes" if report.agree else "NO",
        )
    _console().print(table)
    print(f"disagreements: {disagreements}")
    if disagreements:
        sys.exit(2)


def _optimize(args: argparse.Namespace) -> None:
    from adapters.optimizer.zero_plus import optimize_command
    from adapters.printer import render_command

    entry = _load_program(args.program)
    optimized = optimize_command(entry.command)
    print("# przed")
    print(render_command(entry.command, entry.names))
    print("# po")
    print(render_command(optimized, entry.names))
    print(f"changed: {optimized != entry.command}")


def _validator(settings):
    from adapters.denotation.fuel_limit import FuelLimitDenotation
    from adapters.equivalence.semantics_validator import SemanticsValidator
    from adapters.interpreter.fuel_interpreter import FuelInterpreter

    interpreter = FuelInterpreter(default_budget=settings.default_budget)
    return SemanticsValidator(
        interpreter=interpreter,
        denotation=FuelLimitDenotation(interpreter, max_budget=settings.max_budget),
    )


# -- main ------------------------------------------------------------------

def _add_program_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("program", help="Nazwa z katalogu lub plik .json")
    p.add_argument("--set", "-s", action="append", default=[], metavar="VAR=VALUE",
                   help="Nadpisz wartość zmiennej w stanie początkowym")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="impsem",
        description="impsem - semantyki języka IMP (CLI lokalny)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("programs", help="Listuj katalog programów")

    p = sub.add_parser("show", help="Wypisz program")
    p.add_argument("program", help="Nazwa z katalogu lub plik .json")
    p.add_argument("--json", action="store_true", help="Wypisz drzewo jako JSON")

    p = sub.add_parser("run", help="Wykonaj interpreterem z budżetem")
    _add_program_args(p)
    p.add_argument("--budget", "-b", type=int, default=None, metavar="N")

    p = sub.add_parser("trace", help="Ślad semantyki małych kroków")
    _add_program_args(p)
    p.add_argument("--max-steps", type=int, default=None, metavar="N")
    p.add_argument("--show", type=int, default=50, metavar="N",
                   help="Ile konfiguracji wyświetlić (0 = wszystkie)")

    p = sub.add_parser("derive", help="Drzewo wyprowadzenia semantyki naturalnej")
    _add_program_args(p)
    p.add_argument("--budget", "-b", type=int, default=None, metavar="N")

    p = sub.add_parser("denote", help="Przybliżenia denotacji i najmniejszy budżet")
    _add_program_args(p)
    p.add_argument("--max-budget", type=int, default=None, metavar="N")

    p = sub.add_parser("check", help="Porównaj wszystkie semantyki na programie")
    _add_program_args(p)
    p.add_argument("--budget", "-b", type=int, default=None, metavar="N")

    p = sub.add_parser("fuzz", help="Porównaj semantyki na losowych programach")
    p.add_argument("--count", type=int, default=20, metavar="N")
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--budget", "-b", type=int, default=200, metavar="N")
    p.add_argument("--bounded", action="store_true",
                   help="Tylko programy z pętlami licznikowymi (zawsze kończą się)")

    p = sub.add_parser("optimize", help="Usuń Plus(0, e) z programu")
    p.add_argument("program", help="Nazwa z katalogu lub plik .json")

    return parser


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=_settings().log_level.upper())

    commands = {
        "programs": _programs,
        "show":     _show,
        "run":      _run,
        "trace":    _trace,
        "derive":   _derive,
        "denote":   _denote,
        "check":    _check,
        "fuzz":     _fuzz,
        "optimize": _optimize,
    }

    try:
        commands[args.command](args)
    except KeyError as exc:
        _fail(str(exc.args[0]) if exc.args else str(exc))
    except ValueError as exc:
        _fail(str(exc))


if __name__ == "__main__":
    main()
