"""CLI entry point for the trash lifecycle model.

Provides commands:
  - run: Generate a random trace under a selection policy and check it
  - replay: Apply a scripted sequence of operations from a JSON file
  - explore: Exhaustively check every reachable state of a small universe
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from trashlife import engine
from trashlife.config import load_config, load_script
from trashlife.exceptions import GuardFailure, InvariantViolation, ScriptError
from trashlife.explore import explore_universe
from trashlife.models import Policy, SimulationConfig
from trashlife.trace import Trace, TraceDriver, check_all, lingering_trash

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Soft-delete lifecycle model - generate, replay and exhaustively check traces",
    rich_markup_mode="rich",
)
console = Console()


@app.callback()
def app_callback(
    debug: Annotated[
        bool, typer.Option("--debug", help="Log every transition to stderr")
    ] = False,
) -> None:
    """Configure logging shared by all commands."""
    if debug:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root = logging.getLogger("trashlife")
        root.addHandler(handler)
        root.setLevel(logging.DEBUG)


def _render_trace(trace: Trace, title: str) -> None:
    table = Table(title=title)
    table.add_column("Step", justify="right")
    table.add_column("Operation", style="bold")
    table.add_column("Files")
    table.add_column("Trash")
    table.add_column("Outcome")

    for step in trace.steps:
        outcome = "[green]ok[/green]" if step.accepted else f"[yellow]{step.error}[/yellow]"
        table.add_row(
            str(step.index),
            str(step.operation),
            ",".join(sorted(map(str, step.after.files))) or "-",
            ",".join(sorted(map(str, step.after.trash))) or "-",
            outcome,
        )
    console.print(table)


def _render_checks(trace: Trace) -> bool:
    results = check_all(trace)
    checks = Table(title="Properties")
    checks.add_column("Property", style="bold")
    checks.add_column("Result")
    for name, violations in results.items():
        if violations:
            checks.add_row(name, f"[red]{len(violations)} violation(s)[/red]")
            for v in violations:
                logger.warning("%s: %s", name, v)
        else:
            checks.add_row(name, "[green]holds[/green]")

    lingering = lingering_trash(trace)
    if lingering:
        checks.add_row(
            "eventual exit from trash",
            "[yellow]falsified[/yellow] by "
            + ", ".join(f"{f} ({n} states)" for f, n in sorted(lingering.items(), key=lambda i: str(i[0]))),
        )
    else:
        checks.add_row("eventual exit from trash", "[green]holds in this trace[/green]")
    console.print(checks)
    return all(not v for v in results.values())


@app.command()
def run(
    files: Annotated[
        str | None,
        typer.Option("--files", "-f", help="Comma-separated initial file identifiers"),
    ] = None,
    steps: Annotated[
        int | None,
        typer.Option("--steps", "-n", min=0, help="Number of transitions to generate"),
    ] = None,
    policy: Annotated[
        Policy | None,
        typer.Option("--policy", "-p", help="Selection policy: uniform, eager or lazy"),
    ] = None,
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Random seed for a reproducible trace"),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to simulation config JSON"),
    ] = None,
    stop_at_terminal: Annotated[
        bool,
        typer.Option("--stop-at-terminal", help="Stop once no files remain"),
    ] = False,
) -> None:
    """Generate a random trace and check its safety and progress properties."""
    config: SimulationConfig
    if config_path is not None:
        try:
            config = load_config(config_path)
        except (OSError, ValueError) as e:
            console.print(f"[red]Failed to load config:[/red] {e}")
            raise typer.Exit(code=1)
    else:
        config = SimulationConfig()

    # CLI options override config
    if files is not None:
        config.files = [f.strip() for f in files.split(",") if f.strip()]
    if steps is not None:
        config.steps = steps
    if policy is not None:
        config.policy = policy
    if seed is not None:
        config.seed = seed
    if stop_at_terminal:
        config.stop_at_terminal = True

    driver = TraceDriver(config.policy, config.seed)
    try:
        trace = driver.run(
            engine.new_state(config.files), config.steps, config.stop_at_terminal
        )
    except InvariantViolation as e:
        console.print(f"[red]Invariant violated:[/red] {e}")
        raise typer.Exit(code=2)

    console.print(
        Panel(
            f"Policy: [bold]{config.policy.value}[/bold]  Seed: {config.seed}\n"
            f"Final: {trace.final.describe()}",
            title="Trace",
        )
    )
    _render_trace(trace, f"{len(trace)} step(s)")
    if not _render_checks(trace):
        raise typer.Exit(code=1)


@app.command()
def replay(
    script_path: Annotated[
        Path,
        typer.Argument(help="JSON script with 'files', optional 'trash' and 'steps'"),
    ],
    stop_on_failure: Annotated[
        bool,
        typer.Option("--stop-on-failure", help="Abort at the first rejected step"),
    ] = False,
) -> None:
    """Replay a scripted sequence of operations."""
    try:
        script = load_script(script_path)
        initial = engine.new_state(script.files, script.trash)
    except InvariantViolation as e:
        console.print(f"[red]Invalid initial state:[/red] {e}")
        raise typer.Exit(code=1)
    except (OSError, ScriptError) as e:
        console.print(f"[red]Failed to load script:[/red] {e}")
        raise typer.Exit(code=1)

    driver = TraceDriver()
    try:
        trace = driver.replay(initial, script.operations, stop_on_failure=stop_on_failure)
    except GuardFailure as e:
        console.print(f"[red]Rejected:[/red] {e}")
        raise typer.Exit(code=1)
    except InvariantViolation as e:
        console.print(f"[red]Invariant violated:[/red] {e}")
        raise typer.Exit(code=2)

    _render_trace(trace, f"Replay of {script_path.name}")
    console.print(
        f"Final: {trace.final.describe()}  "
        f"([yellow]{len(trace.rejected)}[/yellow] rejected)"
    )
    if not _render_checks(trace):
        raise typer.Exit(code=1)


@app.command()
def explore(
    universe: Annotated[
        int,
        typer.Option("--universe", "-u", min=0, max=6, help="Number of file identifiers"),
    ] = 3,
) -> None:
    """Exhaustively explore every reachable state for a small universe."""
    report = explore_universe(universe)

    table = Table(title=f"Universe of {universe} file(s)")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Initial states", str(len(report.initial)))
    table.add_row("Reachable states", str(len(report.states)))
    table.add_row("Transitions", str(len(report.edges)))
    table.add_row("Terminal states", str(len(report.terminal_states)))
    table.add_row("Violations", str(len(report.violations)))
    console.print(table)

    if not report.ok:
        for v in report.violations:
            console.print(f"[red]{v}[/red]")
        raise typer.Exit(code=1)
    console.print("[green]Safety, monotonicity and progress hold in every reachable state.[/green]")
