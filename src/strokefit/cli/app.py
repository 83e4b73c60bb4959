"""CLI application entry point for strokefit.

This module provides the main CLI interface using Typer.
"""

import time
from pathlib import Path
from typing import Annotated

import typer

from strokefit import __version__
from strokefit.cli.output import (
    console,
    print_attempts,
    print_equations,
    print_error,
    print_header,
    print_knots,
    print_no_fit,
    print_step,
    print_strategies,
    print_stroke_info,
    print_success,
)
from strokefit.config import (
    LoggingConfig,
    StrategyName,
    StrokefitSettings,
)
from strokefit.core import CurveManager, default_strategies
from strokefit.exceptions import StrokefitError, StrokeReadError
from strokefit.io import StrokeReader
from strokefit.utils import ApproximationLogger, configure_logging

# Create the Typer app
app = typer.Typer(
    name="strokefit",
    help="Approximate freehand strokes with closed-form curve equations.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Strokefit[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Approximate freehand strokes with closed-form curve equations."""


@app.command()
def fit(
    stroke_file: Annotated[
        Path,
        typer.Argument(
            help="Path to a JSON or CSV stroke file",
            show_default=False,
        ),
    ],
    knots: Annotated[
        int | None,
        typer.Option(
            "--knots",
            "-k",
            help="Refit a B-spline result with this many knots",
        ),
    ] = None,
    disable: Annotated[
        list[str] | None,
        typer.Option(
            "--disable",
            "-d",
            help="Disable a strategy (repeatable)",
        ),
    ] = None,
    snap: Annotated[
        bool,
        typer.Option(
            "--snap",
            help="Snap coefficients in every strategy",
        ),
    ] = False,
    advanced: Annotated[
        bool,
        typer.Option(
            "--advanced",
            help="Keep strokes nothing fits as parametric curves",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
) -> None:
    """Fit a stroke and print the selected curve's equations.

    Every enabled strategy is tried; the table lists each attempt with its
    priority and error score, and the winner's equations follow.

    Example:
        strokefit fit stroke.json --knots 5
    """
    settings = StrokefitSettings(
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "WARNING",
        ),
    )
    configure_logging(
        log_file=settings.logging.log_file,
        console_level=settings.logging.log_level,
        file_level=settings.logging.file_log_level,
        quiet=quiet,
    )

    partial: dict = {"global": {"snap": snap}}
    try:
        disabled = [StrategyName(name.lower()) for name in disable or []]
    except ValueError:
        print_error(
            f"Unknown strategy in --disable: {', '.join(disable or [])}",
            details=f"Valid values: {', '.join(name.value for name in StrategyName)}",
        )
        raise typer.Exit(code=1)
    if disabled:
        partial["strategies"] = {name.value: {"enabled": False} for name in disabled}

    if not quiet:
        print_header(__version__)

    try:
        if not quiet:
            print_step("Loading stroke")

        reader = StrokeReader(stroke_file)
        points = reader.load()

        manager = CurveManager(settings)
        manager.set_approximator_settings(partial, source="cli", persist=False)
        bounds = reader.bounds or manager.domain(points)

        if not quiet:
            print_stroke_info(str(stroke_file), len(points), bounds)
            print_step("Fitting")

        start_time = time.perf_counter()
        result = manager.add_hand_drawn_curve(points, advanced=advanced, bounds=bounds)
        if not result.success:
            print_no_fit(result.alternatives)
            raise typer.Exit(code=1)

        curve = manager.store.require(result.curve_id)
        diagnostics = curve.diagnostics
        if not quiet:
            print_attempts(result.alternatives, curve.selected_strategy)

        print_success(
            strategy=curve.selected_strategy or "-",
            kind=curve.kind.value,
            error=diagnostics.error if diagnostics else None,
            total_time_s=time.perf_counter() - start_time,
        )
        print_equations(curve.equations)
        print_knots(curve.knots)

        if knots is not None:
            if not quiet:
                print_step(f"Refitting with {knots} knots")
            update = manager.set_knot_count(curve.id, knots)
            if update is None:
                console.print(f"  {curve.kind.value} curves have no editable knots")
            else:
                print_equations(update.equations)
                print_knots(update.knots)

    except StrokeReadError as e:
        print_error(f"Could not read stroke: {e.reason}")
        raise typer.Exit(code=1)
    except StrokefitError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except Exception as e:
        ApproximationLogger().log_error(str(stroke_file), e)
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


@app.command()
def strategies() -> None:
    """List the registered strategies in invocation order."""
    settings = StrokefitSettings().approximator
    priorities = settings.priorities
    rows = []
    for strategy in default_strategies():
        if strategy.name == StrategyName.LINEAR:
            priority = f"{priorities.constant}/{priorities.linear}"
        else:
            priority = str(getattr(priorities, strategy.name.value))
        enabled = settings.strategies.get(strategy.name).enabled
        rows.append((strategy.name.value, strategy.kind.value, priority, enabled))
    print_strategies(rows)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
