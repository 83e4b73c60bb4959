"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with tables and formatted messages.
"""

from collections.abc import Iterable, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from strokefit.domain import AttemptSummary, DomainBounds, Equation, KnotPoint

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Strokefit[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_stroke_info(stroke_path: str, point_count: int, bounds: DomainBounds) -> None:
    """Print stroke information.

    Args:
        stroke_path: Path to the stroke file
        point_count: Number of samples
        bounds: Domain rectangle used for fitting
    """
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(stroke_path)
    console.print(line)
    console.print(
        f"  {point_count:,} points {SYM_DOT} "
        f"x {_format_number(bounds.x_min)}..{_format_number(bounds.x_max)} {SYM_DOT} "
        f"y {_format_number(bounds.y_min)}..{_format_number(bounds.y_max)}"
    )


def _format_number(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value:.4g}"


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_attempts(alternatives: Sequence[AttemptSummary], selected: str | None = None) -> None:
    """Print every attempt with its outcome.

    Args:
        alternatives: Attempt summaries in invocation order
        selected: Label of the winning attempt, highlighted if given
    """
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Strategy")
    table.add_column("Kind")
    table.add_column("Priority", justify="right")
    table.add_column("Error", justify="right")
    table.add_column("Result")

    for attempt in alternatives:
        if attempt.label == selected:
            result = f"[bold green]{SYM_OK} selected[/bold green]"
        elif attempt.success:
            result = f"[green]{SYM_OK}[/green]"
        else:
            result = f"[red]{SYM_ERR}[/red]"
        table.add_row(
            attempt.label,
            attempt.kind.value if attempt.kind else "-",
            str(attempt.priority),
            _format_number(attempt.error),
            result,
        )
    console.print(table)


def print_equations(equations: Iterable[Equation]) -> None:
    """Print equation pieces with their domains.

    Args:
        equations: Pieces in domain order
    """
    equations = list(equations)
    if not equations:
        console.print("  (no closed-form equations)")
        return
    for index, equation in enumerate(equations, start=1):
        line = Text(f"  {index}. ")
        line.append(equation.formula, style="bold")
        line.append(
            f"  {SYM_DOT} {_format_number(equation.domain.start)} <= {equation.axis} "
            f"<= {_format_number(equation.domain.end)}"
        )
        console.print(line)


def print_knots(knots: Sequence[KnotPoint]) -> None:
    """Print knot positions on one line.

    Args:
        knots: Knot positions in order
    """
    if not knots:
        return
    positions = ", ".join(f"({_format_number(k.x)}, {_format_number(k.y)})" for k in knots)
    console.print(f"  knots {SYM_DOT} {positions}")


def print_strategies(rows: Sequence[tuple[str, str, str, bool]]) -> None:
    """Print registered strategies.

    Args:
        rows: (name, kind, priority, enabled) tuples in invocation order
    """
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Strategy")
    table.add_column("Kind")
    table.add_column("Priority", justify="right")
    table.add_column("Enabled")
    for name, kind, priority, enabled in rows:
        flag = f"[green]{SYM_OK}[/green]" if enabled else f"[dim]{SYM_ERR}[/dim]"
        table.add_row(name, kind, priority, flag)
    console.print(table)


def print_success(strategy: str, kind: str, error: float | None, total_time_s: float) -> None:
    """Print success message with summary.

    Args:
        strategy: Label of the selected strategy
        kind: Kind of the resulting curve
        error: Error score of the selected attempt
        total_time_s: Total fitting time in seconds
    """
    console.print(
        f"\n[bold green]{SYM_OK} Fitted[/bold green] as [bold]{kind}[/bold] "
        f"in {_format_time(total_time_s)}"
    )
    console.print(f"  {strategy} {SYM_DOT} error {_format_number(error)}")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_no_fit(alternatives: Sequence[AttemptSummary]) -> None:
    """Print the attempts of a stroke nothing could fit.

    Args:
        alternatives: Attempt summaries in invocation order
    """
    print_error("No strategy could approximate the stroke")
    if alternatives:
        print_attempts(alternatives)
