"""Command-line interface for strokefit.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- Ranking table of every strategy attempt
- Knot count refits of B-spline results
- Quiet output mode
- Detailed error reporting
"""

from strokefit.cli.app import cli, main

__all__ = ["cli", "main"]
