"""End-to-end tests for the command line interface."""

import json
import logging
import math
from pathlib import Path

import pytest
from typer.testing import CliRunner

from strokefit import __version__
from strokefit.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def detach_log_handlers():
    """Remove the handlers a CLI run attaches to the root logger."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_strokefit_handler", False):
            root.removeHandler(handler)
            handler.close()


def write_json(tmp_path: Path, points, name: str = "stroke.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(points), encoding="utf-8")
    return path


class TestFitCommand:
    """Tests for `strokefit fit`."""

    def test_line(self, tmp_path: Path) -> None:
        """Test fitting a sloped line from JSON."""
        path = write_json(tmp_path, [[0, 1], [1, 3], [2, 5]])
        result = runner.invoke(app, ["fit", str(path)])

        assert result.exit_code == 0, result.output
        assert "y = 2x + 1" in result.output
        assert "Fitted" in result.output

    def test_circle_csv(self, tmp_path: Path) -> None:
        path = tmp_path / "circle.csv"
        rows = ["x,y"] + [
            f"{3 * math.cos(i * math.pi / 20):.6f},{3 * math.sin(i * math.pi / 20):.6f}"
            for i in range(40)
        ]
        path.write_text("\n".join(rows), encoding="utf-8")

        result = runner.invoke(app, ["fit", str(path)])

        assert result.exit_code == 0, result.output
        assert "single_circle" in result.output
        assert "^2 = 3^2" in result.output

    def test_knots_on_spline(self, tmp_path: Path) -> None:
        """Test refitting a spline with a requested knot count."""
        points = [[x, math.sin(x)] for x in (i * 2 * math.pi / 59 for i in range(60))]
        path = write_json(tmp_path, points)

        result = runner.invoke(app, ["fit", str(path), "--knots", "5"])

        assert result.exit_code == 0, result.output
        assert "quadratic_bspline" in result.output
        assert "Refitting with 5 knots" in result.output
        assert "4. " in result.output

    def test_knots_on_line(self, tmp_path: Path) -> None:
        path = write_json(tmp_path, [[0, 0], [1, 0]])
        result = runner.invoke(app, ["fit", str(path), "-k", "4"])

        assert result.exit_code == 0, result.output
        assert "no editable knots" in result.output

    def test_invalid_knot_count(self, tmp_path: Path) -> None:
        points = [[x, math.sin(x)] for x in (i * 2 * math.pi / 59 for i in range(60))]
        path = write_json(tmp_path, points)
        result = runner.invoke(app, ["fit", str(path), "--knots", "1"])

        assert result.exit_code == 1
        assert "knot_count" in result.output

    def test_no_fit(self, tmp_path: Path) -> None:
        path = write_json(tmp_path, [[1, 1]])
        result = runner.invoke(app, ["fit", str(path)])

        assert result.exit_code == 1
        assert "No strategy could approximate the stroke" in result.output

    def test_advanced_keeps_stroke(self, tmp_path: Path) -> None:
        path = write_json(tmp_path, [[1, 1]])
        result = runner.invoke(app, ["fit", str(path), "--advanced"])

        assert result.exit_code == 0, result.output
        assert "parametric" in result.output

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["fit", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "Could not read stroke" in result.output

    def test_disable_strategy(self, tmp_path: Path) -> None:
        """Test that disabling the only fitting strategy leaves no fit."""
        path = write_json(tmp_path, [[0, 0], [1, 0]])
        result = runner.invoke(app, ["fit", str(path), "--disable", "linear"])
        assert result.exit_code == 1

    def test_disable_unknown_strategy(self, tmp_path: Path) -> None:
        path = write_json(tmp_path, [[0, 0], [1, 0]])
        result = runner.invoke(app, ["fit", str(path), "-d", "spirograph"])

        assert result.exit_code == 1
        assert "Unknown strategy" in result.output

    def test_quiet(self, tmp_path: Path) -> None:
        path = write_json(tmp_path, [[0, 1], [1, 3], [2, 5]])
        result = runner.invoke(app, ["fit", str(path), "--quiet"])

        assert result.exit_code == 0, result.output
        assert f"v{__version__}" not in result.output
        assert "y = 2x + 1" in result.output

    def test_log_file(self, tmp_path: Path) -> None:
        path = write_json(tmp_path, [[0, 1], [1, 3], [2, 5]])
        log_file = tmp_path / "fit.log"
        result = runner.invoke(app, ["fit", str(path), "--log-file", str(log_file)])

        assert result.exit_code == 0, result.output
        assert log_file.exists()
        assert "Approximation selected" in log_file.read_text(encoding="utf-8")

    def test_undecodable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "stroke.csv"
        path.write_bytes(b"x,y\n0,\xff\n")
        result = runner.invoke(app, ["fit", str(path)])

        assert result.exit_code == 1
        assert "Could not read stroke" in result.output


class TestOtherCommands:
    """Tests for `strokefit strategies` and `--version`."""

    def test_strategies(self) -> None:
        result = runner.invoke(app, ["strategies"])

        assert result.exit_code == 0, result.output
        for name in ("piecewise_linear", "linear", "single_circle", "quadratic_bspline", "selective"):
            assert name in result.output
        assert "1/2" in result.output

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output
