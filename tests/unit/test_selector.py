"""Tests for ApproximationSelector."""

import math

import numpy as np
import pytest

from strokefit.config import ApproximatorSettings, StrategyName
from strokefit.config.model import merge_settings
from strokefit.core.selector import ApproximationSelector
from strokefit.core.strategies import ApproximationStrategy
from strokefit.domain import Attempt, CurveKind, DomainBounds
from strokefit.exceptions import NoFitError


class FixedStrategy(ApproximationStrategy):
    """Strategy returning a canned attempt, for ranking tests."""

    name = StrategyName.SINGLE_QUADRATIC
    kind = CurveKind.SINGLE_QUADRATIC
    min_points = 1

    def __init__(self, label: str, priority: int, rms_error: float | None, success: bool = True):
        self.label = label
        self._priority = priority
        self._rms_error = rms_error
        self._success = success

    def priority(self, attempt, priorities) -> int:
        return self._priority

    def _fit(self, points, bounds, options) -> Attempt:
        return Attempt(
            label=self.label,
            kind=self.kind,
            success=self._success,
            rms_error=self._rms_error,
        )


class ExplodingStrategy(FixedStrategy):
    """Strategy whose fit raises."""

    def _fit(self, points, bounds, options) -> Attempt:
        raise RuntimeError("singular matrix")


POINTS = [(0.0, 0.0), (1.0, 1.0)]


@pytest.fixture
def settings() -> ApproximatorSettings:
    """Create default approximation settings."""
    return ApproximatorSettings()


@pytest.fixture
def bounds() -> DomainBounds:
    """Create the default domain rectangle."""
    return DomainBounds()


class TestSelection:
    """Tests for selecting among the default strategies."""

    def test_horizontal_two_points_is_constant(self, settings, bounds) -> None:
        """Test that a flat two-point stroke becomes y = c."""
        winner = ApproximationSelector().select([(0.0, 0.0), (1.0, 0.0)], bounds, settings)

        assert winner.kind == CurveKind.CONSTANT
        assert winner.label == "linear"
        assert winner.priority == 1
        assert winner.diagnostics.selected_strategy == "linear"
        assert winner.diagnostics.priority == 1

    def test_alternatives_cover_enabled_strategies(self, settings, bounds) -> None:
        """Test that every enabled strategy appears once, in invocation order."""
        winner = ApproximationSelector().select([(0.0, 0.0), (1.0, 0.0)], bounds, settings)
        labels = [a.label for a in winner.diagnostics.alternatives]

        assert labels == [
            "piecewise_linear",
            "linear",
            "single_quadratic",
            "single_circle",
            "quadratic_bspline",
            "selective_hybrid",
        ]
        successes = [a for a in winner.diagnostics.alternatives if a.success]
        assert [a.label for a in successes] == ["linear"]

    def test_circle_beats_spline(self, settings, bounds) -> None:
        """Test that a sampled circle selects the circle strategy."""
        angles = np.linspace(0.0, 2 * math.pi, 40, endpoint=False)
        points = [(3 * math.cos(a), 3 * math.sin(a)) for a in angles]
        winner = ApproximationSelector().select(points, bounds, settings)

        assert winner.kind == CurveKind.SINGLE_CIRCLE
        assert winner.priority == 4
        assert winner.export_data["closed"] is True

    def test_sine_selects_spline(self, settings, bounds) -> None:
        xs = np.linspace(0.0, 2 * math.pi, 60)
        points = [(float(x), math.sin(x)) for x in xs]
        winner = ApproximationSelector().select(points, bounds, settings)

        assert winner.kind == CurveKind.QUADRATIC_BSPLINE
        assert len(winner.pre_knots) > 0

    def test_single_point_has_no_fit(self, settings, bounds) -> None:
        """Test that NoFitError lists every enabled attempt."""
        with pytest.raises(NoFitError) as excinfo:
            ApproximationSelector().select([(1.0, 1.0)], bounds, settings)

        alternatives = excinfo.value.alternatives
        assert len(alternatives) == 6
        assert not any(a.success for a in alternatives)
        assert all(a.kind is None and a.error is None for a in alternatives)

    def test_empty_stroke_has_no_fit(self, settings, bounds) -> None:
        with pytest.raises(NoFitError):
            ApproximationSelector().select([], bounds, settings)

    def test_selection_is_deterministic(self, settings, bounds) -> None:
        """Test that the same input always produces the same winner."""
        points = [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (2.0, 1.0), (2.0, 2.0)]
        first = ApproximationSelector().select(points, bounds, settings)
        second = ApproximationSelector().select(points, bounds, settings)

        assert first.label == second.label
        assert first.equations == second.equations
        assert first.diagnostics == second.diagnostics

    def test_input_not_mutated(self, settings, bounds) -> None:
        points = [(0.0, 0.0), (1.0, 0.0)]
        ApproximationSelector().select(points, bounds, settings)
        assert points == [(0.0, 0.0), (1.0, 0.0)]


class TestRankingRules:
    """Tests for priority, error and label ordering."""

    def test_priority_dominates_error(self, settings, bounds) -> None:
        selector = ApproximationSelector(
            [FixedStrategy("tight", 5, 0.001), FixedStrategy("loose", 2, 0.5)]
        )
        assert selector.select(POINTS, bounds, settings).label == "loose"

    def test_error_breaks_tie(self, settings, bounds) -> None:
        selector = ApproximationSelector(
            [FixedStrategy("b", 3, 0.2), FixedStrategy("c", 3, 0.1)]
        )
        assert selector.select(POINTS, bounds, settings).label == "c"

    def test_label_breaks_full_tie(self, settings, bounds) -> None:
        """Test that equal priority and error fall back to the label."""
        selector = ApproximationSelector(
            [FixedStrategy("zeta", 3, 0.1), FixedStrategy("alpha", 3, 0.1)]
        )
        winner = selector.select(POINTS, bounds, settings)

        assert winner.label == "alpha"
        assert [a.label for a in winner.diagnostics.alternatives] == ["zeta", "alpha"]

    def test_unmeasured_error_ranks_last_in_tier(self, settings, bounds) -> None:
        selector = ApproximationSelector(
            [FixedStrategy("a", 3, None), FixedStrategy("b", 3, 7.0)]
        )
        winner = selector.select(POINTS, bounds, settings)

        assert winner.label == "b"
        assert winner.diagnostics.alternatives[0].error is None

    def test_raising_strategy_becomes_failure(self, settings, bounds) -> None:
        """Test that an exception inside a strategy does not stop selection."""
        selector = ApproximationSelector(
            [ExplodingStrategy("boom", 0, 0.0), FixedStrategy("ok", 3, 0.1)]
        )
        winner = selector.select(POINTS, bounds, settings)
        boom = winner.diagnostics.alternatives[0]

        assert winner.label == "ok"
        assert boom.label == "boom"
        assert not boom.success

    def test_only_failures_raise(self, settings, bounds) -> None:
        selector = ApproximationSelector(
            [FixedStrategy("a", 0, 0.1, success=False), ExplodingStrategy("b", 0, 0.0)]
        )
        with pytest.raises(NoFitError) as excinfo:
            selector.select(POINTS, bounds, settings)
        assert [a.label for a in excinfo.value.alternatives] == ["a", "b"]


class TestEnabledStrategies:
    """Tests for enabling and disabling strategies."""

    def test_disabled_strategy_is_skipped(self, bounds) -> None:
        settings = merge_settings(
            ApproximatorSettings(), {"strategies": {"linear": {"enabled": False}}}
        )
        attempts = ApproximationSelector().run([(0.0, 0.0), (1.0, 0.0)], bounds, settings)
        assert "linear" not in [a.label for a in attempts]

    def test_chain_runs_when_enabled(self, bounds) -> None:
        settings = merge_settings(
            ApproximatorSettings(), {"strategies": {"quadratic_chain": {"enabled": True}}}
        )
        attempts = ApproximationSelector().run([(0.0, 0.0), (1.0, 0.0)], bounds, settings)
        assert "quadratic_chain" in [a.label for a in attempts]

    def test_custom_priorities(self, bounds) -> None:
        """Test that priority tiers come from settings."""
        settings = merge_settings(ApproximatorSettings(), {"priorities": {"constant": 9}})
        attempts = ApproximationSelector().run([(0.0, 0.0), (1.0, 0.0)], bounds, settings)
        linear = next(a for a in attempts if a.label == "linear")
        assert linear.priority == 9

    def test_get_by_name(self) -> None:
        selector = ApproximationSelector()
        assert selector.get("single_circle").label == "single_circle"
        assert selector.get(StrategyName.LINEAR).label == "linear"

    def test_get_missing(self) -> None:
        selector = ApproximationSelector([FixedStrategy("x", 0, 0.0)])
        assert selector.get(StrategyName.LINEAR) is None

    def test_get_unknown_name(self) -> None:
        with pytest.raises(ValueError):
            ApproximationSelector().get("spirograph")
