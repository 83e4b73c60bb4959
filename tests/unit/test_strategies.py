"""Tests for the approximation strategies."""

import math

import numpy as np
import pytest

from strokefit.config import ApproximatorSettings, QuadraticChainOptions, StrategyName
from strokefit.core.strategies import (
    STRATEGY_TYPES,
    LinearFunctionStrategy,
    PiecewiseLinearStrategy,
    QuadraticBezierChainStrategy,
    QuadraticBSplineStrategy,
    SelectiveHybridStrategy,
    SingleCircleStrategy,
    SingleQuadraticBezierStrategy,
    default_strategies,
)
from strokefit.core.strategies.bspline import knot_vector, rank_knots
from strokefit.core._numeric import as_array, chord_length_parameterize
from strokefit.domain import CurveKind, DomainBounds, PreKnot


def circle_points(count: int, radius: float, center=(0.0, 0.0), sweep: float = 2 * math.pi):
    """Sample ``count`` points on a circle, excluding the closing point of a full turn."""
    step = sweep / count if math.isclose(sweep, 2 * math.pi) else sweep / (count - 1)
    return [
        (center[0] + radius * math.cos(i * step), center[1] + radius * math.sin(i * step))
        for i in range(count)
    ]


def sine_points(count: int = 60):
    """Sample one full period of a sine wave."""
    xs = np.linspace(0.0, 2 * math.pi, count)
    return [(float(x), float(math.sin(x))) for x in xs]


L_SHAPE = [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (2.0, 1.0), (2.0, 2.0)]


@pytest.fixture
def settings() -> ApproximatorSettings:
    """Create default approximation settings."""
    return ApproximatorSettings()


@pytest.fixture
def bounds() -> DomainBounds:
    """Create the default domain rectangle."""
    return DomainBounds()


class TestRegistry:
    """Tests for the strategy registry."""

    def test_every_strategy_registered(self) -> None:
        assert set(STRATEGY_TYPES) == set(StrategyName)

    def test_invocation_order(self) -> None:
        """Test that strategies run in priority-tier order."""
        names = [s.name for s in default_strategies()]
        assert names == [
            StrategyName.PIECEWISE_LINEAR,
            StrategyName.LINEAR,
            StrategyName.SINGLE_QUADRATIC,
            StrategyName.SINGLE_CIRCLE,
            StrategyName.QUADRATIC_BSPLINE,
            StrategyName.QUADRATIC_CHAIN,
            StrategyName.SELECTIVE,
        ]

    def test_labels_unique(self) -> None:
        labels = [s.label for s in default_strategies()]
        assert len(labels) == len(set(labels))


class TestCommonContract:
    """Tests shared by every strategy."""

    @pytest.mark.parametrize("strategy_type", list(STRATEGY_TYPES.values()))
    def test_single_point_fails_without_raising(
        self, strategy_type, settings: ApproximatorSettings, bounds: DomainBounds
    ) -> None:
        """Test that too few points yield an unsuccessful attempt."""
        strategy = strategy_type()
        attempt = strategy.fit([(1.0, 1.0)], bounds, strategy.options(settings))
        assert not attempt.success
        assert attempt.label == strategy.label
        assert "at least" in attempt.message

    @pytest.mark.parametrize("strategy_type", list(STRATEGY_TYPES.values()))
    def test_repeated_point_fails(
        self, strategy_type, settings: ApproximatorSettings, bounds: DomainBounds
    ) -> None:
        strategy = strategy_type()
        attempt = strategy.fit([(2.0, 2.0)] * 5, bounds, strategy.options(settings))
        assert not attempt.success

    def test_input_not_mutated(self, settings: ApproximatorSettings, bounds: DomainBounds) -> None:
        points = list(L_SHAPE)
        strategy = PiecewiseLinearStrategy()
        strategy.fit(points, bounds, strategy.options(settings))
        assert points == L_SHAPE


class TestLinearFunctionStrategy:
    """Tests for LinearFunctionStrategy."""

    @pytest.fixture
    def strategy(self) -> LinearFunctionStrategy:
        return LinearFunctionStrategy()

    def test_sloped_line(self, strategy, settings, bounds) -> None:
        """Test y = mx + b output for a sloped line."""
        points = [(0.0, 1.0), (1.0, 3.0), (2.0, 5.0), (3.0, 7.0)]
        attempt = strategy.fit(points, bounds, settings.strategies.linear)

        assert attempt.success
        assert attempt.kind == CurveKind.LINEAR
        assert attempt.label == "linear"
        assert attempt.equations[0].formula == "y = 2x + 1"
        assert attempt.equations[0].axis == "x"
        assert attempt.rms_error < 1e-9
        assert attempt.export_data["slope"] == 2.0

    def test_two_point_horizontal_is_constant(self, strategy, settings, bounds) -> None:
        """Test that a flat two-point stroke is a constant."""
        attempt = strategy.fit([(0.0, 0.0), (1.0, 0.0)], bounds, settings.strategies.linear)

        assert attempt.success
        assert attempt.kind == CurveKind.CONSTANT
        assert attempt.equations[0].formula == "y = 0"
        assert strategy.priority(attempt, settings.priorities) == 1

    def test_vertical_line(self, strategy, settings, bounds) -> None:
        """Test x = c output for a vertical stroke."""
        points = [(1.0, 0.0), (1.0, 1.0), (1.0, 2.0)]
        attempt = strategy.fit(points, bounds, settings.strategies.linear)

        assert attempt.success
        assert attempt.kind == CurveKind.VERTICAL
        assert attempt.label == "linear_vertical"
        assert attempt.equations[0].formula == "x = 1"
        assert attempt.equations[0].axis == "y"
        assert strategy.priority(attempt, settings.priorities) == 2

    def test_sloped_priority(self, strategy, settings, bounds) -> None:
        attempt = strategy.fit([(0.0, 0.0), (1.0, 1.0)], bounds, settings.strategies.linear)
        assert strategy.priority(attempt, settings.priorities) == 2

    def test_bent_stroke_fails(self, strategy, settings, bounds) -> None:
        """Test that a V shape is rejected."""
        attempt = strategy.fit([(0.0, 0.0), (1.0, 1.0), (2.0, 0.0)], bounds, settings.strategies.linear)

        assert not attempt.success
        assert attempt.label == "linear"
        assert attempt.rms_error > 0.0
        assert "exceeds" in attempt.message

    def test_snap(self, strategy, settings, bounds) -> None:
        """Test coefficient snapping to the grid."""
        options = settings.strategies.linear.model_copy(update={"snap": True})
        points = [(0.0, 0.9), (1.0, 2.9), (2.0, 4.9)]
        attempt = strategy.fit(points, bounds, options)
        assert attempt.equations[0].formula == "y = 2x + 1"


class TestPiecewiseLinearStrategy:
    """Tests for PiecewiseLinearStrategy."""

    @pytest.fixture
    def strategy(self) -> PiecewiseLinearStrategy:
        return PiecewiseLinearStrategy()

    def test_l_shape(self, strategy, settings, bounds) -> None:
        """Test that an L shape becomes two segments."""
        attempt = strategy.fit(L_SHAPE, bounds, settings.strategies.piecewise_linear)

        assert attempt.success
        assert attempt.kind == CurveKind.PIECEWISE_LINEAR
        assert [eq.formula for eq in attempt.equations] == ["y = 0", "x = 2"]
        assert len(attempt.knots) == 3
        assert attempt.average_linearity == pytest.approx(1.0)
        assert attempt.rms_error is None

    def test_single_segment_fails(self, strategy, settings, bounds) -> None:
        """Test that a straight stroke is left to the linear strategy."""
        points = [(float(i), 2.0 * i) for i in range(6)]
        attempt = strategy.fit(points, bounds, settings.strategies.piecewise_linear)
        assert not attempt.success
        assert "single straight segment" in attempt.message

    def test_circle_needs_too_many_segments(self, strategy, settings, bounds) -> None:
        attempt = strategy.fit(circle_points(40, 3.0), bounds, settings.strategies.piecewise_linear)
        assert not attempt.success


class TestSingleQuadraticBezierStrategy:
    """Tests for SingleQuadraticBezierStrategy."""

    @pytest.fixture
    def strategy(self) -> SingleQuadraticBezierStrategy:
        return SingleQuadraticBezierStrategy()

    def test_gentle_parabola(self, strategy, settings, bounds) -> None:
        """Test that a shallow parabola is one quadratic piece."""
        points = [(x, 0.1 * x * x) for x in np.linspace(-1.0, 1.0, 21)]
        attempt = strategy.fit(points, bounds, settings.strategies.single_quadratic)

        assert attempt.success
        assert attempt.kind == CurveKind.SINGLE_QUADRATIC
        assert len(attempt.equations) == 1
        assert attempt.equations[0].axis == "t"
        assert attempt.equations[0].formula.startswith("(x, y) = (")
        assert len(attempt.export_data["control_points"]) == 3
        assert attempt.svg_path.startswith("M ")
        assert " Q " in attempt.svg_path

    def test_full_circle_fails(self, strategy, settings, bounds) -> None:
        attempt = strategy.fit(circle_points(40, 3.0), bounds, settings.strategies.single_quadratic)
        assert not attempt.success
        assert attempt.rms_error > 0.0


class TestSingleCircleStrategy:
    """Tests for SingleCircleStrategy."""

    @pytest.fixture
    def strategy(self) -> SingleCircleStrategy:
        return SingleCircleStrategy()

    def test_full_circle(self, strategy, settings, bounds) -> None:
        """Test that a sampled circle is recovered as a closed circle."""
        points = circle_points(40, 3.0, center=(1.0, -2.0))
        attempt = strategy.fit(points, bounds, settings.strategies.single_circle)

        assert attempt.success
        assert attempt.kind == CurveKind.SINGLE_CIRCLE
        assert attempt.export_data["closed"] is True
        assert attempt.export_data["center"] == pytest.approx([1.0, -2.0])
        assert attempt.export_data["radius"] == pytest.approx(3.0)
        assert attempt.equations[0].formula == "(x - 1)^2 + (y + 2)^2 = 3^2"
        assert attempt.equations[0].axis == "t"
        assert attempt.rms_error < 1e-6

    def test_half_circle_arc(self, strategy, settings, bounds) -> None:
        """Test an open arc keeps both endpoints as knots."""
        points = circle_points(20, 2.0, sweep=math.pi)
        attempt = strategy.fit(points, bounds, settings.strategies.single_circle)

        assert attempt.success
        assert attempt.export_data["closed"] is False
        assert len(attempt.knots) == 2
        domain = attempt.equations[0].domain
        assert domain.end - domain.start == pytest.approx(math.pi, abs=1e-3)

    def test_short_arc_fails(self, strategy, settings, bounds) -> None:
        """Test that arcs below the minimum sweep are rejected."""
        points = circle_points(10, 2.0, sweep=math.radians(45))
        attempt = strategy.fit(points, bounds, settings.strategies.single_circle)
        assert not attempt.success

    def test_straight_line_fails(self, strategy, settings, bounds) -> None:
        points = [(float(i), float(i)) for i in range(10)]
        attempt = strategy.fit(points, bounds, settings.strategies.single_circle)
        assert not attempt.success


class TestQuadraticBSplineStrategy:
    """Tests for QuadraticBSplineStrategy."""

    @pytest.fixture
    def strategy(self) -> QuadraticBSplineStrategy:
        return QuadraticBSplineStrategy()

    def test_knot_vector_is_clamped(self) -> None:
        assert knot_vector([0.5]).tolist() == [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0]

    def test_rank_knots_priorities_follow_insertion(self) -> None:
        """Test that candidate knots are ranked by insertion order."""
        points = as_array(sine_points())
        u = chord_length_parameterize(points)
        ranked = rank_knots(points, u, 5)

        assert [k.priority for k in ranked] == [0, 1, 2, 3, 4]
        assert all(0.0 < k.knot < 1.0 for k in ranked)
        assert len({k.knot for k in ranked}) == len(ranked)

    def test_sine_wave(self, strategy, settings, bounds) -> None:
        """Test fitted pieces, knots and candidate knots."""
        attempt = strategy.fit(sine_points(), bounds, settings.strategies.quadratic_bspline)

        assert attempt.success
        assert attempt.kind == CurveKind.QUADRATIC_BSPLINE
        assert len(attempt.equations) == len(attempt.knots) - 1
        assert len(attempt.pre_knots) == 8
        assert all(eq.axis == "t" for eq in attempt.equations)
        assert attempt.export_data["degree"] == 2
        assert attempt.rms_error <= 0.005 * math.hypot(2 * math.pi, 2.0)

    def test_fit_with_knots(self, strategy, settings, bounds) -> None:
        """Test refitting with an explicit interior knot set."""
        options = settings.strategies.quadratic_bspline
        full = strategy.fit(sine_points(), bounds, options)
        chosen = sorted((k for k in full.pre_knots if k.priority < 3), key=lambda k: k.knot)

        refit = strategy.fit_with_knots(sine_points(), bounds, options, chosen)

        assert refit.success
        assert len(refit.equations) == 4
        assert len(refit.knots) == 5
        assert refit.pre_knots == tuple(chosen)
        assert refit.export_data["knot_params"][1:-1] == [k.knot for k in chosen]

    def test_fit_with_no_knots(self, strategy, settings, bounds) -> None:
        refit = strategy.fit_with_knots(
            sine_points(), bounds, settings.strategies.quadratic_bspline, []
        )
        assert len(refit.equations) == 1
        assert len(refit.knots) == 2

    def test_fit_with_knots_ignores_out_of_range(self, strategy, settings, bounds) -> None:
        refit = strategy.fit_with_knots(
            sine_points(),
            bounds,
            settings.strategies.quadratic_bspline,
            [PreKnot(0.0, 0), PreKnot(1.0, 1), PreKnot(0.5, 2)],
        )
        assert len(refit.equations) == 2

    def test_fit_with_knots_is_deterministic(self, strategy, settings, bounds) -> None:
        options = settings.strategies.quadratic_bspline
        knots = [PreKnot(0.3, 0), PreKnot(0.7, 1)]
        first = strategy.fit_with_knots(sine_points(), bounds, options, knots)
        second = strategy.fit_with_knots(sine_points(), bounds, options, knots)
        assert first.equations == second.equations
        assert first.knots == second.knots


class TestQuadraticBezierChainStrategy:
    """Tests for QuadraticBezierChainStrategy."""

    @pytest.fixture
    def strategy(self) -> QuadraticBezierChainStrategy:
        return QuadraticBezierChainStrategy()

    def test_straight_stroke_is_one_piece(self, strategy, bounds) -> None:
        options = QuadraticChainOptions(enabled=True)
        points = [(float(i), 0.5 * i) for i in range(9)]
        attempt = strategy.fit(points, bounds, options)

        assert attempt.success
        assert len(attempt.equations) == 1
        assert len(attempt.knots) == 2

    def test_piece_limit(self, strategy, bounds) -> None:
        """Test that a zigzag cannot be one quadratic."""
        options = QuadraticChainOptions(enabled=True, max_segments=1)
        points = [(0.0, 0.0), (1.0, 1.0), (2.0, 0.0), (3.0, 1.0), (4.0, 0.0)]
        attempt = strategy.fit(points, bounds, options)

        assert not attempt.success
        assert attempt.rms_error > 0.0


class TestSelectiveHybridStrategy:
    """Tests for SelectiveHybridStrategy."""

    @pytest.fixture
    def strategy(self) -> SelectiveHybridStrategy:
        return SelectiveHybridStrategy()

    def test_l_shape_uses_lines(self, strategy, settings, bounds) -> None:
        """Test that straight runs between corners become lines."""
        attempt = strategy.fit(L_SHAPE, bounds, settings.strategies.selective)

        assert attempt.success
        assert attempt.kind == CurveKind.SELECTIVE_HYBRID
        assert attempt.export_data["segment_kinds"] == ["line", "line"]
        assert attempt.export_data["corners"] == [0, 2, 4]
        assert attempt.segment_errors == pytest.approx((0.0, 0.0))
        assert attempt.rms_error is None

    def test_curved_run_uses_quadratic(self, strategy, settings, bounds) -> None:
        """Test that a curved run without corners becomes a quadratic."""
        points = [(x, 0.1 * x * x) for x in np.linspace(-1.0, 1.0, 21)]
        options = settings.strategies.selective.model_copy(update={"corner_tolerance": 0.5})
        attempt = strategy.fit(points, bounds, options)

        assert attempt.export_data["segment_kinds"] == ["quadratic"]
        assert attempt.success
