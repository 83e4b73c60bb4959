"""Quadratic B-spline strategy.

The stroke is parameterized by chord length and fitted with a parametric
quadratic B-spline by linear least squares. Interior knots are inserted
greedily, one at a time, in the span with the largest squared residual; the
insertion order becomes each knot's priority, so the knots kept for a knot
count ``k`` are always those with ``priority < k - 2`` and raising ``k`` only
ever adds knots.
"""

from collections.abc import Sequence

import numpy as np
from scipy.interpolate import BSpline

from strokefit.config import QuadraticBSplineOptions, StrategyName
from strokefit.core._numeric import (
    as_array,
    chord_length_parameterize,
    dedupe,
    diagonal,
    knot,
    quadratic_equation,
    rms,
    svg_quadratic_chain,
)
from strokefit.core.strategies.base import ApproximationStrategy
from strokefit.domain import Attempt, CurveKind, DomainBounds, PreKnot, StrokePoint

DEGREE = 2


def knot_vector(interior: Sequence[float]) -> np.ndarray:
    """Clamped knot vector on [0, 1] with the given interior knots."""
    return np.concatenate([[0.0] * (DEGREE + 1), sorted(interior), [1.0] * (DEGREE + 1)])


def fit_spline(
    points: np.ndarray, u: np.ndarray, interior: Sequence[float]
) -> tuple[BSpline, np.ndarray]:
    """Least-squares quadratic B-spline through ``points`` at parameters ``u``.

    Returns:
        Tuple of (spline, per-point residual distances)
    """
    t = knot_vector(interior)
    design = BSpline.design_matrix(u, t, DEGREE).toarray()
    coefficients, *_ = np.linalg.lstsq(design, points, rcond=None)
    residuals = np.linalg.norm(points - design @ coefficients, axis=1)
    return BSpline(t, coefficients, DEGREE), residuals


def rank_knots(points: np.ndarray, u: np.ndarray, limit: int) -> list[PreKnot]:
    """Insert up to ``limit`` interior knots greedily and return them in order."""
    interior: list[float] = []
    ranked: list[PreKnot] = []

    for priority in range(limit):
        _, residuals = fit_spline(points, u, interior)
        edges = [0.0, *sorted(interior), 1.0]

        worst: tuple[float, float] | None = None
        for start, end in zip(edges[:-1], edges[1:], strict=True):
            inside = u[(u > start) & (u < end)]
            if len(inside) < 2:
                continue
            span_error = float(np.sum(residuals[(u >= start) & (u <= end)] ** 2))
            if worst is None or span_error > worst[0]:
                worst = (span_error, float(np.median(inside)))

        if worst is None:
            break
        interior.append(worst[1])
        ranked.append(PreKnot(knot=worst[1], priority=priority))

    return ranked


class QuadraticBSplineStrategy(ApproximationStrategy):
    """Fits a parametric quadratic B-spline with an adaptive knot count."""

    name = StrategyName.QUADRATIC_BSPLINE
    label = "quadratic_bspline"
    kind = CurveKind.QUADRATIC_BSPLINE

    def _fit(
        self, points: np.ndarray, bounds: DomainBounds, options: QuadraticBSplineOptions
    ) -> Attempt:
        u = chord_length_parameterize(points)
        max_knots = max(options.max_knots, options.min_knots)
        pre_knots = rank_knots(points, u, max_knots - 2)
        limit = options.tolerance * diagonal(points)

        chosen: list[float] = []
        for count in range(options.min_knots, max_knots + 1):
            chosen = [k.knot for k in pre_knots if k.priority < count - 2]
            _, residuals = fit_spline(points, u, chosen)
            if rms(residuals) <= limit or len(chosen) >= len(pre_knots):
                break

        return self._build(points, u, chosen, tuple(pre_knots), options)

    def fit_with_knots(
        self,
        points: Sequence[StrokePoint],
        bounds: DomainBounds,
        options: QuadraticBSplineOptions,
        knots: Sequence[PreKnot],
    ) -> Attempt:
        """Refit with an explicit set of interior knots.

        Args:
            points: Original stroke samples
            bounds: Domain rectangle
            options: Strategy options
            knots: Interior knots to use; their positions are normalized
                arc-length parameters in (0, 1)

        Returns:
            Attempt whose ``pre_knots`` are the knots that were passed in
        """
        samples = dedupe(as_array(points))
        if len(samples) < self.min_points or diagonal(samples) < 1e-12:
            return Attempt.failure(self.label, self.kind, "stroke cannot be refitted")
        interior = sorted({k.knot for k in knots if 0.0 < k.knot < 1.0})
        u = chord_length_parameterize(samples)
        return self._build(samples, u, interior, tuple(knots), options)

    def _build(
        self,
        points: np.ndarray,
        u: np.ndarray,
        interior: Sequence[float],
        pre_knots: tuple[PreKnot, ...],
        options: QuadraticBSplineOptions,
    ) -> Attempt:
        spline, residuals = fit_spline(points, u, interior)
        if not np.all(np.isfinite(spline.c)):
            return Attempt.failure(self.label, self.kind, "least-squares fit diverged")

        derivative = spline.derivative()
        edges = [0.0, *sorted(interior), 1.0]
        segments = []
        for start, end in zip(edges[:-1], edges[1:], strict=True):
            p0 = spline(start)
            p2 = spline(end)
            p1 = p0 + derivative(start) * (end - start) / 2.0
            segments.append((p0, p1, p2))

        return Attempt(
            label=self.label,
            kind=self.kind,
            success=True,
            svg_path=svg_quadratic_chain(segments),
            equations=tuple(quadratic_equation(*segment, options) for segment in segments),
            knots=tuple(knot(spline(e)) for e in edges),
            pre_knots=pre_knots,
            rms_error=rms(residuals),
            export_data={
                "degree": DEGREE,
                "knot_vector": spline.t.tolist(),
                "control_points": spline.c.tolist(),
                "knot_params": list(edges),
            },
        )
