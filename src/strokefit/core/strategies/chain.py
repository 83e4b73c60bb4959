"""Quadratic Bezier chain strategy.

Splits the stroke into equal-count runs and fits one quadratic Bezier per
run, sharing endpoints between neighbours. Disabled by default.
"""

import numpy as np

from strokefit.config import QuadraticChainOptions, StrategyName
from strokefit.core._numeric import (
    chord_length_parameterize,
    diagonal,
    fit_quadratic_control,
    knot,
    quadratic_equation,
    quadratic_point,
    rms,
    svg_quadratic_chain,
)
from strokefit.core.strategies.base import ApproximationStrategy
from strokefit.domain import Attempt, CurveKind, DomainBounds


def fit_chain(points: np.ndarray, pieces: int) -> tuple[list[tuple[np.ndarray, ...]], float]:
    """Fit ``pieces`` quadratic segments over equal-count runs.

    Returns:
        Tuple of (segments as (p0, p1, p2), overall RMS residual)
    """
    bounds = np.linspace(0, len(points) - 1, pieces + 1).round().astype(int)
    segments = []
    residuals = []
    for first, last in zip(bounds[:-1], bounds[1:], strict=True):
        run = points[first : last + 1]
        t = chord_length_parameterize(run)
        control = fit_quadratic_control(run, t)
        segments.append((run[0], control, run[-1]))
        residuals.append(np.linalg.norm(run - quadratic_point(run[0], control, run[-1], t), axis=1))
    return segments, rms(np.concatenate(residuals))


class QuadraticBezierChainStrategy(ApproximationStrategy):
    """Fits the fewest equal-count quadratic pieces that meet the tolerance."""

    name = StrategyName.QUADRATIC_CHAIN
    label = "quadratic_chain"
    kind = CurveKind.QUADRATIC_CHAIN

    def _fit(
        self, points: np.ndarray, bounds: DomainBounds, options: QuadraticChainOptions
    ) -> Attempt:
        limit = options.tolerance * diagonal(points)
        most = min(options.max_segments, (len(points) - 1) // 2)
        residual = float("inf")

        for pieces in range(1, most + 1):
            segments, residual = fit_chain(points, pieces)
            if residual <= limit:
                break
        else:
            return Attempt(
                label=self.label,
                kind=self.kind,
                success=False,
                rms_error=residual if np.isfinite(residual) else None,
                message=f"no chain of up to {most} pieces within {limit:.4g}",
            )

        knots = [knot(segments[0][0])] + [knot(segment[2]) for segment in segments]
        return Attempt(
            label=self.label,
            kind=self.kind,
            success=True,
            svg_path=svg_quadratic_chain(segments),
            equations=tuple(quadratic_equation(*segment, options) for segment in segments),
            knots=tuple(knots),
            rms_error=residual,
            export_data={
                "control_points": [[p.tolist() for p in segment] for segment in segments],
            },
        )
