"""Piecewise-linear strategy.

Simplifies the stroke with Ramer-Douglas-Peucker and accepts the result when
a small number of straight, well-filled segments reproduce it.
"""

import numpy as np

from strokefit.config import PiecewiseLinearOptions, StrategyName
from strokefit.core._numeric import (
    diagonal,
    knot,
    line_equation,
    path_length,
    rdp_indices,
    svg_polyline,
)
from strokefit.core.strategies.base import ApproximationStrategy
from strokefit.domain import Attempt, CurveKind, DomainBounds


class PiecewiseLinearStrategy(ApproximationStrategy):
    """Fits a polyline of two or more straight segments."""

    name = StrategyName.PIECEWISE_LINEAR
    label = "piecewise_linear"
    kind = CurveKind.PIECEWISE_LINEAR

    def _fit(
        self, points: np.ndarray, bounds: DomainBounds, options: PiecewiseLinearOptions
    ) -> Attempt:
        epsilon = options.tolerance * diagonal(points)
        indices = rdp_indices(points, epsilon)
        segment_count = len(indices) - 1

        if segment_count < 2:
            return Attempt.failure(self.label, self.kind, "stroke is a single straight segment")
        if segment_count > options.max_segments:
            return Attempt.failure(
                self.label,
                self.kind,
                f"{segment_count} segments exceed the limit of {options.max_segments}",
            )

        linearities: list[float] = []
        for first, last in zip(indices[:-1], indices[1:], strict=True):
            run = points[first : last + 1]
            arc = path_length(run)
            chord = float(np.linalg.norm(run[-1] - run[0]))
            linearities.append(chord / arc if arc > 1e-12 else 1.0)

        average_linearity = float(np.mean(linearities))
        if min(linearities) < options.min_linearity:
            return Attempt(
                label=self.label,
                kind=self.kind,
                success=False,
                average_linearity=average_linearity,
                message=f"segment linearity {min(linearities):.4f} below {options.min_linearity}",
            )

        vertices = points[indices]
        equations = tuple(
            line_equation(vertices[i], vertices[i + 1], options) for i in range(segment_count)
        )
        return Attempt(
            label=self.label,
            kind=self.kind,
            success=True,
            svg_path=svg_polyline(vertices),
            equations=equations,
            knots=tuple(knot(v) for v in vertices),
            average_linearity=average_linearity,
            export_data={"vertices": vertices.tolist(), "linearities": linearities},
        )
