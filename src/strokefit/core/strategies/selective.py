"""Hybrid strategy choosing a line or a quadratic per segment.

Corners are found with a coarse Ramer-Douglas-Peucker pass. Each run between
corners is fitted both as a straight segment and as a single quadratic
Bezier; the line is kept when its residual is within ``line_weight`` times
the (weighted) quadratic residual.
"""

import numpy as np

from strokefit.config import SelectiveOptions, StrategyName
from strokefit.core._numeric import (
    chord_length_parameterize,
    diagonal,
    distance_to_segment,
    fit_quadratic_control,
    fmt,
    knot,
    line_equation,
    quadratic_equation,
    quadratic_point,
    rdp_indices,
    rms,
)
from strokefit.core.strategies.base import ApproximationStrategy
from strokefit.domain import Attempt, CurveKind, DomainBounds


class SelectiveHybridStrategy(ApproximationStrategy):
    """Per-segment line/quadratic selection."""

    name = StrategyName.SELECTIVE
    label = "selective_hybrid"
    kind = CurveKind.SELECTIVE_HYBRID

    def _fit(self, points: np.ndarray, bounds: DomainBounds, options: SelectiveOptions) -> Attempt:
        size = diagonal(points)
        corners = rdp_indices(points, options.corner_tolerance * size)
        limit = options.tolerance * size

        equations = []
        segment_errors: list[float | None] = []
        segment_kinds: list[str] = []
        path = f"M {fmt(points[0][0], 4)} {fmt(points[0][1], 4)}"

        for first, last in zip(corners[:-1], corners[1:], strict=True):
            run = points[first : last + 1]
            start, end = run[0], run[-1]
            line_error = rms(distance_to_segment(run, start, end))

            if len(run) >= 3:
                t = chord_length_parameterize(run)
                control = fit_quadratic_control(run, t)
                quad_error = rms(np.linalg.norm(run - quadratic_point(start, control, end, t), axis=1))
            else:
                control, quad_error = (start + end) / 2.0, line_error

            weighted = quad_error * options.quadratic_weight
            if line_error <= options.line_weight * weighted or line_error <= 1e-12:
                equations.append(line_equation(start, end, options))
                segment_errors.append(line_error)
                segment_kinds.append("line")
                path += f" L {fmt(end[0], 4)} {fmt(end[1], 4)}"
            else:
                equations.append(quadratic_equation(start, control, end, options))
                segment_errors.append(quad_error)
                segment_kinds.append("quadratic")
                path += (
                    f" Q {fmt(control[0], 4)} {fmt(control[1], 4)}"
                    f" {fmt(end[0], 4)} {fmt(end[1], 4)}"
                )

        worst = max(e for e in segment_errors if e is not None)
        if worst > limit:
            return Attempt(
                label=self.label,
                kind=self.kind,
                success=False,
                segment_errors=tuple(segment_errors),
                message=f"segment residual {worst:.4g} exceeds {limit:.4g}",
            )

        return Attempt(
            label=self.label,
            kind=self.kind,
            success=True,
            svg_path=path,
            equations=tuple(equations),
            knots=tuple(knot(points[i]) for i in corners),
            segment_errors=tuple(segment_errors),
            export_data={"segment_kinds": segment_kinds, "corners": corners},
        )
