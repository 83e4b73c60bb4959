"""Straight-line strategy (constant, sloped or vertical)."""

import numpy as np

from strokefit.config import LinearOptions, PriorityConfig, StrategyName
from strokefit.core._numeric import (
    diagonal,
    fmt,
    knot,
    polynomial,
    rms,
    snap_value,
    svg_polyline,
)
from strokefit.core.strategies.base import ApproximationStrategy
from strokefit.domain import Attempt, CurveKind, DomainBounds, Equation, EquationDomain


def fit_line_pca(points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Total-least-squares line through the points.

    Returns:
        Tuple of (centroid, unit direction)
    """
    centroid = points.mean(axis=0)
    _, _, vt = np.linalg.svd(points - centroid)
    direction = vt[0]
    if direction[0] < 0 or (direction[0] == 0 and direction[1] < 0):
        direction = -direction
    return centroid, direction


class LinearFunctionStrategy(ApproximationStrategy):
    """Fits a single straight line.

    The line is reported as ``y = c`` when nearly flat, ``x = c`` when nearly
    vertical, and ``y = mx + b`` otherwise.
    """

    name = StrategyName.LINEAR
    label = "linear"
    kind = CurveKind.LINEAR
    min_points = 2

    def priority(self, attempt: Attempt, priorities: PriorityConfig) -> int:
        if attempt.success and attempt.kind == CurveKind.CONSTANT:
            return priorities.constant
        return priorities.linear

    def _fit(self, points: np.ndarray, bounds: DomainBounds, options: LinearOptions) -> Attempt:
        centroid, direction = fit_line_pca(points)
        normal = np.array([-direction[1], direction[0]])
        residual = rms((points - centroid) @ normal)
        limit = options.tolerance * diagonal(points)

        along = (points - centroid) @ direction
        start = centroid + along.min() * direction
        end = centroid + along.max() * direction

        decimals = options.decimals
        dx, dy = float(direction[0]), float(direction[1])
        slope = dy / dx if abs(dx) > 1e-12 else np.inf

        if abs(slope) > options.vertical_slope:
            kind, label = CurveKind.VERTICAL, "linear_vertical"
            c = snap_value(float(centroid[0]), options)
            low, high = sorted((float(start[1]), float(end[1])))
            formula = f"x = {fmt(c, decimals)}"
            equation = Equation(formula, EquationDomain(round(low, decimals), round(high, decimals)), "y", formula)
            export = {"form": "vertical", "x": c}
        elif abs(slope) <= options.flat_slope:
            kind, label = CurveKind.CONSTANT, self.label
            c = snap_value(float(centroid[1]), options)
            low, high = sorted((float(start[0]), float(end[0])))
            formula = f"y = {fmt(c, decimals)}"
            equation = Equation(formula, EquationDomain(round(low, decimals), round(high, decimals)), "x", formula)
            export = {"form": "constant", "y": c}
        else:
            kind, label = CurveKind.LINEAR, self.label
            m = snap_value(slope, options)
            b = snap_value(float(centroid[1] - slope * centroid[0]), options)
            low, high = sorted((float(start[0]), float(end[0])))
            formula = f"y = {polynomial([m, b], 'x', decimals)}"
            equation = Equation(formula, EquationDomain(round(low, decimals), round(high, decimals)), "x", formula)
            export = {"form": "slope_intercept", "slope": m, "intercept": b}

        if residual > limit:
            return Attempt(
                label=self.label,
                kind=kind,
                success=False,
                rms_error=residual,
                message=f"residual {residual:.4g} exceeds {limit:.4g}",
            )

        return Attempt(
            label=label,
            kind=kind,
            success=True,
            svg_path=svg_polyline(np.array([start, end])),
            equations=(equation,),
            knots=(knot(start), knot(end)),
            rms_error=residual,
            export_data=export,
        )
