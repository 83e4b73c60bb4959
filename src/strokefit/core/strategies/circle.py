"""Circle and circular-arc strategy.

The circle is found with the algebraic (Kasa) fit and refined with a
nonlinear least-squares pass on the radial residuals.
"""

import math

import numpy as np
from scipy.optimize import least_squares

from strokefit.config import SingleCircleOptions, StrategyName
from strokefit.core._numeric import fmt, knot, rms, snap_value
from strokefit.core.strategies.base import ApproximationStrategy
from strokefit.domain import Attempt, CurveKind, DomainBounds, Equation, EquationDomain


def fit_circle_algebraic(points: np.ndarray) -> tuple[np.ndarray, float]:
    """Algebraic circle fit.

    Solves ``a*x + b*y + c = x^2 + y^2`` in the least-squares sense, where the
    center is ``(a/2, b/2)`` and ``r^2 = c + cx^2 + cy^2``.

    Returns:
        Tuple of (center, radius)
    """
    x = points[:, 0]
    y = points[:, 1]
    design = np.column_stack([x, y, np.ones(len(x))])
    target = x**2 + y**2
    solution, *_ = np.linalg.lstsq(design, target, rcond=None)
    cx = solution[0] / 2.0
    cy = solution[1] / 2.0
    radius = math.sqrt(max(solution[2] + cx**2 + cy**2, 0.0))
    return np.array([cx, cy]), radius


def fit_circle_nonlinear(
    points: np.ndarray, center: np.ndarray, radius: float
) -> tuple[np.ndarray, float]:
    """Refine a circle by minimizing radial residuals."""

    def residuals(params: np.ndarray) -> np.ndarray:
        return np.linalg.norm(points - params[:2], axis=1) - params[2]

    result = least_squares(residuals, [center[0], center[1], radius], max_nfev=200)
    return result.x[:2], abs(float(result.x[2]))


class SingleCircleStrategy(ApproximationStrategy):
    """Fits a full circle or a circular arc."""

    name = StrategyName.SINGLE_CIRCLE
    label = "single_circle"
    kind = CurveKind.SINGLE_CIRCLE

    def _fit(self, points: np.ndarray, bounds: DomainBounds, options: SingleCircleOptions) -> Attempt:
        center, radius = fit_circle_algebraic(points)
        if not (math.isfinite(radius) and radius > 1e-9 and np.all(np.isfinite(center))):
            return Attempt.failure(self.label, self.kind, "points do not determine a circle")
        center, radius = fit_circle_nonlinear(points, center, radius)
        if radius < 1e-9 or radius > 100.0 * max(bounds.diagonal, 1.0):
            return Attempt.failure(self.label, self.kind, "radius out of range")

        residual = rms(np.linalg.norm(points - center, axis=1) - radius)
        angles = np.unwrap(np.arctan2(points[:, 1] - center[1], points[:, 0] - center[0]))
        sweep = float(angles[-1] - angles[0])
        extent = math.degrees(abs(sweep))

        if residual > options.tolerance * radius:
            return Attempt(
                label=self.label,
                kind=self.kind,
                success=False,
                rms_error=residual,
                message=f"radial residual {residual:.4g} exceeds {options.tolerance * radius:.4g}",
            )
        if extent < options.min_sweep_degrees:
            return Attempt(
                label=self.label,
                kind=self.kind,
                success=False,
                rms_error=residual,
                message=f"arc sweeps only {extent:.1f} degrees",
            )

        gap = float(np.linalg.norm(points[-1] - points[0]))
        closed = gap <= options.closed_gap * radius and extent >= 270.0

        decimals = options.decimals
        cx = snap_value(float(center[0]), options)
        cy = snap_value(float(center[1]), options)
        r = snap_value(radius, options)
        x_text = f"x - {fmt(cx, decimals)}" if cx >= 0 else f"x + {fmt(-cx, decimals)}"
        y_text = f"y - {fmt(cy, decimals)}" if cy >= 0 else f"y + {fmt(-cy, decimals)}"
        formula = f"({x_text})^2 + ({y_text})^2 = {fmt(r, decimals)}^2"
        latex = (
            f"\\left({fmt(cx, decimals)} + {fmt(r, decimals)}\\cos t, "
            f"{fmt(cy, decimals)} + {fmt(r, decimals)}\\sin t\\right)"
        )

        if closed:
            theta0, theta1 = 0.0, 2.0 * math.pi
            start = center + radius * np.array([1.0, 0.0])
            opposite = center - radius * np.array([1.0, 0.0])
            svg_path = (
                f"M {fmt(start[0], 4)} {fmt(start[1], 4)}"
                f" A {fmt(radius, 4)} {fmt(radius, 4)} 0 1 1 {fmt(opposite[0], 4)} {fmt(opposite[1], 4)}"
                f" A {fmt(radius, 4)} {fmt(radius, 4)} 0 1 1 {fmt(start[0], 4)} {fmt(start[1], 4)}"
            )
            knots = (knot(start),)
        else:
            theta0, theta1 = sorted((float(angles[0]), float(angles[-1])))
            first = center + radius * np.array([math.cos(angles[0]), math.sin(angles[0])])
            last = center + radius * np.array([math.cos(angles[-1]), math.sin(angles[-1])])
            large_arc = 1 if abs(sweep) > math.pi else 0
            sweep_flag = 1 if sweep > 0 else 0
            svg_path = (
                f"M {fmt(first[0], 4)} {fmt(first[1], 4)}"
                f" A {fmt(radius, 4)} {fmt(radius, 4)} 0 {large_arc} {sweep_flag}"
                f" {fmt(last[0], 4)} {fmt(last[1], 4)}"
            )
            knots = (knot(first), knot(last))

        equation = Equation(
            formula,
            EquationDomain(round(theta0, decimals), round(theta1, decimals)),
            "t",
            latex,
        )
        return Attempt(
            label=self.label,
            kind=self.kind,
            success=True,
            svg_path=svg_path,
            equations=(equation,),
            knots=knots,
            rms_error=residual,
            export_data={
                "center": [cx, cy],
                "radius": r,
                "closed": closed,
                "start_angle": theta0,
                "end_angle": theta1,
            },
        )
