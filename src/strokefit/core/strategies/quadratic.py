"""Single quadratic Bezier strategy."""

import numpy as np

from strokefit.config import SingleQuadraticOptions, StrategyName
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


class SingleQuadraticBezierStrategy(ApproximationStrategy):
    """Fits one quadratic Bezier with the stroke's endpoints fixed."""

    name = StrategyName.SINGLE_QUADRATIC
    label = "single_quadratic"
    kind = CurveKind.SINGLE_QUADRATIC

    def _fit(
        self, points: np.ndarray, bounds: DomainBounds, options: SingleQuadraticOptions
    ) -> Attempt:
        t = chord_length_parameterize(points)
        p0, p2 = points[0], points[-1]
        p1 = fit_quadratic_control(points, t)
        fitted = quadratic_point(p0, p1, p2, t)
        residual = rms(np.linalg.norm(points - fitted, axis=1))
        limit = options.tolerance * diagonal(points)

        if residual > limit:
            return Attempt(
                label=self.label,
                kind=self.kind,
                success=False,
                rms_error=residual,
                message=f"residual {residual:.4g} exceeds {limit:.4g}",
            )

        return Attempt(
            label=self.label,
            kind=self.kind,
            success=True,
            svg_path=svg_quadratic_chain([(p0, p1, p2)]),
            equations=(quadratic_equation(p0, p1, p2, options),),
            knots=(knot(p0), knot(p2)),
            rms_error=residual,
            export_data={"control_points": [p0.tolist(), p1.tolist(), p2.tolist()]},
        )
