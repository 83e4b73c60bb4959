"""Pluggable approximation strategies.

Every strategy implements ``ApproximationStrategy.fit(points, bounds,
options) -> Attempt``. The default registry lists them in invocation order.

Key classes:
- LinearFunctionStrategy: y = c, y = mx + b or x = c
- PiecewiseLinearStrategy: polyline of a few straight segments
- SingleQuadraticBezierStrategy: one quadratic Bezier
- SingleCircleStrategy: circle or circular arc
- QuadraticBSplineStrategy: quadratic B-spline with ranked knots
- QuadraticBezierChainStrategy: chain of quadratic Beziers (off by default)
- SelectiveHybridStrategy: line or quadratic per segment
"""

from strokefit.config import StrategyName
from strokefit.core.strategies.base import ApproximationStrategy
from strokefit.core.strategies.bspline import QuadraticBSplineStrategy
from strokefit.core.strategies.chain import QuadraticBezierChainStrategy
from strokefit.core.strategies.circle import SingleCircleStrategy
from strokefit.core.strategies.linear import LinearFunctionStrategy
from strokefit.core.strategies.piecewise import PiecewiseLinearStrategy
from strokefit.core.strategies.quadratic import SingleQuadraticBezierStrategy
from strokefit.core.strategies.selective import SelectiveHybridStrategy

STRATEGY_TYPES: dict[StrategyName, type[ApproximationStrategy]] = {
    StrategyName.PIECEWISE_LINEAR: PiecewiseLinearStrategy,
    StrategyName.LINEAR: LinearFunctionStrategy,
    StrategyName.SINGLE_QUADRATIC: SingleQuadraticBezierStrategy,
    StrategyName.SINGLE_CIRCLE: SingleCircleStrategy,
    StrategyName.QUADRATIC_BSPLINE: QuadraticBSplineStrategy,
    StrategyName.QUADRATIC_CHAIN: QuadraticBezierChainStrategy,
    StrategyName.SELECTIVE: SelectiveHybridStrategy,
}


def default_strategies() -> list[ApproximationStrategy]:
    """Instantiate every registered strategy in invocation order."""
    return [strategy_type() for strategy_type in STRATEGY_TYPES.values()]


__all__ = [
    "STRATEGY_TYPES",
    "ApproximationStrategy",
    "LinearFunctionStrategy",
    "PiecewiseLinearStrategy",
    "QuadraticBSplineStrategy",
    "QuadraticBezierChainStrategy",
    "SelectiveHybridStrategy",
    "SingleCircleStrategy",
    "SingleQuadraticBezierStrategy",
    "default_strategies",
]
