"""Configuration settings for Strokefit."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class StrategyName(str, Enum):
    """Registered approximation strategies."""

    LINEAR = "linear"
    PIECEWISE_LINEAR = "piecewise_linear"
    SINGLE_QUADRATIC = "single_quadratic"
    SINGLE_CIRCLE = "single_circle"
    QUADRATIC_BSPLINE = "quadratic_bspline"
    QUADRATIC_CHAIN = "quadratic_chain"
    SELECTIVE = "selective"


class StrategyOptions(BaseModel):
    """Options shared by every strategy."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=True, description="Run this strategy during selection")
    snap: bool = Field(default=False, description="Round coefficients to a snapping grid")
    snap_step: float = Field(
        default=0.5,
        gt=0.0,
        description="Grid step used when snapping is enabled",
    )
    decimals: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Decimal places kept in emitted formulas",
    )


class LinearOptions(StrategyOptions):
    """Options for the straight-line strategy."""

    tolerance: float = Field(
        default=0.02,
        gt=0.0,
        le=1.0,
        description="Max RMS residual as a fraction of the stroke's bounding-box diagonal",
    )
    flat_slope: float = Field(
        default=0.05,
        ge=0.0,
        description="Slopes at or below this magnitude are treated as constant",
    )
    vertical_slope: float = Field(
        default=20.0,
        gt=0.0,
        description="Slopes above this magnitude are treated as vertical",
    )


class PiecewiseLinearOptions(StrategyOptions):
    """Options for the piecewise-linear strategy."""

    tolerance: float = Field(
        default=0.015,
        gt=0.0,
        le=1.0,
        description="RDP epsilon as a fraction of the bounding-box diagonal",
    )
    max_segments: int = Field(
        default=4,
        ge=2,
        le=50,
        description="More segments than this means the stroke is a curve, not a polyline",
    )
    min_linearity: float = Field(
        default=0.995,
        ge=0.0,
        le=1.0,
        description="Minimum straightness (chord / arc length) required per segment",
    )


class SingleQuadraticOptions(StrategyOptions):
    """Options for the single quadratic Bezier strategy."""

    tolerance: float = Field(
        default=0.01,
        gt=0.0,
        le=1.0,
        description="Max RMS residual as a fraction of the bounding-box diagonal",
    )


class SingleCircleOptions(StrategyOptions):
    """Options for the circle / arc strategy."""

    tolerance: float = Field(
        default=0.03,
        gt=0.0,
        le=1.0,
        description="Max RMS radial residual as a fraction of the radius",
    )
    min_sweep_degrees: float = Field(
        default=90.0,
        ge=0.0,
        le=360.0,
        description="Minimum angular extent the stroke must cover",
    )
    closed_gap: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="End gap (fraction of radius) under which the stroke is a full circle",
    )


class QuadraticBSplineOptions(StrategyOptions):
    """Options for the quadratic B-spline strategy."""

    tolerance: float = Field(
        default=0.005,
        gt=0.0,
        le=1.0,
        description="Target RMS residual as a fraction of the bounding-box diagonal",
    )
    min_knots: int = Field(default=2, ge=2, le=50, description="Knot count lower bound")
    max_knots: int = Field(default=10, ge=2, le=50, description="Knot count upper bound")


class QuadraticChainOptions(StrategyOptions):
    """Options for the quadratic Bezier chain strategy."""

    enabled: bool = Field(default=False, description="Run this strategy during selection")
    tolerance: float = Field(
        default=0.01,
        gt=0.0,
        le=1.0,
        description="Max RMS residual as a fraction of the bounding-box diagonal",
    )
    max_segments: int = Field(default=8, ge=1, le=50, description="Upper bound on pieces")


class SelectiveOptions(StrategyOptions):
    """Options for the hybrid per-segment strategy."""

    corner_tolerance: float = Field(
        default=0.04,
        gt=0.0,
        le=1.0,
        description="RDP epsilon (fraction of diagonal) used to find corners",
    )
    tolerance: float = Field(
        default=0.01,
        gt=0.0,
        le=1.0,
        description="Max RMS residual per segment as a fraction of the diagonal",
    )
    line_weight: float = Field(
        default=1.5,
        gt=0.0,
        description="A line wins a segment if its RMS <= weight x the quadratic's RMS",
    )
    quadratic_weight: float = Field(
        default=1.0,
        gt=0.0,
        description="Multiplier applied to quadratic RMS before comparison",
    )


class GlobalOptions(BaseModel):
    """Settings applied across all strategies."""

    model_config = ConfigDict(frozen=True)

    snap: bool = Field(default=False, description="Snap coefficients in every strategy")
    show_knots_default: bool = Field(
        default=True,
        description="Whether newly created curves show their knot markers",
    )


class PriorityConfig(BaseModel):
    """Priority tiers used for ranking (lower wins)."""

    model_config = ConfigDict(frozen=True)

    piecewise_linear: int = 0
    constant: int = 1
    linear: int = 2
    single_quadratic: int = 3
    single_circle: int = 4
    quadratic_bspline: int = 5
    quadratic_chain: int = 6
    selective: int = 7


class ScoringConfig(BaseModel):
    """Constants of the error score fallback chain.

    An attempt without an RMS error but with an average linearity scores
    ``max(linearity_floor, linearity_baseline - average_linearity)``.
    """

    model_config = ConfigDict(frozen=True)

    linearity_baseline: float = 1.0
    linearity_floor: float = 0.0


class StrategyOptionSet(BaseModel):
    """Per-strategy option bags."""

    model_config = ConfigDict(frozen=True)

    linear: LinearOptions = Field(default_factory=LinearOptions)
    piecewise_linear: PiecewiseLinearOptions = Field(default_factory=PiecewiseLinearOptions)
    single_quadratic: SingleQuadraticOptions = Field(default_factory=SingleQuadraticOptions)
    single_circle: SingleCircleOptions = Field(default_factory=SingleCircleOptions)
    quadratic_bspline: QuadraticBSplineOptions = Field(default_factory=QuadraticBSplineOptions)
    quadratic_chain: QuadraticChainOptions = Field(default_factory=QuadraticChainOptions)
    selective: SelectiveOptions = Field(default_factory=SelectiveOptions)

    def get(self, name: StrategyName) -> StrategyOptions:
        """Get the option bag for a strategy."""
        return getattr(self, StrategyName(name).value)


class ApproximatorSettings(BaseModel):
    """Approximation settings value: global flags, option bags, ranking."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    global_: GlobalOptions = Field(default_factory=GlobalOptions, alias="global")
    strategies: StrategyOptionSet = Field(default_factory=StrategyOptionSet)
    priorities: PriorityConfig = Field(default_factory=PriorityConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)


class CurveDefaults(BaseModel):
    """Defaults for newly created curves."""

    color: str = Field(default="#000000", description="Stroke color")
    size: float = Field(default=2.0, gt=0.0, description="Stroke width")
    min_knots: int = Field(default=2, ge=2, description="Knot slider lower bound")
    max_knots: int = Field(default=10, ge=2, description="Knot slider upper bound")
    emphasis_padding: float = Field(
        default=8.0,
        ge=0.0,
        description="Extra width of the emphasis shadow over the curve width",
    )
    emphasis_opacity: float = Field(default=0.4, ge=0.0, le=1.0)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class StrokefitSettings(BaseModel):
    """Main application settings."""

    approximator: ApproximatorSettings = Field(default_factory=ApproximatorSettings)
    curves: CurveDefaults = Field(default_factory=CurveDefaults)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    debounce_seconds: float = Field(
        default=0.1,
        ge=0.0,
        description="Delay before a knot count preview is applied",
    )


def get_default_settings() -> StrokefitSettings:
    """Get default application settings."""
    return StrokefitSettings()
