"""Configuration management for strokefit.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments, partial updates, or defaults.

Key classes:
- ApproximatorSettings: Global flags, per-strategy options, priorities, scoring
- SettingsModel: Versioned holder that merges and resolves partial updates
- CurveDefaults: Defaults for new curves
- LoggingConfig: Logging settings
- StrokefitSettings: Main application settings
"""

from strokefit.config.model import (
    SettingsChanged,
    SettingsListener,
    SettingsModel,
    deep_merge,
    merge_settings,
    resolve_settings,
)
from strokefit.config.settings import (
    ApproximatorSettings,
    CurveDefaults,
    GlobalOptions,
    LinearOptions,
    LoggingConfig,
    PiecewiseLinearOptions,
    PriorityConfig,
    QuadraticBSplineOptions,
    QuadraticChainOptions,
    ScoringConfig,
    SelectiveOptions,
    SingleCircleOptions,
    SingleQuadraticOptions,
    StrategyName,
    StrategyOptions,
    StrategyOptionSet,
    StrokefitSettings,
    get_default_settings,
)

__all__ = [
    "ApproximatorSettings",
    "CurveDefaults",
    "GlobalOptions",
    "LinearOptions",
    "LoggingConfig",
    "PiecewiseLinearOptions",
    "PriorityConfig",
    "QuadraticBSplineOptions",
    "QuadraticChainOptions",
    "ScoringConfig",
    "SelectiveOptions",
    "SettingsChanged",
    "SettingsListener",
    "SettingsModel",
    "SingleCircleOptions",
    "SingleQuadraticOptions",
    "StrategyName",
    "StrategyOptionSet",
    "StrategyOptions",
    "StrokefitSettings",
    "deep_merge",
    "get_default_settings",
    "merge_settings",
    "resolve_settings",
]
