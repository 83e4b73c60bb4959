"""Utility functions for strokefit.

This module provides:

- Logging setup and configuration
- Fitting statistics tracking
"""

from strokefit.utils.logging import (
    ApproximationLogger,
    ApproximationStats,
    configure_logging,
)

__all__ = [
    "ApproximationLogger",
    "ApproximationStats",
    "configure_logging",
]
