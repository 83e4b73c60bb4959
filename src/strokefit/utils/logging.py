"""Logging utilities for Strokefit."""

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

import structlog

_HANDLER_MARK = "_strokefit_handler"


@dataclass
class ApproximationStats:
    """Statistics from a fitting session."""

    fitted_count: int = 0
    no_fit_count: int = 0
    recompute_count: int = 0
    wins: Counter = field(default_factory=Counter)
    errors: list[tuple[str, str]] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate session duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    def to_dict(self) -> dict:
        return {
            "fitted": self.fitted_count,
            "no_fit": self.no_fit_count,
            "recomputes": self.recompute_count,
            "wins": dict(self.wins),
            "duration_seconds": round(self.duration_seconds, 3),
        }


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root_logger.removeHandler(handler)
            handler.close()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        setattr(file_handler, _HANDLER_MARK, True)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    setattr(console_handler, _HANDLER_MARK, True)
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("strokefit")
    logger.debug("Logging initialized", log_file=str(log_file) if log_file else None)

    return logger


class ApproximationLogger:
    """Logger for tracking fitting outcomes and statistics."""

    def __init__(self, logger=None) -> None:
        self._logger = logger if logger is not None else structlog.get_logger("strokefit")
        self._stats = ApproximationStats(start_time=time.perf_counter())

    def log_fitted(self, curve_id: int, strategy: str, points: int, duration_ms: float) -> None:
        """Log a stroke that became a curve."""
        self._logger.info(
            "Curve created",
            curve_id=curve_id,
            strategy=strategy,
            points=points,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.fitted_count += 1
        self._stats.wins[strategy] += 1
        self._stats.end_time = time.perf_counter()

    def log_no_fit(self, points: int, tried: list[str]) -> None:
        """Log a stroke no strategy could fit."""
        self._logger.warning("Stroke discarded", points=points, tried=tried)
        self._stats.no_fit_count += 1
        self._stats.end_time = time.perf_counter()

    def log_recompute(self, curve_id: int, knot_count: int, changed: bool) -> None:
        """Log a knot count recompute."""
        self._logger.debug(
            "Curve recomputed", curve_id=curve_id, knot_count=knot_count, changed=changed
        )
        self._stats.recompute_count += 1

    def log_no_change(self, curve_id: int, reason: str) -> None:
        """Log a recompute that left the curve untouched."""
        self._logger.debug("Recompute ignored", curve_id=curve_id, reason=reason)

    def log_error(self, context: str, error: Exception) -> None:
        """Log an unexpected error."""
        self._logger.error(
            "Operation failed",
            context=context,
            error=str(error),
            error_type=type(error).__name__,
        )
        self._stats.errors.append((context, str(error)))

    @property
    def logger(self):
        return self._logger

    @property
    def stats(self) -> ApproximationStats:
        """Get current statistics."""
        return self._stats
