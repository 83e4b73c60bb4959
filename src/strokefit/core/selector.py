"""Approximation selection: run every strategy, rank, pick one.

Ranking is two-level. Attempts are ordered by priority tier first and only
then by error score, so a simpler strategy (a straight line) beats a richer
one (a spline) whenever both succeed, even if the richer one fits tighter.
Equal priority and equal error fall back to the label for a deterministic
order.

Key classes:
- ApproximationSelector: Runs strategies and selects the representative curve
"""

import dataclasses
import math
import time
from collections.abc import Iterable, Sequence

import structlog

from strokefit.config import ApproximatorSettings, StrategyName
from strokefit.core.scoring import error_score, rank
from strokefit.core.strategies import ApproximationStrategy, default_strategies
from strokefit.domain import Attempt, DomainBounds, SelectionDiagnostics, StrokePoint, as_stroke
from strokefit.exceptions import NoFitError, StrategyError

logger = structlog.get_logger("strokefit.selector")


class ApproximationSelector:
    """Runs registered strategies against a stroke and selects the winner.

    Example:
        selector = ApproximationSelector()
        winner = selector.select(points, DomainBounds(), ApproximatorSettings())
        print(winner.label, winner.diagnostics.alternatives)
    """

    def __init__(self, strategies: Iterable[ApproximationStrategy] | None = None) -> None:
        """Initialize with a strategy set.

        Args:
            strategies: Strategies in invocation order (default registry if None)
        """
        self._strategies = list(strategies) if strategies is not None else default_strategies()

    @property
    def strategies(self) -> list[ApproximationStrategy]:
        """Registered strategies in invocation order."""
        return list(self._strategies)

    def get(self, name: StrategyName | str) -> ApproximationStrategy | None:
        """Find a registered strategy by name."""
        name = StrategyName(name)
        for strategy in self._strategies:
            if strategy.name == name:
                return strategy
        return None

    def attempt(
        self,
        strategy: ApproximationStrategy,
        points: Sequence[StrokePoint],
        bounds: DomainBounds,
        settings: ApproximatorSettings,
    ) -> Attempt:
        """Run one strategy and score its attempt.

        A strategy that raises contributes an unsuccessful attempt instead of
        stopping the pipeline.
        """
        start_time = time.perf_counter()
        try:
            attempt = strategy.fit(points, bounds, strategy.options(settings))
        except Exception as e:
            error = StrategyError(strategy.label, str(e))
            logger.warning("Strategy raised", strategy=strategy.label, error=str(error))
            attempt = Attempt.failure(strategy.label, strategy.kind, str(error))

        attempt = dataclasses.replace(
            attempt,
            priority=strategy.priority(attempt, settings.priorities),
            error_score=error_score(attempt, settings.scoring),
        )
        logger.debug(
            "Strategy attempted",
            strategy=attempt.label,
            success=attempt.success,
            priority=attempt.priority,
            error=attempt.error_score if math.isfinite(attempt.error_score) else None,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            message=attempt.message or None,
        )
        return attempt

    def run(
        self,
        points: Sequence[StrokePoint],
        bounds: DomainBounds,
        settings: ApproximatorSettings,
    ) -> list[Attempt]:
        """Run every enabled strategy in order.

        Returns:
            Scored attempts in invocation order
        """
        stroke = as_stroke(points)
        return [
            self.attempt(strategy, stroke, bounds, settings)
            for strategy in self._strategies
            if strategy.options(settings).enabled
        ]

    def select(
        self,
        points: Sequence[StrokePoint],
        bounds: DomainBounds,
        settings: ApproximatorSettings,
    ) -> Attempt:
        """Select the representative attempt for a stroke.

        Args:
            points: Stroke samples in domain coordinates
            bounds: Domain rectangle
            settings: Resolved approximation settings

        Returns:
            The winning attempt, annotated with selection diagnostics

        Raises:
            NoFitError: If no strategy succeeded
        """
        attempts = self.run(points, bounds, settings)
        alternatives = tuple(a.summary() for a in attempts)
        ranked = rank(attempts)

        if not ranked:
            logger.warning(
                "No strategy fitted the stroke",
                points=len(points),
                tried=[a.label for a in attempts],
            )
            raise NoFitError(list(alternatives))

        winner = ranked[0]
        diagnostics = SelectionDiagnostics(
            selected_strategy=winner.label,
            priority=winner.priority,
            error=winner.error_score if math.isfinite(winner.error_score) else None,
            alternatives=alternatives,
        )
        logger.info(
            "Approximation selected",
            strategy=winner.label,
            kind=winner.kind.value,
            priority=winner.priority,
            error=diagnostics.error,
        )
        return dataclasses.replace(winner, diagnostics=diagnostics)
