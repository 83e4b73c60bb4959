"""Common contract for approximation strategies.

Every strategy consumes a stroke, the domain bounds and its own option bag,
and returns an Attempt. Strategies are stateless: options are passed per call
and never retained.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import ClassVar

import numpy as np

from strokefit.config import ApproximatorSettings, PriorityConfig, StrategyName, StrategyOptions
from strokefit.core._numeric import as_array, dedupe, diagonal
from strokefit.domain import Attempt, CurveKind, DomainBounds, StrokePoint


class ApproximationStrategy(ABC):
    """Base class for one fitting technique.

    Subclasses set the class attributes and implement ``_fit``. ``fit`` checks
    the minimum sample count and degenerate strokes before delegating, so
    ``_fit`` always sees at least ``min_points`` distinct samples spanning a
    non-zero extent.
    """

    name: ClassVar[StrategyName]
    label: ClassVar[str]
    kind: ClassVar[CurveKind]
    min_points: ClassVar[int] = 3

    def options(self, settings: ApproximatorSettings) -> StrategyOptions:
        """Pick this strategy's option bag from resolved settings."""
        return settings.strategies.get(self.name)

    def priority(self, attempt: Attempt, priorities: PriorityConfig) -> int:
        """Priority tier the attempt is ranked with."""
        return getattr(priorities, self.name.value)

    def fit(
        self,
        points: Sequence[StrokePoint],
        bounds: DomainBounds,
        options: StrategyOptions,
    ) -> Attempt:
        """Fit the stroke.

        Args:
            points: Stroke samples in domain coordinates
            bounds: Domain rectangle the stroke was drawn in
            options: This strategy's option bag

        Returns:
            A successful or unsuccessful Attempt
        """
        samples = dedupe(as_array(points))
        if len(samples) < self.min_points:
            return Attempt.failure(
                self.label,
                self.kind,
                f"needs at least {self.min_points} distinct points, got {len(samples)}",
            )
        if diagonal(samples) < 1e-12:
            return Attempt.failure(self.label, self.kind, "stroke has no extent")
        return self._fit(samples, bounds, options)

    @abstractmethod
    def _fit(self, points: np.ndarray, bounds: DomainBounds, options: StrategyOptions) -> Attempt:
        """Fit distinct, non-degenerate samples."""
