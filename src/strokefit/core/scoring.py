"""Error scores and ranking order for approximation attempts.

The error score falls back through the measurements a strategy may report:
overall RMS error, then average linearity, then the mean of per-segment RMS
errors. An attempt with none of them scores infinity.
"""

import math

from strokefit.config import ScoringConfig
from strokefit.domain import Attempt


def error_score(attempt: Attempt, scoring: ScoringConfig | None = None) -> float:
    """Compute the ranking error of an attempt.

    Args:
        attempt: Attempt to score
        scoring: Constants of the linearity fallback (defaults if None)

    Returns:
        Non-negative error, or ``math.inf`` when nothing was measured
    """
    scoring = scoring or ScoringConfig()

    if attempt.rms_error is not None and math.isfinite(attempt.rms_error):
        return abs(attempt.rms_error)

    if attempt.average_linearity is not None and math.isfinite(attempt.average_linearity):
        return max(scoring.linearity_floor, scoring.linearity_baseline - attempt.average_linearity)

    if attempt.segment_errors is not None:
        finite = [
            abs(e) for e in attempt.segment_errors if e is not None and math.isfinite(e)
        ]
        if finite:
            return sum(finite) / len(finite)

    return math.inf


def ranking_key(attempt: Attempt) -> tuple[int, float, str]:
    """Sort key: priority, then error (NaN and infinity last), then label."""
    error = attempt.error_score
    if not math.isfinite(error):
        error = math.inf
    return (attempt.priority, error, attempt.label)


def rank(attempts: list[Attempt]) -> list[Attempt]:
    """Successful attempts, best first."""
    return sorted((a for a in attempts if a.success), key=ranking_key)
