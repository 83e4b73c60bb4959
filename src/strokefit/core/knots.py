"""Knot count editing for quadratic B-spline curves.

A B-spline curve keeps every candidate interior knot it was fitted with
(``pre_knots``), each tagged with the order it was inserted in. Editing the
knot count never refits from scratch: the knots with ``priority < k - 2`` are
kept, sorted by position along the stroke, and the spline is refitted on the
curve's original samples with exactly that knot set. The result depends only
on the original samples, the candidate knots and the domain, so repeating an
edit is idempotent.
"""

import math
import numbers
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from strokefit.config import QuadraticBSplineOptions
from strokefit.core.store import CurveStore
from strokefit.core.strategies import QuadraticBSplineStrategy
from strokefit.domain import DomainBounds, Equation, KnotPoint, PreKnot
from strokefit.exceptions import InvalidParameterError, NoChangeError

logger = structlog.get_logger("strokefit.knots")


def select_knots(pre_knots: Sequence[PreKnot], desired: int) -> list[PreKnot]:
    """Candidate knots retained for a knot count.

    Args:
        pre_knots: Every candidate knot of a curve
        desired: Requested total knot count, endpoints included

    Returns:
        Knots with ``priority < desired - 2`` in ascending position
    """
    return sorted((k for k in pre_knots if k.priority < desired - 2), key=lambda k: k.knot)


def validate_knot_count(value: Any, minimum: int = 2, maximum: int | None = None) -> int:
    """Check a requested knot count before any fitting runs.

    Raises:
        InvalidParameterError: If the value is not a finite integer in range
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError("knot_count", value, "must be a number")
    if not math.isfinite(value):
        raise InvalidParameterError("knot_count", value, "must be finite")
    if int(value) != value:
        raise InvalidParameterError("knot_count", value, "must be an integer")
    count = int(value)
    if count < max(2, minimum):
        raise InvalidParameterError("knot_count", value, f"must be at least {max(2, minimum)}")
    if maximum is not None and count > maximum:
        raise InvalidParameterError("knot_count", value, f"must be at most {maximum}")
    return count


@dataclass(frozen=True)
class KnotUpdate:
    """Geometry produced by a knot count edit.

    Attributes:
        curve_id: Curve the update applies to
        knot_count: Knot count now stored on the curve
        previous_count: Knot count before the edit
        equations: Replacement equation pieces
        knots: Replacement knot positions
        path_data: Replacement SVG path data
        export_data: Replacement spline parameters
        changed: Whether the stored geometry differs from before
    """

    curve_id: int
    knot_count: int
    previous_count: int
    equations: tuple[Equation, ...]
    knots: tuple[KnotPoint, ...]
    path_data: str
    export_data: dict[str, Any] = field(default_factory=dict)
    changed: bool = True


class KnotEditor:
    """Refits B-spline curves in a store with a different knot count."""

    def __init__(
        self,
        store: CurveStore,
        strategy: QuadraticBSplineStrategy | None = None,
    ) -> None:
        """Initialize the editor.

        Args:
            store: Store whose curves are edited in place
            strategy: B-spline strategy used for refitting
        """
        self.store = store
        self.strategy = strategy or QuadraticBSplineStrategy()

    def recompute(
        self,
        curve_id: int,
        desired: Any,
        bounds: DomainBounds,
        options: QuadraticBSplineOptions,
    ) -> KnotUpdate:
        """Refit a curve with ``desired`` knots and store the result.

        Args:
            curve_id: Curve to edit
            desired: Requested total knot count
            bounds: Current domain rectangle
            options: B-spline options (snapping and decimals apply)

        Returns:
            The applied update

        Raises:
            InvalidParameterError: If ``desired`` is not a valid knot count
            NoChangeError: If the curve is missing, is not a B-spline, or the
                refit failed; the curve is left untouched
        """
        curve = self.store.get(curve_id)
        bounds_limit = curve.knot_bounds if curve is not None else None
        count = validate_knot_count(
            desired,
            bounds_limit.min if bounds_limit else 2,
            bounds_limit.max if bounds_limit else None,
        )

        if curve is None or curve.placeholder:
            raise NoChangeError(curve_id, "curve does not exist")
        if not curve.is_spline:
            raise NoChangeError(curve_id, f"{curve.kind.value} curves have no editable knots")

        retained = select_knots(curve.pre_knots, count)
        attempt = self.strategy.fit_with_knots(curve.original_points, bounds, options, retained)
        if not attempt.success:
            raise NoChangeError(curve_id, attempt.message or "refit failed")

        previous = curve.knot_count
        equations = list(attempt.equations)
        knots = list(attempt.knots)
        changed = (
            equations != curve.equations
            or knots != curve.knots
            or previous != count
        )

        curve.equations = equations
        curve.knots = knots
        curve.knot_count = count
        curve.path_data = attempt.svg_path
        curve.export_data = dict(attempt.export_data)

        logger.debug(
            "Knots recomputed",
            curve_id=curve_id,
            knot_count=count,
            retained=len(retained),
            changed=changed,
        )
        return KnotUpdate(
            curve_id=curve_id,
            knot_count=count,
            previous_count=previous,
            equations=tuple(equations),
            knots=tuple(knots),
            path_data=attempt.svg_path,
            export_data=dict(attempt.export_data),
            changed=changed,
        )
