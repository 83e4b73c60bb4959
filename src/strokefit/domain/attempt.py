"""Fitting attempt produced by one strategy for one stroke.

Attempts are ephemeral: the selector ranks them and the winner's geometry is
copied into a Curve. They are never stored.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from strokefit.domain.equation import Equation
from strokefit.domain.geometry import KnotPoint, PreKnot


class CurveKind(str, Enum):
    """Kind of closed-form description a curve carries."""

    LINEAR = "linear"
    VERTICAL = "vertical"
    CONSTANT = "constant"
    PIECEWISE_LINEAR = "piecewise_linear"
    SINGLE_QUADRATIC = "single_quadratic"
    SINGLE_CIRCLE = "single_circle"
    QUADRATIC_BSPLINE = "quadratic_bspline"
    QUADRATIC_CHAIN = "quadratic_chain"
    SELECTIVE_HYBRID = "selective_hybrid"
    PARAMETRIC = "parametric"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class AttemptSummary:
    """Compact per-attempt record kept for reporting.

    Attributes:
        label: Strategy label (e.g. "linear", "linear_vertical")
        kind: Kind the attempt produced, None when it produced nothing
        success: Whether the attempt succeeded
        priority: Priority tier it was ranked with
        error: Error score, None when not finite
    """

    label: str
    kind: CurveKind | None
    success: bool
    priority: int
    error: float | None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "label": self.label,
            "kind": self.kind.value if self.kind else None,
            "success": self.success,
            "priority": self.priority,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AttemptSummary":
        """Deserialize from dictionary."""
        return cls(
            label=data["label"],
            kind=CurveKind(data["kind"]) if data.get("kind") else None,
            success=data["success"],
            priority=data["priority"],
            error=data.get("error"),
        )


@dataclass(frozen=True, slots=True)
class SelectionDiagnostics:
    """Why a curve looks the way it does.

    Attributes:
        selected_strategy: Label of the winning attempt (None on no fit)
        priority: Priority of the winner
        error: Error score of the winner
        alternatives: Every attempt in invocation order
    """

    selected_strategy: str | None = None
    priority: int | None = None
    error: float | None = None
    alternatives: tuple[AttemptSummary, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "selected_strategy": self.selected_strategy,
            "priority": self.priority,
            "error": self.error,
            "alternatives": [a.to_dict() for a in self.alternatives],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SelectionDiagnostics":
        """Deserialize from dictionary."""
        return cls(
            selected_strategy=data.get("selected_strategy"),
            priority=data.get("priority"),
            error=data.get("error"),
            alternatives=tuple(AttemptSummary.from_dict(a) for a in data.get("alternatives", [])),
        )


@dataclass(frozen=True)
class Attempt:
    """One strategy's result for one stroke.

    Attributes:
        label: Strategy label used for ranking tie-breaks
        kind: Kind of curve produced
        success: Whether the strategy accepted its own fit
        svg_path: Path data of the fitted geometry in domain coordinates
        equations: Closed-form pieces, left to right
        knots: Fitted knot positions
        pre_knots: Candidate knots with removal priorities
        rms_error: RMS residual of the whole fit, if the strategy measured one
        average_linearity: Mean straightness in [0, 1], for polyline fits
        segment_errors: Per-segment RMS residuals, for segmented fits
        export_data: Strategy-specific parameters (coefficients, centers, ...)
        message: Reason for failure, or a short description
        priority: Priority tier, assigned by the selector
        error_score: Ranking error, assigned by the selector
        diagnostics: Selection diagnostics, set on the winner only
    """

    label: str
    kind: CurveKind
    success: bool
    svg_path: str = ""
    equations: tuple[Equation, ...] = ()
    knots: tuple[KnotPoint, ...] = ()
    pre_knots: tuple[PreKnot, ...] = ()
    rms_error: float | None = None
    average_linearity: float | None = None
    segment_errors: tuple[float | None, ...] | None = None
    export_data: dict[str, Any] = field(default_factory=dict)
    message: str = ""
    priority: int = 0
    error_score: float = math.inf
    diagnostics: SelectionDiagnostics | None = None

    def summary(self) -> AttemptSummary:
        """Compact record of this attempt."""
        return AttemptSummary(
            label=self.label,
            kind=self.kind if self.success else None,
            success=self.success,
            priority=self.priority,
            error=self.error_score if math.isfinite(self.error_score) else None,
        )

    @classmethod
    def failure(cls, label: str, kind: CurveKind, message: str) -> "Attempt":
        """Build an unsuccessful attempt."""
        return cls(label=label, kind=kind, success=False, message=message)
