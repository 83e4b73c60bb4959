"""Curve entity stored by the CurveStore.

A curve is one approximated stroke. Its ``id`` is its index in the store and
is rewritten whenever the store is reordered or an earlier curve is removed.
"""

from dataclasses import dataclass, field
from typing import Any

from strokefit.domain.attempt import Attempt, CurveKind, SelectionDiagnostics
from strokefit.domain.equation import Equation
from strokefit.domain.geometry import KnotBounds, KnotPoint, PreKnot, StrokePoint

SPLINE_KINDS = frozenset({CurveKind.QUADRATIC_BSPLINE})


@dataclass(frozen=True, slots=True)
class CurveStyle:
    """Stroke appearance."""

    color: str = "#000000"
    size: float = 2.0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"color": self.color, "size": self.size}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CurveStyle":
        """Deserialize from dictionary."""
        return cls(color=data["color"], size=data["size"])


@dataclass
class Curve:
    """One approximated stroke.

    Attributes:
        id: Position in the store
        kind: Kind of description carried
        style: Color and stroke width
        original_points: Source stroke in domain coordinates, never mutated
        equations: Closed-form pieces in left-to-right domain order
        knots: Current fitted knot positions
        pre_knots: Candidate knots used by knot count edits
        knot_count: Current knot count (spline kinds)
        knot_bounds: Allowed knot count range
        locked: Forbids independent movement
        visible: Whether the curve is shown
        detail_expanded: Whether the detail panel is open
        show_knots: Whether knot markers are shown
        path_data: SVG path data of the current geometry
        export_data: Strategy-specific parameters of the current geometry
        diagnostics: Selection diagnostics from creation
        canvas_handle: Handle returned by the rendering collaborator
        placeholder: True while the slot is only reserved
    """

    id: int
    kind: CurveKind
    style: CurveStyle = field(default_factory=CurveStyle)
    original_points: tuple[StrokePoint, ...] = ()
    equations: list[Equation] = field(default_factory=list)
    knots: list[KnotPoint] = field(default_factory=list)
    pre_knots: tuple[PreKnot, ...] = ()
    knot_count: int = 0
    knot_bounds: KnotBounds = field(default_factory=KnotBounds)
    locked: bool = False
    visible: bool = True
    detail_expanded: bool = True
    show_knots: bool = True
    path_data: str = ""
    export_data: dict[str, Any] = field(default_factory=dict)
    diagnostics: SelectionDiagnostics | None = None
    canvas_handle: Any = None
    placeholder: bool = False

    @property
    def is_spline(self) -> bool:
        """Whether knot count edits apply to this curve."""
        return self.kind in SPLINE_KINDS

    @property
    def selected_strategy(self) -> str | None:
        """Label of the strategy that produced the curve."""
        return self.diagnostics.selected_strategy if self.diagnostics else None

    @classmethod
    def from_attempt(
        cls,
        curve_id: int,
        attempt: Attempt,
        points: tuple[StrokePoint, ...],
        style: CurveStyle,
        knot_bounds: KnotBounds,
        show_knots: bool = True,
    ) -> "Curve":
        """Build a curve from a successful attempt."""
        equations = list(attempt.equations)
        return cls(
            id=curve_id,
            kind=attempt.kind,
            style=style,
            original_points=points,
            equations=equations,
            knots=list(attempt.knots),
            pre_knots=attempt.pre_knots,
            knot_count=len(equations) + 1 if equations else 0,
            knot_bounds=knot_bounds,
            show_knots=show_knots,
            path_data=attempt.svg_path,
            export_data=dict(attempt.export_data),
            diagnostics=attempt.diagnostics,
        )

    @classmethod
    def reserve(cls, curve_id: int, points: tuple[StrokePoint, ...], style: CurveStyle) -> "Curve":
        """Build a minimal placeholder for a slot whose curve is not known yet."""
        return cls(
            id=curve_id,
            kind=CurveKind.UNKNOWN,
            style=style,
            original_points=points,
            placeholder=True,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary (canvas handle excluded)."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "style": self.style.to_dict(),
            "original_points": [list(p) for p in self.original_points],
            "equations": [eq.to_dict() for eq in self.equations],
            "knots": [k.to_dict() for k in self.knots],
            "pre_knots": [k.to_dict() for k in self.pre_knots],
            "knot_count": self.knot_count,
            "knot_bounds": self.knot_bounds.to_dict(),
            "locked": self.locked,
            "visible": self.visible,
            "detail_expanded": self.detail_expanded,
            "show_knots": self.show_knots,
            "path_data": self.path_data,
            "export_data": self.export_data,
            "diagnostics": self.diagnostics.to_dict() if self.diagnostics else None,
            "placeholder": self.placeholder,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Curve":
        """Deserialize from dictionary."""
        diagnostics = data.get("diagnostics")
        return cls(
            id=data["id"],
            kind=CurveKind(data["kind"]),
            style=CurveStyle.from_dict(data["style"]),
            original_points=tuple((float(x), float(y)) for x, y in data["original_points"]),
            equations=[Equation.from_dict(eq) for eq in data.get("equations", [])],
            knots=[KnotPoint.from_dict(k) for k in data.get("knots", [])],
            pre_knots=tuple(PreKnot.from_dict(k) for k in data.get("pre_knots", [])),
            knot_count=data.get("knot_count", 0),
            knot_bounds=KnotBounds.from_dict(data.get("knot_bounds", {"min": 2, "max": 10})),
            locked=data.get("locked", False),
            visible=data.get("visible", True),
            detail_expanded=data.get("detail_expanded", True),
            show_knots=data.get("show_knots", True),
            path_data=data.get("path_data", ""),
            export_data=data.get("export_data", {}),
            diagnostics=SelectionDiagnostics.from_dict(diagnostics) if diagnostics else None,
            placeholder=data.get("placeholder", False),
        )
