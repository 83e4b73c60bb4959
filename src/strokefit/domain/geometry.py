"""Basic geometric value types shared by strategies and curves.

This module defines:
- DomainBounds: The visible domain rectangle supplied with a stroke
- KnotPoint: A fitted knot position
- PreKnot: A candidate knot with its removal priority
- KnotBounds: Allowed knot count range for a curve
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

StrokePoint = tuple[float, float]


def as_stroke(points: Iterable[Sequence[float]]) -> tuple[StrokePoint, ...]:
    """Copy a point sequence into an immutable tuple of (x, y) floats."""
    return tuple((float(p[0]), float(p[1])) for p in points)


@dataclass(frozen=True, slots=True)
class DomainBounds:
    """Domain rectangle of the graph the stroke was drawn on.

    Attributes:
        x_min: Left edge
        x_max: Right edge
        y_min: Bottom edge
        y_max: Top edge
    """

    x_min: float = -10.0
    x_max: float = 10.0
    y_min: float = -10.0
    y_max: float = 10.0

    @property
    def diagonal(self) -> float:
        """Length of the rectangle's diagonal."""
        return ((self.x_max - self.x_min) ** 2 + (self.y_max - self.y_min) ** 2) ** 0.5

    def to_dict(self) -> dict[str, float]:
        """Serialize to dictionary."""
        return {
            "x_min": self.x_min,
            "x_max": self.x_max,
            "y_min": self.y_min,
            "y_max": self.y_max,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DomainBounds":
        """Deserialize from dictionary."""
        return cls(
            x_min=data["x_min"],
            x_max=data["x_max"],
            y_min=data["y_min"],
            y_max=data["y_max"],
        )

    @classmethod
    def around(cls, points: Sequence[StrokePoint], margin: float = 1.0) -> "DomainBounds":
        """Smallest rectangle containing ``points`` plus a margin on every side."""
        if not points:
            return cls()
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return cls(min(xs) - margin, max(xs) + margin, min(ys) - margin, max(ys) + margin)


@dataclass(frozen=True, slots=True)
class KnotPoint:
    """A knot position on a fitted curve."""

    x: float
    y: float

    def to_tuple(self) -> StrokePoint:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def to_dict(self) -> dict[str, float]:
        """Serialize to dictionary."""
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KnotPoint":
        """Deserialize from dictionary."""
        return cls(x=data["x"], y=data["y"])


@dataclass(frozen=True, slots=True)
class PreKnot:
    """A candidate interior knot.

    Attributes:
        knot: Position along the stroke as a normalized arc-length parameter
        priority: Removal order; lower values are kept longest when the
            knot count shrinks
    """

    knot: float
    priority: int

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"knot": self.knot, "priority": self.priority}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PreKnot":
        """Deserialize from dictionary."""
        return cls(knot=data["knot"], priority=data["priority"])


@dataclass(frozen=True, slots=True)
class KnotBounds:
    """Allowed knot count range."""

    min: int = 2
    max: int = 10

    def clamp(self, count: int) -> int:
        """Clamp a knot count into the range."""
        return max(self.min, min(self.max, count))

    def to_dict(self) -> dict[str, int]:
        """Serialize to dictionary."""
        return {"min": self.min, "max": self.max}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KnotBounds":
        """Deserialize from dictionary."""
        return cls(min=data["min"], max=data["max"])
