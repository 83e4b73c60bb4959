"""Closed-form equation pieces attached to a curve."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class EquationDomain:
    """Closed interval a piece is valid on."""

    start: float
    end: float

    def to_dict(self) -> dict[str, float]:
        """Serialize to dictionary."""
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True, slots=True)
class Equation:
    """One closed-form piece of a curve.

    Attributes:
        formula: Plain-text formula (e.g. "y = 2x + 1")
        domain: Interval of ``axis`` the piece covers
        axis: Variable the domain refers to: "x", "y" or "t"
        latex: LaTeX rendering of the formula, if available
    """

    formula: str
    domain: EquationDomain
    axis: str = "x"
    latex: str | None = None

    def with_domain_latex(self) -> str:
        """LaTeX formula followed by its domain restriction."""
        source = self.latex or self.formula
        return (
            f"{source} \\left\\{{{self.domain.start} \\le {self.axis} "
            f"\\le {self.domain.end}\\right\\}}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "formula": self.formula,
            "latex": self.latex,
            "domain": self.domain.to_dict(),
            "axis": self.axis,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Equation":
        """Deserialize from dictionary."""
        return cls(
            formula=data["formula"],
            latex=data.get("latex"),
            domain=EquationDomain(data["domain"]["start"], data["domain"]["end"]),
            axis=data.get("axis", "x"),
        )
