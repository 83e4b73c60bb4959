"""Domain models for strokefit.

This module contains the value types exchanged between strategies, the
selector and the curve store. Models are:

- Immutable where possible (using frozen dataclasses)
- Serializable to plain dictionaries
- Independent of any rendering or UI layer

Key classes:
- DomainBounds: Domain rectangle a stroke was drawn in
- Equation: One closed-form piece of a curve
- Attempt: One strategy's fitting result
- Curve: A stored, approximated stroke
"""

from strokefit.domain.attempt import Attempt, AttemptSummary, CurveKind, SelectionDiagnostics
from strokefit.domain.curve import SPLINE_KINDS, Curve, CurveStyle
from strokefit.domain.equation import Equation, EquationDomain
from strokefit.domain.geometry import (
    DomainBounds,
    KnotBounds,
    KnotPoint,
    PreKnot,
    StrokePoint,
    as_stroke,
)

__all__: list[str] = [
    # Enums
    "CurveKind",
    # Geometry
    "DomainBounds",
    "KnotBounds",
    "KnotPoint",
    "PreKnot",
    "StrokePoint",
    "as_stroke",
    # Equations
    "Equation",
    "EquationDomain",
    # Attempts
    "Attempt",
    "AttemptSummary",
    "SelectionDiagnostics",
    # Curves
    "SPLINE_KINDS",
    "Curve",
    "CurveStyle",
]
