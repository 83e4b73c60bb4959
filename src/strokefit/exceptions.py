"""Exception hierarchy for Strokefit."""

from typing import Any


class StrokefitError(Exception):
    """Base exception for all Strokefit errors."""

    pass


class ApproximationError(StrokefitError):
    """Errors related to fitting a stroke."""

    pass


class NoFitError(ApproximationError):
    """No strategy produced a successful attempt for the stroke."""

    def __init__(self, alternatives: list[Any]) -> None:
        self.alternatives = alternatives
        labels = ", ".join(a.label for a in alternatives) or "none"
        super().__init__(f"No strategy could approximate the stroke (tried: {labels})")


class StrategyError(ApproximationError):
    """A strategy failed while fitting."""

    def __init__(self, label: str, reason: str) -> None:
        self.label = label
        self.reason = reason
        super().__init__(f"Strategy '{label}' failed: {reason}")


class CurveError(StrokefitError):
    """Errors related to stored curves."""

    pass


class MissingCurveError(CurveError):
    """Requested curve id has no live curve."""

    def __init__(self, curve_id: int) -> None:
        self.curve_id = curve_id
        super().__init__(f"Curve {curve_id} not found")


class KnotEditError(StrokefitError):
    """Errors related to knot count edits."""

    pass


class NoChangeError(KnotEditError):
    """A knot recompute did not alter the curve."""

    def __init__(self, curve_id: int, reason: str) -> None:
        self.curve_id = curve_id
        self.reason = reason
        super().__init__(f"Curve {curve_id} unchanged: {reason}")


class InvalidParameterError(StrokefitError):
    """A parameter was rejected before any work was done."""

    def __init__(self, name: str, value: object, reason: str) -> None:
        self.name = name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {name}={value!r}: {reason}")


class StrokeReadError(StrokefitError):
    """Error reading a stroke file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read stroke '{path}': {reason}")
