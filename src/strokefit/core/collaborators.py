"""Interfaces of the collaborators the curve manager drives.

The manager owns no rendering, undo or list UI state. It calls out to these
collaborators after each mutation; any of them may be omitted.
"""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from strokefit.domain import DomainBounds


@runtime_checkable
class RenderingCanvas(Protocol):
    """Graph canvas that draws curves and knot markers."""

    def add_geometry(self, kind: str, path_data: str, style: dict[str, Any]) -> Any:
        """Draw a path and return a handle for it."""
        ...

    def update_geometry(self, handle: Any, patch: dict[str, Any]) -> None:
        """Patch a drawn path (path data, color, width, visibility)."""
        ...

    def remove_geometry(self, handle: Any) -> None:
        """Remove a drawn path and everything attached to it."""
        ...

    def add_marker(self, handle: Any, x: float, y: float, style: dict[str, Any]) -> Any:
        """Attach a point marker to a drawn path."""
        ...

    def remove_all_markers(self, handle: Any) -> None:
        """Remove every marker attached to a drawn path."""
        ...

    def get_domain(self) -> DomainBounds:
        """Current domain rectangle."""
        ...


@runtime_checkable
class HistorySink(Protocol):
    """Undo/redo stack that accepts action records."""

    def record(self, action: Any) -> None:
        """Append one action record."""
        ...


CurveListListener = Callable[[int | None], None]
"""Called with the id whose list entry changed (None for the whole list)."""
