"""Emphasis overlay tracking.

At most one curve is emphasized at a time. The overlay is a separate geometry
on the canvas drawn wider and translucent under the curve; it is released
before a new one is acquired and follows path, color and width edits of the
curve it tracks.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from strokefit.core.collaborators import RenderingCanvas
from strokefit.core.store import CurveStore

logger = structlog.get_logger("strokefit.emphasis")


class EmphasisState(str, Enum):
    """Emphasis tracker states."""

    IDLE = "idle"
    EMPHASIZING = "emphasizing"


@dataclass
class EmphasisOverlay:
    """Overlay currently drawn for the emphasized curve."""

    target_id: int
    handle: Any
    path_data: str
    color: str
    width: float


class EmphasisTracker:
    """Keeps one emphasis overlay in sync with its curve."""

    def __init__(
        self,
        store: CurveStore,
        canvas: RenderingCanvas | None = None,
        padding: float = 8.0,
        opacity: float = 0.4,
    ) -> None:
        self.store = store
        self.canvas = canvas
        self.padding = padding
        self.opacity = opacity
        self._overlay: EmphasisOverlay | None = None

    @property
    def state(self) -> EmphasisState:
        return EmphasisState.EMPHASIZING if self._overlay else EmphasisState.IDLE

    @property
    def target_id(self) -> int | None:
        return self._overlay.target_id if self._overlay else None

    @property
    def overlay(self) -> EmphasisOverlay | None:
        return self._overlay

    def is_target(self, curve_id: Any) -> bool:
        """Whether ``curve_id`` names the emphasized curve.

        Ids are compared as strings so numeric ids and canvas handles that
        render to the same text match.
        """
        return self._overlay is not None and str(self._overlay.target_id) == str(curve_id)

    def set_emphasis(self, curve_id: int) -> bool:
        """Emphasize a live curve, releasing any previous overlay first.

        Returns:
            True if the curve is now emphasized
        """
        self.clear_emphasis()
        curve = self.store.get(curve_id)
        if curve is None or curve.placeholder:
            return False

        width = curve.style.size + self.padding
        handle = None
        if self.canvas is not None:
            handle = self.canvas.add_geometry(
                "emphasis",
                curve.path_data,
                {"color": curve.style.color, "width": width, "opacity": self.opacity},
            )
        self._overlay = EmphasisOverlay(
            target_id=curve.id,
            handle=handle,
            path_data=curve.path_data,
            color=curve.style.color,
            width=width,
        )
        logger.debug("Emphasis set", curve_id=curve.id)
        return True

    def clear_emphasis(self) -> None:
        """Drop the overlay, if any, and return to idle."""
        overlay = self._overlay
        self._overlay = None
        if overlay is None:
            return
        if self.canvas is not None and overlay.handle is not None:
            self.canvas.remove_geometry(overlay.handle)
        logger.debug("Emphasis cleared", curve_id=overlay.target_id)

    def sync_path(self, curve_id: Any, path_data: str) -> bool:
        """Follow a path change of the emphasized curve.

        Returns:
            True if the overlay was updated
        """
        if not self.is_target(curve_id):
            return False
        self._overlay.path_data = path_data
        self._patch({"path": path_data})
        return True

    def update_color(self, curve_id: Any, color: str) -> bool:
        if not self.is_target(curve_id):
            return False
        self._overlay.color = color
        self._patch({"color": color})
        return True

    def update_size(self, curve_id: Any, size: float) -> bool:
        if not self.is_target(curve_id):
            return False
        self._overlay.width = size + self.padding
        self._patch({"width": self._overlay.width})
        return True

    def retarget(self, old_id: int, new_id: int) -> None:
        """Follow the emphasized curve when its id is reassigned."""
        if self._overlay is not None and self._overlay.target_id == old_id:
            self._overlay.target_id = new_id

    def _patch(self, patch: dict[str, Any]) -> None:
        if self.canvas is not None and self._overlay.handle is not None:
            self.canvas.update_geometry(self._overlay.handle, patch)
