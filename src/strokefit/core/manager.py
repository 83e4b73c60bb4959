"""Curve lifecycle orchestration.

This module ties the approximation pipeline to the curve store and the
external collaborators (canvas, history stack, curve list).

Every mutating operation follows the same order: apply the change to the
store, update the canvas, emit at most one history record, then signal the
curve list. Operations that reference a missing curve return ``None`` or
``False`` and emit nothing.

Key components:
- AddResult: Outcome of turning a stroke into a curve
- CurveManager: Main orchestrator class for curve lifecycle
"""

import time
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import structlog

from strokefit.config import (
    ApproximatorSettings,
    SettingsModel,
    StrategyName,
    StrokefitSettings,
    get_default_settings,
)
from strokefit.core._numeric import as_array, svg_polyline
from strokefit.core.collaborators import CurveListListener, HistorySink, RenderingCanvas
from strokefit.core.debounce import Debouncer
from strokefit.core.emphasis import EmphasisTracker
from strokefit.core.history import ActionRecord, ActionType, HistoryBridge, SettledValues
from strokefit.core.knots import KnotEditor, KnotUpdate, validate_knot_count
from strokefit.core.selector import ApproximationSelector
from strokefit.core.store import CurveStore
from strokefit.core.strategies import QuadraticBSplineStrategy
from strokefit.domain import (
    Attempt,
    AttemptSummary,
    Curve,
    CurveKind,
    CurveStyle,
    DomainBounds,
    KnotBounds,
    SelectionDiagnostics,
    StrokePoint,
    as_stroke,
)
from strokefit.exceptions import InvalidParameterError, NoChangeError, NoFitError
from strokefit.utils import ApproximationLogger, ApproximationStats

PARAMETRIC_LABEL = "parametric"


@dataclass(frozen=True)
class AddResult:
    """Outcome of ``CurveManager.add_hand_drawn_curve``.

    Attributes:
        success: Whether a curve was created
        message: Human-readable outcome
        curve_id: Id of the new curve (None on failure)
        diagnostics: Selection diagnostics of the new curve
        alternatives: Every attempt made, for reporting a failed fit
    """

    success: bool
    message: str
    curve_id: int | None = None
    diagnostics: SelectionDiagnostics | None = None
    alternatives: tuple[AttemptSummary, ...] = ()


def _same_color(a: Any, b: Any) -> bool:
    return str(a).upper() == str(b).upper()


class CurveManager:
    """Owns the curves of one drawing surface.

    Example:
        manager = CurveManager(canvas=canvas, history=undo_stack)
        result = manager.add_hand_drawn_curve(points)
        if result.success:
            manager.set_knot_count(result.curve_id, 4)
    """

    def __init__(
        self,
        settings: StrokefitSettings | None = None,
        canvas: RenderingCanvas | None = None,
        history: HistorySink | None = None,
        on_list_changed: CurveListListener | None = None,
        selector: ApproximationSelector | None = None,
        clock=time.monotonic,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            settings: Application settings (defaults if None)
            canvas: Rendering collaborator, optional
            history: Undo/redo collaborator, optional
            on_list_changed: Called with the id whose list entry changed, or
                None when the whole list changed
            selector: Approximation selector (default strategy set if None)
            clock: Monotonic clock driving knot preview debouncing
            logger: Logger for fitting statistics
        """
        self.settings = settings or get_default_settings()
        self.settings_model = SettingsModel(self.settings.approximator)
        self.selector = selector or ApproximationSelector()
        self.store = CurveStore()
        self.canvas = canvas
        self.history = HistoryBridge(history)
        self.on_list_changed = on_list_changed

        bspline = self.selector.get(StrategyName.QUADRATIC_BSPLINE)
        if not isinstance(bspline, QuadraticBSplineStrategy):
            bspline = QuadraticBSplineStrategy()
        self.knot_editor = KnotEditor(self.store, bspline)

        defaults = self.settings.curves
        self.emphasis = EmphasisTracker(
            self.store,
            canvas,
            padding=defaults.emphasis_padding,
            opacity=defaults.emphasis_opacity,
        )
        self.debouncer = Debouncer(self.settings.debounce_seconds, clock)
        self.approximation_log = ApproximationLogger(logger)

        self._pending_styles = SettledValues()
        self._knot_sessions = SettledValues()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def approximator_settings(self) -> ApproximatorSettings:
        """Resolved settings handed to strategies."""
        return self.settings_model.resolved

    @property
    def stats(self) -> ApproximationStats:
        return self.approximation_log.stats

    def set_approximator_settings(
        self,
        partial: Mapping[str, Any] | ApproximatorSettings,
        source: str = "curve-manager",
        persist: bool = True,
        silent: bool = False,
    ) -> ApproximatorSettings:
        """Merge a partial settings update.

        Returns:
            The resolved settings now in effect
        """
        return self.settings_model.update(partial, source=source, persist=persist, silent=silent)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def add_hand_drawn_curve(
        self,
        points: Sequence[StrokePoint],
        curve_id: int | None = None,
        style: CurveStyle | None = None,
        advanced: bool = False,
        bounds: DomainBounds | None = None,
    ) -> AddResult:
        """Turn a stroke into a curve.

        The slot is reserved before fitting so list entries keyed by the id
        stay valid. If no strategy fits, the reservation is emptied (not
        removed) and the stroke is discarded, unless ``advanced`` is set, in
        which case the stroke is kept as an unfitted parametric curve.

        Args:
            points: Stroke samples in domain coordinates
            curve_id: Slot to reserve (next free slot if None)
            style: Stroke appearance (configured defaults if None)
            advanced: Keep unfittable strokes as parametric curves
            bounds: Domain rectangle (taken from the canvas if None)

        Returns:
            AddResult describing the outcome
        """
        start_time = time.perf_counter()
        stroke = as_stroke(points)
        style = style or CurveStyle(color=self.settings.curves.color, size=self.settings.curves.size)
        bounds = bounds or self.domain(stroke)
        settings = self.settings_model.resolved

        reserved = self.store.reserve(curve_id, stroke, style)
        self._notify(reserved)

        try:
            attempt = self.selector.select(stroke, bounds, settings)
        except NoFitError as e:
            alternatives = tuple(e.alternatives)
            if not advanced:
                self.store.release(reserved)
                self._notify(reserved)
                self.approximation_log.log_no_fit(len(stroke), [a.label for a in alternatives])
                return AddResult(success=False, message=str(e), alternatives=alternatives)
            curve = self._parametric_curve(reserved, stroke, style, alternatives)
        else:
            curve = Curve.from_attempt(
                reserved,
                attempt,
                stroke,
                style,
                self._knot_bounds(),
                show_knots=settings.global_.show_knots_default,
            )

        new_id = self._create(curve)
        self.approximation_log.log_fitted(
            new_id,
            curve.selected_strategy or PARAMETRIC_LABEL,
            len(stroke),
            (time.perf_counter() - start_time) * 1000,
        )
        return AddResult(
            success=True,
            message=f"Approximated as {curve.kind.value}",
            curve_id=new_id,
            diagnostics=curve.diagnostics,
            alternatives=curve.diagnostics.alternatives if curve.diagnostics else (),
        )

    def add_curve(self, curve: Curve) -> int:
        """Store an already built curve (e.g. when replaying history).

        Returns:
            The id the curve was stored under
        """
        return self._create(curve)

    def approximate_with(
        self,
        strategy: StrategyName | str,
        points: Sequence[StrokePoint],
        bounds: DomainBounds | None = None,
    ) -> Attempt:
        """Run a single named strategy, enabled or not.

        Raises:
            InvalidParameterError: If no such strategy is registered
        """
        try:
            found = self.selector.get(strategy)
        except ValueError:
            found = None
        if found is None:
            raise InvalidParameterError("strategy", strategy, "no such strategy")
        stroke = as_stroke(points)
        return self.selector.attempt(
            found, stroke, bounds or self.domain(stroke), self.settings_model.resolved
        )

    # ------------------------------------------------------------------
    # Structural changes
    # ------------------------------------------------------------------

    def delete_curve(self, curve_id: int) -> bool:
        """Delete a curve; later curves move down one id.

        Returns:
            True if a curve was deleted
        """
        curve = self.store.get(curve_id)
        if curve is None or curve.placeholder:
            return False

        if self.emphasis.is_target(curve_id):
            self.emphasis.clear_emphasis()
        before = curve.to_dict()

        with self._following_ids():
            self.store.delete(curve_id)
        if self.canvas is not None and curve.canvas_handle is not None:
            self.canvas.remove_geometry(curve.canvas_handle)

        self.history.record(ActionType.DELETE, curve_id, before=before)
        self._notify(None)
        return True

    def reorder_curves(self, from_id: int, to_index: int) -> bool:
        """Move a curve to another position; ids are reassigned.

        Args:
            from_id: Id of the curve to move
            to_index: Position after removal, as with list insertion

        Returns:
            True if anything moved
        """
        with self._following_ids():
            moved = self.store.reorder(from_id, to_index)
        if not moved:
            return False
        self.history.record(ActionType.REORDER, (from_id, to_index), before=from_id, after=to_index)
        self._notify(None)
        return True

    def clear(self) -> int:
        """Remove every curve.

        Returns:
            Number of curves removed
        """
        self.emphasis.clear_emphasis()
        self.debouncer.cancel()
        self._pending_styles.clear()
        self._knot_sessions.clear()

        removed = [curve for curve in self.store.clear() if not curve.placeholder]
        if self.canvas is not None:
            for curve in removed:
                if curve.canvas_handle is not None:
                    self.canvas.remove_geometry(curve.canvas_handle)
        if removed:
            self.history.record(
                ActionType.CLEAR,
                tuple(curve.id for curve in removed),
                before=[curve.to_dict() for curve in removed],
            )
        self._notify(None)
        return len(removed)

    # ------------------------------------------------------------------
    # Presentation flags
    # ------------------------------------------------------------------

    def set_visibility(self, curve_id: int, visible: bool, record: bool = True) -> bool:
        """Show or hide a curve.

        Returns:
            False if the curve does not exist
        """
        curve = self.store.get(curve_id)
        if curve is None:
            return False
        old = curve.visible
        self.store.set_visibility(curve_id, visible)
        self._patch(curve, {"visible": visible})
        if record and old != visible:
            self.history.record(ActionType.TOGGLE_VISIBILITY, curve_id, before=old, after=visible)
        self._notify(curve_id)
        return True

    def toggle_visibility(self, curve_id: int) -> bool:
        curve = self.store.get(curve_id)
        if curve is None:
            return False
        return self.set_visibility(curve_id, not curve.visible)

    def set_detail_expanded(self, curve_id: int, expanded: bool, record: bool = True) -> bool:
        """Open or close a curve's detail panel.

        Returns:
            False if the curve does not exist
        """
        curve = self.store.get(curve_id)
        if curve is None:
            return False
        old = curve.detail_expanded
        self.store.set_detail_expanded(curve_id, expanded)
        if record and old != expanded:
            self.history.record(ActionType.TOGGLE_DETAILS, curve_id, before=old, after=expanded)
        self._notify(curve_id)
        return True

    def toggle_detail(self, curve_id: int) -> bool:
        curve = self.store.get(curve_id)
        if curve is None:
            return False
        return self.set_detail_expanded(curve_id, not curve.detail_expanded)

    def set_show_knots(self, curve_id: int, show: bool) -> bool:
        """Show or hide a curve's knot markers (not recorded)."""
        curve = self.store.get(curve_id)
        if curve is None:
            return False
        self.store.set_show_knots(curve_id, show)
        self._draw_knots(curve)
        self._notify(curve_id)
        return True

    # ------------------------------------------------------------------
    # Style
    # ------------------------------------------------------------------

    def update_color(self, curve_id: int, color: str) -> bool:
        """Apply a color immediately without recording it.

        The color the curve had before the first of a run of updates is kept
        until ``record_color_change`` closes the run.
        """
        curve = self.store.get(curve_id)
        if curve is None:
            return False
        self._pending_styles.begin((curve_id, "color"), curve.style.color)
        self.store.set_style(curve_id, color=color)
        self._patch(curve, {"color": color})
        self.emphasis.update_color(curve_id, color)
        self._notify(curve_id)
        return True

    def record_color_change(self, curve_id: int) -> ActionRecord | None:
        """Close a run of color updates.

        Returns:
            The emitted record, or None if the color ended where it started
        """
        curve = self.store.get(curve_id)
        if curve is None:
            self._pending_styles.discard((curve_id, "color"))
            return None
        changed, start = self._pending_styles.settle(
            (curve_id, "color"), curve.style.color, same=_same_color
        )
        if not changed:
            return None
        return self.history.record(ActionType.COLOR, curve_id, before=start, after=curve.style.color)

    def update_size(self, curve_id: int, size: float) -> bool:
        """Apply a stroke width immediately without recording it."""
        curve = self.store.get(curve_id)
        if curve is None:
            return False
        size = float(size)
        self._pending_styles.begin((curve_id, "size"), curve.style.size)
        self.store.set_style(curve_id, size=size)
        self._patch(curve, {"width": size})
        self.emphasis.update_size(curve_id, size)
        self._notify(curve_id)
        return True

    def record_size_change(self, curve_id: int) -> ActionRecord | None:
        """Close a run of width updates.

        Returns:
            The emitted record, or None if the width ended where it started
        """
        curve = self.store.get(curve_id)
        if curve is None:
            self._pending_styles.discard((curve_id, "size"))
            return None
        changed, start = self._pending_styles.settle((curve_id, "size"), curve.style.size)
        if not changed:
            return None
        return self.history.record(ActionType.SIZE, curve_id, before=start, after=curve.style.size)

    def set_style(
        self,
        curve_id: int,
        color: str | None = None,
        size: float | None = None,
        record: bool = True,
    ) -> bool:
        """Apply color and width together as one recorded change."""
        curve = self.store.get(curve_id)
        if curve is None:
            return False
        self._pending_styles.discard((curve_id, "color"))
        self._pending_styles.discard((curve_id, "size"))

        before = curve.style
        after = self.store.set_style(curve_id, color=color, size=size)
        self._patch(curve, {"color": after.color, "width": after.size})
        self.emphasis.update_color(curve_id, after.color)
        self.emphasis.update_size(curve_id, after.size)
        if record and before != after:
            self.history.record(
                ActionType.STYLE, curve_id, before=before.to_dict(), after=after.to_dict()
            )
        self._notify(curve_id)
        return True

    # ------------------------------------------------------------------
    # Knot count
    # ------------------------------------------------------------------

    def set_knot_count(self, curve_id: int, knot_count: Any, record: bool = True) -> KnotUpdate | None:
        """Refit a B-spline curve with a new knot count.

        Args:
            curve_id: Curve to edit
            knot_count: Requested total knot count
            record: Emit a history record (False when replaying history)

        Returns:
            The applied update, or None if the curve was left untouched

        Raises:
            InvalidParameterError: If ``knot_count`` is not a valid count
        """
        update = self._recompute(curve_id, knot_count)
        if update is not None and record and update.previous_count != update.knot_count:
            self.history.record(
                ActionType.KNOT_COUNT,
                curve_id,
                before=update.previous_count,
                after=update.knot_count,
            )
        return update

    def begin_knot_interaction(self, curve_id: int) -> bool:
        """Remember the knot count at the start of a slider drag."""
        curve = self.store.get(curve_id)
        if curve is None:
            return False
        self._knot_sessions.begin(curve_id, curve.knot_count)
        return True

    def preview_knot_count(self, curve_id: int, knot_count: Any) -> bool:
        """Schedule a debounced, unrecorded recompute during a slider drag.

        A newer preview replaces a pending one; only the last runs.

        Raises:
            InvalidParameterError: If ``knot_count`` is not a valid count
        """
        curve = self.store.get(curve_id)
        if curve is None:
            return False
        count = validate_knot_count(knot_count, curve.knot_bounds.min, curve.knot_bounds.max)
        self.begin_knot_interaction(curve_id)
        self.debouncer.schedule(lambda: self._preview(curve, count))
        return True

    def commit_knot_count(self, curve_id: int, knot_count: Any) -> ActionRecord | None:
        """End a slider drag on ``knot_count``.

        Any pending preview is dropped, the final value is applied, and one
        record is emitted if the count differs from the drag's start value.

        Returns:
            The emitted record, or None
        """
        self.debouncer.cancel()
        curve = self.store.get(curve_id)
        if curve is None:
            self._knot_sessions.discard(curve_id)
            return None
        self._knot_sessions.begin(curve_id, curve.knot_count)
        try:
            self._recompute(curve_id, knot_count)
        except InvalidParameterError:
            self._knot_sessions.discard(curve_id)
            raise

        changed, start = self._knot_sessions.settle(curve_id, curve.knot_count)
        if not changed:
            return None
        return self.history.record(ActionType.KNOT_COUNT, curve_id, before=start, after=curve.knot_count)

    def poll(self) -> bool:
        """Run a due knot preview, if any.

        Returns:
            True if a preview ran
        """
        return self.debouncer.poll()

    # ------------------------------------------------------------------
    # Emphasis and lookup
    # ------------------------------------------------------------------

    def emphasize(self, curve_id: int) -> bool:
        return self.emphasis.set_emphasis(curve_id)

    def clear_emphasis(self) -> None:
        self.emphasis.clear_emphasis()

    def find_by_graph_id(self, handle: Any) -> int | None:
        """Map a canvas handle back to a curve id."""
        if handle is None:
            return None
        curve = self.store.find(
            lambda c: c.canvas_handle is not None and str(c.canvas_handle) == str(handle)
        )
        return curve.id if curve else None

    def domain(self, points: Sequence[StrokePoint] = ()) -> DomainBounds:
        """Current domain rectangle, from the canvas if there is one."""
        if self.canvas is not None:
            bounds = self.canvas.get_domain()
            if isinstance(bounds, Mapping):
                return DomainBounds.from_dict(bounds)
            return bounds
        return DomainBounds.around(points) if points else DomainBounds()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _knot_bounds(self) -> KnotBounds:
        defaults = self.settings.curves
        return KnotBounds(min=defaults.min_knots, max=max(defaults.min_knots, defaults.max_knots))

    def _parametric_curve(
        self,
        curve_id: int,
        stroke: tuple[StrokePoint, ...],
        style: CurveStyle,
        alternatives: tuple[AttemptSummary, ...],
    ) -> Curve:
        settings = self.settings_model.resolved
        return Curve(
            id=curve_id,
            kind=CurveKind.PARAMETRIC,
            style=style,
            original_points=stroke,
            knot_bounds=self._knot_bounds(),
            show_knots=settings.global_.show_knots_default,
            path_data=svg_polyline(as_array(stroke)),
            diagnostics=SelectionDiagnostics(
                selected_strategy=PARAMETRIC_LABEL,
                alternatives=alternatives,
            ),
        )

    def _create(self, curve: Curve) -> int:
        curve.placeholder = False
        curve_id = self.store.create(curve)
        self._draw(curve)
        self.history.record(ActionType.ADD, curve_id, after=curve.to_dict())
        self._notify(curve_id)
        return curve_id

    def _draw(self, curve: Curve) -> None:
        if self.canvas is None:
            return
        curve.canvas_handle = self.canvas.add_geometry(
            curve.kind.value,
            curve.path_data,
            {"color": curve.style.color, "width": curve.style.size, "opacity": 1.0},
        )
        if not curve.visible:
            self.canvas.update_geometry(curve.canvas_handle, {"visible": False})
        self._draw_knots(curve)

    def _draw_knots(self, curve: Curve) -> None:
        if self.canvas is None or curve.canvas_handle is None:
            return
        self.canvas.remove_all_markers(curve.canvas_handle)
        for knot in curve.knots:
            self.canvas.add_marker(
                curve.canvas_handle,
                knot.x,
                knot.y,
                {
                    "color": curve.style.color,
                    "size": 10,
                    "shape": "hollow_circle",
                    "visible": curve.show_knots,
                },
            )

    def _patch(self, curve: Curve, patch: dict[str, Any]) -> None:
        if self.canvas is not None and curve.canvas_handle is not None:
            self.canvas.update_geometry(curve.canvas_handle, patch)

    def _recompute(self, curve_id: int, knot_count: Any) -> KnotUpdate | None:
        curve = self.store.get(curve_id)
        points = curve.original_points if curve is not None else ()
        options = self.settings_model.resolved.strategies.quadratic_bspline
        try:
            update = self.knot_editor.recompute(curve_id, knot_count, self.domain(points), options)
        except NoChangeError as e:
            self.approximation_log.log_no_change(curve_id, e.reason)
            return None

        self.approximation_log.log_recompute(curve_id, update.knot_count, update.changed)
        if update.changed:
            self._patch(curve, {"path": update.path_data})
            self._draw_knots(curve)
            self.emphasis.sync_path(curve_id, update.path_data)
            self._notify(curve_id)
        return update

    def _notify(self, curve_id: int | None) -> None:
        if self.on_list_changed is not None:
            self.on_list_changed(curve_id)

    def _preview(self, curve: Curve, knot_count: int) -> KnotUpdate | None:
        # The curve may have moved or been deleted since the preview was scheduled.
        if self.store.get(curve.id) is not curve:
            return None
        return self._recompute(curve.id, knot_count)

    @contextmanager
    def _following_ids(self) -> Iterator[None]:
        """Keep emphasis and open edit sessions on the same curves across id reassignment.

        Sessions of a curve that left the store are dropped.
        """
        before = {curve.id: curve for curve in self.store}
        target_id = self.emphasis.target_id
        yield
        moved = {
            old_id: curve.id
            for old_id, curve in before.items()
            if self.store.get(curve.id) is curve
        }
        if target_id in moved:
            self.emphasis.retarget(target_id, moved[target_id])
        self._pending_styles.rekey(
            lambda key: (moved[key[0]], key[1]) if key[0] in moved else None
        )
        self._knot_sessions.rekey(moved.get)
