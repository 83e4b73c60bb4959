"""Index-addressed curve storage.

A curve's id is its position in the store. Every structural change (removal,
insertion at a position, reorder) is followed by a renumbering pass so that
``store.get(i).id == i`` holds for every occupied slot before control returns
to the caller.

Slots are optional. A slot may be reserved for a curve that is still being
computed; the reservation holds a placeholder curve (``placeholder=True``).
If the computation fails the slot is emptied (set to None) rather than
removed, so ids issued after it stay valid. Iteration helpers skip empty
slots.
"""

from collections.abc import Callable, Iterator

import structlog

from strokefit.domain import Curve, CurveStyle, StrokePoint
from strokefit.exceptions import MissingCurveError

logger = structlog.get_logger("strokefit.store")

_IMMUTABLE_FIELDS = frozenset({"id", "original_points"})


class CurveStore:
    """Dense, index-addressed collection of curves."""

    def __init__(self) -> None:
        self._slots: list[Curve | None] = []

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[Curve]:
        return iter(self.curves())

    @property
    def next_id(self) -> int:
        """Id the next appended curve receives."""
        return len(self._slots)

    def slots(self) -> list[Curve | None]:
        """Snapshot of all slots, empty ones included."""
        return list(self._slots)

    def curves(self) -> list[Curve]:
        """Occupied slots in id order (placeholders included)."""
        return [curve for curve in self._slots if curve is not None]

    def get(self, curve_id: int) -> Curve | None:
        """Look up a curve, returning None for out-of-range or empty slots."""
        if not isinstance(curve_id, int) or curve_id < 0 or curve_id >= len(self._slots):
            return None
        return self._slots[curve_id]

    def require(self, curve_id: int) -> Curve:
        """Look up a curve that must exist.

        Raises:
            MissingCurveError: If the slot is out of range or empty
        """
        curve = self.get(curve_id)
        if curve is None:
            raise MissingCurveError(curve_id)
        return curve

    def find(self, predicate: Callable[[Curve], bool]) -> Curve | None:
        """First occupied slot matching ``predicate``."""
        for curve in self._slots:
            if curve is not None and predicate(curve):
                return curve
        return None

    def reserve(
        self,
        curve_id: int | None = None,
        points: tuple[StrokePoint, ...] = (),
        style: CurveStyle | None = None,
    ) -> int:
        """Reserve a slot with a placeholder curve.

        Args:
            curve_id: Slot to reserve; the next free index if None. Reserving
                past the end pads the store with empty slots.
            points: Stroke the placeholder carries
            style: Style of the eventual curve

        Returns:
            The reserved id. An occupied slot is left as it is.
        """
        if curve_id is None:
            curve_id = len(self._slots)
        while len(self._slots) <= curve_id:
            self._slots.append(None)
        if self._slots[curve_id] is None:
            self._slots[curve_id] = Curve.reserve(curve_id, points, style or CurveStyle())
            logger.debug("Slot reserved", curve_id=curve_id)
        return curve_id

    def release(self, curve_id: int) -> bool:
        """Empty a reserved slot without renumbering.

        Returns:
            True if a placeholder was cleared
        """
        curve = self.get(curve_id)
        if curve is None or not curve.placeholder:
            return False
        self._slots[curve_id] = None
        logger.debug("Reservation released", curve_id=curve_id)
        return True

    def create(self, curve: Curve) -> int:
        """Store a new curve.

        The curve overwrites its own slot when that slot is reserved or empty;
        otherwise it is appended.

        Returns:
            The id the curve was stored under
        """
        target = curve.id
        if 0 <= target < len(self._slots):
            current = self._slots[target]
            if current is None or current.placeholder:
                self._slots[target] = curve
                logger.debug("Curve created", curve_id=target, kind=curve.kind.value)
                return target

        curve.id = len(self._slots)
        self._slots.append(curve)
        logger.debug("Curve created", curve_id=curve.id, kind=curve.kind.value)
        return curve.id

    def insert(self, index: int, curve: Curve) -> int:
        """Insert a curve at a position, shifting later curves up.

        Returns:
            The id the curve ends up with
        """
        index = max(0, min(index, len(self._slots)))
        self._slots.insert(index, curve)
        self.renumber()
        return curve.id

    def update(self, curve_id: int, **changes: object) -> Curve | None:
        """Set fields of a stored curve.

        ``id`` and ``original_points`` cannot be changed this way.

        Returns:
            The updated curve, or None if it does not exist
        """
        forbidden = _IMMUTABLE_FIELDS.intersection(changes)
        if forbidden:
            raise AttributeError(f"Cannot update {', '.join(sorted(forbidden))}")
        curve = self.get(curve_id)
        if curve is None:
            return None
        for name, value in changes.items():
            if not hasattr(curve, name):
                raise AttributeError(f"Curve has no field '{name}'")
            setattr(curve, name, value)
        return curve

    def delete(self, curve_id: int) -> Curve | None:
        """Remove a curve and renumber the ones after it.

        Returns:
            The removed curve, or None if there was nothing to remove
        """
        if self.get(curve_id) is None:
            return None
        removed = self._slots.pop(curve_id)
        self.renumber()
        logger.debug("Curve deleted", curve_id=curve_id, remaining=len(self._slots))
        return removed

    def reorder(self, from_id: int, to_index: int) -> bool:
        """Move the slot at ``from_id`` to ``to_index``.

        ``to_index`` is a position in the sequence after the element has been
        removed, as with list insertion.

        Returns:
            True if anything moved
        """
        if not 0 <= from_id < len(self._slots) or to_index < 0:
            return False
        if min(to_index, len(self._slots) - 1) == from_id:
            return False
        slot = self._slots.pop(from_id)
        self._slots.insert(min(to_index, len(self._slots)), slot)
        self.renumber()
        logger.debug("Curves reordered", from_id=from_id, to_index=to_index)
        return True

    def clear(self) -> list[Curve]:
        """Remove everything.

        Returns:
            The curves that were stored
        """
        removed = self.curves()
        self._slots.clear()
        return removed

    def renumber(self) -> None:
        """Rewrite every curve's id to its slot index."""
        for index, curve in enumerate(self._slots):
            if curve is not None:
                curve.id = index

    def set_visibility(self, curve_id: int, visible: bool) -> bool:
        """Show or hide a curve. Returns False if it does not exist."""
        return self.update(curve_id, visible=visible) is not None

    def set_detail_expanded(self, curve_id: int, expanded: bool) -> bool:
        """Open or close a curve's detail panel. Returns False if it does not exist."""
        return self.update(curve_id, detail_expanded=expanded) is not None

    def set_show_knots(self, curve_id: int, show: bool) -> bool:
        """Show or hide knot markers. Returns False if it does not exist."""
        return self.update(curve_id, show_knots=show) is not None

    def set_style(
        self, curve_id: int, color: str | None = None, size: float | None = None
    ) -> CurveStyle | None:
        """Change color and/or stroke width.

        Returns:
            The new style, or None if the curve does not exist
        """
        curve = self.get(curve_id)
        if curve is None:
            return None
        style = CurveStyle(
            color=curve.style.color if color is None else color,
            size=curve.style.size if size is None else float(size),
        )
        curve.style = style
        return style
