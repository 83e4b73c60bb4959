"""Action records for the external undo/redo stack.

Every user-visible mutation produces exactly one immutable ``ActionRecord``,
emitted after the mutation has been applied. The bridge does not implement
undo or redo; it only appends to a sink.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from strokefit.core.collaborators import HistorySink

logger = structlog.get_logger("strokefit.history")


class ActionType(str, Enum):
    """Kinds of recorded mutation."""

    ADD = "add"
    DELETE = "delete"
    REORDER = "reorder"
    TOGGLE_VISIBILITY = "toggle_visibility"
    TOGGLE_DETAILS = "toggle_details"
    COLOR = "color"
    SIZE = "size"
    STYLE = "style"
    KNOT_COUNT = "knot_count"
    CLEAR = "clear"


@dataclass(frozen=True)
class ActionRecord:
    """One recorded mutation.

    Attributes:
        type: Kind of mutation
        ids: Curve ids involved (one for most actions, from/to for reorder,
            every removed id for clear)
        before: State before the mutation (None for creations)
        after: State after the mutation (None for removals)
    """

    type: ActionType
    ids: tuple[int, ...]
    before: Any = None
    after: Any = None

    @property
    def id(self) -> int | None:
        """The single id of the record, if it has one."""
        return self.ids[0] if len(self.ids) == 1 else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "type": self.type.value,
            "ids": list(self.ids),
            "before": self.before,
            "after": self.after,
        }


class HistoryBridge:
    """Builds action records and hands them to a history sink."""

    def __init__(self, sink: HistorySink | None = None) -> None:
        self.sink = sink

    def record(
        self,
        action_type: ActionType,
        ids: int | tuple[int, ...] | list[int],
        before: Any = None,
        after: Any = None,
    ) -> ActionRecord:
        """Emit one record.

        Args:
            action_type: Kind of mutation
            ids: Id or ids involved
            before: State before the mutation
            after: State after the mutation

        Returns:
            The emitted record
        """
        if isinstance(ids, int):
            ids = (ids,)
        action = ActionRecord(type=action_type, ids=tuple(ids), before=before, after=after)
        if self.sink is not None:
            self.sink.record(action)
        logger.debug("Action recorded", action=action_type.value, ids=list(action.ids))
        return action


@dataclass
class SettledValues:
    """Tracks the value at the start of a continuous interaction.

    An interaction (a slider drag, a color picker session) may apply many
    intermediate values. Only the transition from the value seen at its start
    to the value it settles on is worth recording.
    """

    _started: dict[Any, Any] = field(default_factory=dict)

    def begin(self, key: Any, value: Any) -> None:
        """Remember the starting value unless an interaction is already open."""
        self._started.setdefault(key, value)

    def is_open(self, key: Any) -> bool:
        return key in self._started

    def start_value(self, key: Any, default: Any = None) -> Any:
        return self._started.get(key, default)

    def settle(self, key: Any, value: Any, same=None) -> tuple[bool, Any]:
        """Close an interaction.

        Args:
            key: Interaction key
            value: Value the interaction ended on
            same: Optional equality override, e.g. case-insensitive colors

        Returns:
            Tuple of (changed, start value). Without an open interaction the
            end value counts as the start value and nothing changed.
        """
        start = self._started.pop(key, value)
        equal = same(start, value) if same is not None else start == value
        return not equal, start

    def rekey(self, key_map: Callable[[Any], Any]) -> None:
        """Move open interactions to new keys.

        Args:
            key_map: Returns the new key for an old one, or None to drop it
        """
        started = {}
        for key, value in self._started.items():
            new_key = key_map(key)
            if new_key is not None:
                started[new_key] = value
        self._started = started

    def discard(self, key: Any) -> None:
        self._started.pop(key, None)

    def clear(self) -> None:
        self._started.clear()
