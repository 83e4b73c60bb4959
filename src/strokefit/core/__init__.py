"""Core fitting and curve lifecycle for strokefit.

This module contains:

- Approximation strategies and their shared contract
- Error scoring and ranking of attempts
- Strategy selection for a stroke
- Curve storage with index identity
- Knot count editing, emphasis tracking and history records

Everything runs on the caller's thread. Strategies are stateless; the store,
settings model and manager hold the only mutable state.

Key functions:
- error_score: Score an attempt with the fallback chain
- rank: Order successful attempts by priority, error and label
- select_knots: Candidate knots retained for a knot count

Key classes:
- ApproximationSelector: Runs strategies and picks the winner
- CurveStore: Index-addressed curve storage
- KnotEditor: Refits B-spline curves with a new knot count
- EmphasisTracker: Single emphasis overlay state machine
- HistoryBridge: Emits action records to an undo stack
- Debouncer: Cooperative single-slot debouncer
- CurveManager: Main orchestrator for curve lifecycle
"""

from strokefit.core.collaborators import CurveListListener, HistorySink, RenderingCanvas
from strokefit.core.debounce import Debouncer
from strokefit.core.emphasis import EmphasisOverlay, EmphasisState, EmphasisTracker
from strokefit.core.history import ActionRecord, ActionType, HistoryBridge, SettledValues
from strokefit.core.knots import KnotEditor, KnotUpdate, select_knots, validate_knot_count
from strokefit.core.manager import AddResult, CurveManager
from strokefit.core.scoring import error_score, rank, ranking_key
from strokefit.core.selector import ApproximationSelector
from strokefit.core.store import CurveStore
from strokefit.core.strategies import (
    STRATEGY_TYPES,
    ApproximationStrategy,
    LinearFunctionStrategy,
    PiecewiseLinearStrategy,
    QuadraticBezierChainStrategy,
    QuadraticBSplineStrategy,
    SelectiveHybridStrategy,
    SingleCircleStrategy,
    SingleQuadraticBezierStrategy,
    default_strategies,
)

__all__ = [
    # History
    "ActionRecord",
    "ActionType",
    # Manager
    "AddResult",
    # Selection
    "ApproximationSelector",
    # Strategies
    "ApproximationStrategy",
    "CurveListListener",
    "CurveManager",
    # Store
    "CurveStore",
    "Debouncer",
    # Emphasis
    "EmphasisOverlay",
    "EmphasisState",
    "EmphasisTracker",
    "HistoryBridge",
    # Collaborators
    "HistorySink",
    # Knots
    "KnotEditor",
    "KnotUpdate",
    "LinearFunctionStrategy",
    "PiecewiseLinearStrategy",
    "QuadraticBSplineStrategy",
    "QuadraticBezierChainStrategy",
    "RenderingCanvas",
    "STRATEGY_TYPES",
    "SelectiveHybridStrategy",
    "SettledValues",
    "SingleCircleStrategy",
    "SingleQuadraticBezierStrategy",
    "default_strategies",
    # Scoring
    "error_score",
    "rank",
    "ranking_key",
    "select_knots",
    "validate_knot_count",
]
