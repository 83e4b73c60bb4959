"""Strokefit - Turn freehand strokes into closed-form curves.

Strokefit runs a set of competing fitting strategies (line, piecewise line,
quadratic Bezier, circle, quadratic B-spline, hybrid) against a hand-drawn
stroke, ranks the results with a priority-then-error protocol, and keeps the
winning curve descriptions in an index-addressed store that supports knot
count edits, reordering, deletion, emphasis and history recording.

Example:
    $ strokefit fit stroke.json

This prints every strategy's attempt and the equations of the selected curve.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
