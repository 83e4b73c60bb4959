"""Stroke I/O layer for strokefit.

This module loads strokes from sample files for the command line. Drawing
surfaces hand strokes to the curve manager directly.

Key classes:
- StrokeReader: Load a stroke (and optional domain) from JSON or CSV
"""

from strokefit.io.reader import StrokeReader

__all__ = [
    "StrokeReader",
]
