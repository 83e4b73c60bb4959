"""Stroke reader for loading sample files.

Supported formats:
- JSON: an array of ``[x, y]`` pairs or ``{"x": .., "y": ..}`` objects, or an
  object with a ``points`` array and an optional ``domain`` rectangle
- CSV: two numeric columns, with an optional header row
"""

import csv
import json
import math
from pathlib import Path
from typing import Any

from strokefit.domain import DomainBounds, StrokePoint
from strokefit.exceptions import StrokeReadError


class StrokeReader:
    """Loads a stroke and its optional domain from a file.

    Example:
        reader = StrokeReader(Path("stroke.json"))
        reader.load()
        print(len(reader.points), reader.bounds)
    """

    def __init__(self, path: Path) -> None:
        """Initialize the stroke reader.

        Args:
            path: Path to a .json or .csv stroke file
        """
        self._path = Path(path)
        self._points: tuple[StrokePoint, ...] | None = None
        self._bounds: DomainBounds | None = None

    def load(self) -> tuple[StrokePoint, ...]:
        """Load the stroke file.

        Returns:
            The stroke samples

        Raises:
            StrokeReadError: If the file is missing or malformed
        """
        if not self._path.exists():
            raise StrokeReadError(str(self._path), "file not found")

        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StrokeReadError(str(self._path), str(e)) from e

        if self._path.suffix.lower() == ".csv":
            self._points = self._parse_csv(text)
        else:
            self._points = self._parse_json(text)
        return self._points

    @property
    def points(self) -> tuple[StrokePoint, ...]:
        """Loaded stroke samples.

        Raises:
            RuntimeError: If the file has not been loaded yet
        """
        if self._points is None:
            raise RuntimeError("Stroke not loaded. Call load() first.")
        return self._points

    @property
    def bounds(self) -> DomainBounds | None:
        """Domain rectangle stored in the file, if any."""
        return self._bounds

    def _parse_json(self, text: str) -> tuple[StrokePoint, ...]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StrokeReadError(str(self._path), f"invalid JSON: {e}") from e

        if isinstance(data, dict):
            domain = data.get("domain")
            if domain is not None:
                try:
                    self._bounds = DomainBounds.from_dict(domain)
                except (KeyError, TypeError) as e:
                    raise StrokeReadError(str(self._path), f"invalid domain: {e}") from e
            data = data.get("points")

        if not isinstance(data, list):
            raise StrokeReadError(str(self._path), "expected a list of points")
        return tuple(self._point(item, index) for index, item in enumerate(data))

    def _parse_csv(self, text: str) -> tuple[StrokePoint, ...]:
        points: list[StrokePoint] = []
        for index, row in enumerate(csv.reader(text.splitlines())):
            cells = [cell.strip() for cell in row if cell.strip()]
            if not cells:
                continue
            if index == 0 and not _is_number(cells[0]):
                continue
            points.append(self._point(cells, index))
        return tuple(points)

    def _point(self, item: Any, index: int) -> StrokePoint:
        if isinstance(item, dict):
            item = [item.get("x"), item.get("y")]
        if not isinstance(item, list | tuple) or len(item) < 2:
            raise StrokeReadError(str(self._path), f"point {index} is not an (x, y) pair")
        try:
            x, y = float(item[0]), float(item[1])
        except (TypeError, ValueError) as e:
            raise StrokeReadError(str(self._path), f"point {index}: {e}") from e
        if not (math.isfinite(x) and math.isfinite(y)):
            raise StrokeReadError(str(self._path), f"point {index} is not finite")
        return (x, y)


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True
