"""
Geometry helpers for the Tiled -> engine coordinate change.

=============================================================================
COORDINATE CONVENTIONS
=============================================================================

Tiled measures from the TOP-LEFT corner of the map with +y pointing down.
The scene model uses the engine convention: origin at the BOTTOM-LEFT,
+y pointing up.

    Tiled                       Engine
    (0,0)-----> x               y
      |                         ^
      |                         |
      v y                     (0,0)-----> x

Polygon and polyline points are stored relative to their object, so the
change of convention there is just a sign flip on y.

=============================================================================
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .errors import FieldFormatError


@dataclass(frozen=True)
class Rect:
    """Axis-aligned pixel rectangle, origin at its bottom-left corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width * 0.5, self.y + self.height * 0.5)


class Path:
    """
    Polyline through a sequence of vertices.

    vertices is an (N, 2) float array. A closed path repeats its first
    vertex at the end, so a closed triangle holds 4 vertices (3 segments)
    while the open polyline through the same points holds 3 (2 segments).
    """

    def __init__(self, vertices: np.ndarray, closed: bool):
        self.vertices = vertices
        self.closed = closed

    def __len__(self) -> int:
        return len(self.vertices)

    @property
    def segment_count(self) -> int:
        return max(len(self.vertices) - 1, 0)

    def segments(self):
        """Iterate ((x0, y0), (x1, y1)) pairs in path order."""
        for start, end in zip(self.vertices[:-1], self.vertices[1:]):
            yield (tuple(start), tuple(end))

    def __repr__(self) -> str:
        kind = "closed" if self.closed else "open"
        return f"Path({kind}, {len(self.vertices)} vertices)"


def parse_points(text: str, element: str = "polygon") -> np.ndarray:
    """
    Parse a Tiled point list ("x1,y1 x2,y2 ...") into an (N, 2) array.

    Tokens are separated by single spaces. The y coordinate of every point
    is negated to move from +y-down to +y-up.

    Raises FieldFormatError when a token is not an "x,y" pair of numbers
    or when the list is empty.
    """
    if text is None or not text.strip():
        raise FieldFormatError(element, "points", text, "empty point list")

    points = []
    for token in text.split(" "):
        parts = token.split(",")
        if len(parts) != 2:
            raise FieldFormatError(element, "points", token, "expected 'x,y'")
        try:
            x, y = float(parts[0]), float(parts[1])
        except ValueError:
            raise FieldFormatError(element, "points", token, "not a number")
        points.append((x, -y))

    return np.array(points, dtype=np.float64)


def build_path(points: np.ndarray, closed: bool) -> Path:
    """Build a path through points, closing it back to the first point if asked."""
    vertices = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if closed:
        vertices = np.vstack([vertices, vertices[:1]])
    return Path(vertices, closed)
