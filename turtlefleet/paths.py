"""PathSet helpers and the built-in star drawing.

Paths arrive already in arena coordinates (0..10 on the longer axis plus a
0.5 margin).  :func:`scale_points` is the small helper the demo uses to
turn a shape drawn in a ``width x height`` box (y pointing down) into that
space.
"""

import logging
import math
from typing import Iterable, List, Sequence

import yaml

from .types import Path, PathSet

logger = logging.getLogger("TurtleFleet.Paths")

__all__ = [
    "STAR_POINTS",
    "load_path_set",
    "normalize_path_set",
    "scale_points",
    "star_path_set",
]

ARENA_EXTENT: float = 10.0
ARENA_MARGIN: float = 0.5

# Five-pointed star in an 8x8 box, y pointing down, closed.
STAR_POINTS: List[Sequence[float]] = [
    [4, 0], [3, 3], [0, 3], [2.5, 5], [1.5, 8], [4, 6],
    [6.5, 8], [5.5, 5], [8, 3], [5, 3], [4, 0],
]


def normalize_path_set(path_set: Iterable[Iterable[Iterable[float]]]) -> PathSet:
    """Freeze *path_set* into tuples of float ``(x, y)`` pairs.

    Raises:
        ValueError: If a waypoint is not a pair of numbers.
    """
    paths = []
    for p_index, path in enumerate(path_set):
        points = []
        for w_index, point in enumerate(path):
            try:
                x, y = point
                points.append((float(x), float(y)))
            except (TypeError, ValueError) as exc:
                raise ValueError(
                    f"path {p_index} waypoint {w_index}: expected [x, y], got {point!r}"
                ) from exc
        paths.append(tuple(points))
    return tuple(paths)


def scale_points(points: Iterable[Sequence[float]], width: float, height: float) -> Path:
    """Map points from a ``width x height`` box (y down) into arena space (y up)."""
    extent = max(width, height)
    return tuple(
        (x / extent * ARENA_EXTENT + ARENA_MARGIN,
         ARENA_EXTENT + ARENA_MARGIN - y / extent * ARENA_EXTENT)
        for x, y in points
    )


def star_path_set(turtles: int = 1) -> PathSet:
    """The demo star, drawn by one turtle or split between several.

    With more than one turtle the outline is cut into consecutive runs that
    share their end points, so the drawing is still closed.
    """
    full = scale_points(STAR_POINTS, 8, 8)
    if turtles <= 1:
        return (full,)
    segments = len(full) - 1
    per = math.ceil(segments / turtles)
    paths = []
    for start in range(0, segments, per):
        paths.append(full[start:min(start + per, segments) + 1])
    return tuple(paths)


def load_path_set(path: str) -> PathSet:
    """Read a PathSet from a YAML file with a top-level ``paths`` list.

    Example file::

        paths:
          - [[1.0, 1.0], [2.0, 1.0], [2.0, 2.0]]
          - [[6.0, 6.0], [7.0, 6.0]]
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict) or not isinstance(data.get("paths"), list):
        raise ValueError(f"{path}: expected a mapping with a 'paths' list")
    paths = normalize_path_set(data["paths"])
    logger.info(f"Loaded {len(paths)} path(s) from {path}")
    return paths
