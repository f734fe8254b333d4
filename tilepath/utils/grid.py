"""Grid math helpers.

Neighborhood tables, distance heuristics and tile/world coordinate
conversion. Functions here are pure and kept lightweight for the search inner
loop.
"""

import math
from typing import Tuple

from tilepath.components import Cell, WorldPoint
from tilepath.types import Anchor, TileSize

SQRT_OF_2 = math.sqrt(2.0)

# Expansion order is part of the planner's tie-break contract: N, E, S, W.
CARDINAL_NEIGHBORHOOD: Tuple[Tuple[int, int], ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))
DIAGONAL_NEIGHBORHOOD: Tuple[Tuple[int, int], ...] = ((1, -1), (1, 1), (-1, 1), (-1, -1))


def is_in_bounds(cell: Cell, width: int, height: int) -> bool:
    """Return True if ``cell`` lies within a ``width`` x ``height`` rectangle."""
    return 0 <= cell.x < width and 0 <= cell.y < height


def manhattan_distance(a: Cell, b: Cell) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


def octile_distance(a: Cell, b: Cell) -> float:
    """Distance with unit orthogonal and sqrt(2) diagonal steps."""
    dx = abs(a.x - b.x)
    dy = abs(a.y - b.y)
    return (dx + dy) + (SQRT_OF_2 - 2.0) * min(dx, dy)


def tile_dimensions(tile_size: TileSize) -> Tuple[float, float]:
    """Normalize ``tile_size`` to a positive ``(width, height)`` pair.

    Raises:
        ValueError: If either dimension is not strictly positive.
    """
    if isinstance(tile_size, tuple):
        width, height = tile_size
    else:
        width = height = tile_size
    if width <= 0 or height <= 0:
        raise ValueError(f"Tile size must be positive, got {tile_size!r}")
    return float(width), float(height)


def world_to_cell(point: WorldPoint, tile_size: TileSize) -> Cell:
    """Cell containing a world position (rounds down, like tile picking)."""
    width, height = tile_dimensions(tile_size)
    return Cell(math.floor(point.x / width), math.floor(point.y / height))


def cell_to_world(
    cell: Cell, tile_size: TileSize, anchor: Anchor = Anchor.TOP_LEFT
) -> WorldPoint:
    """World position of ``cell``'s top-left corner or center."""
    width, height = tile_dimensions(tile_size)
    x = cell.x * width
    y = cell.y * height
    if anchor == Anchor.CENTER:
        x += width / 2
        y += height / 2
    return WorldPoint(x, y)
