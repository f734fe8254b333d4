"""Component aggregates.

Re-exports the immutable value types shared by the grid, the planner and the
navigation session: :class:`Cell` coordinates, per-cell
:class:`CellAttributes`, declared :class:`TileProperties` and the
:class:`Waypoint` / :class:`WorldPoint` pair handed to motion playback.
"""

from .attributes import BLOCKED, DEFAULT_COST, CellAttributes
from .cell import Cell
from .tile import TileProperties
from .waypoint import Waypoint, WorldPoint

__all__ = [
    "BLOCKED",
    "DEFAULT_COST",
    "Cell",
    "CellAttributes",
    "TileProperties",
    "Waypoint",
    "WorldPoint",
]
