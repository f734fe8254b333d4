"""Grid path planning for tile maps.

Walkability classification (:mod:`tilepath.grid_model`), lowest-cost search
and waypoint generation (:mod:`tilepath.planner`), and a click-to-move
session driving an external motion player (:mod:`tilepath.navigation`).
"""

from tilepath.components import Cell, CellAttributes, TileProperties, Waypoint, WorldPoint
from tilepath.config import NavigationConfig
from tilepath.grid import Grid
from tilepath.grid_model import GridModel, build_grid
from tilepath.planner import NotFound, Path, PathPlanner, find_path, to_waypoints
from tilepath.types import Anchor, NotFoundReason

__all__ = [
    "Anchor",
    "Cell",
    "CellAttributes",
    "Grid",
    "GridModel",
    "NavigationConfig",
    "NotFound",
    "NotFoundReason",
    "Path",
    "PathPlanner",
    "TileProperties",
    "Waypoint",
    "WorldPoint",
    "build_grid",
    "find_path",
    "to_waypoints",
]
