"""Lowest-cost path search and path-to-waypoint translation.

:func:`find_path` runs A* over a :class:`~tilepath.grid.Grid` snapshot. An
edge into a cell exists only if that cell is walkable, and its weight is the
cell's cost (times sqrt(2) for a diagonal step). The heuristic is the
Manhattan (or octile) distance scaled by the grid's smallest walkable cost,
which keeps it admissible for any positive costs.

Determinism: neighbors are expanded in a fixed order (N, E, S, W, then NE,
SE, SW, NW), equal-priority heap entries pop in insertion order, and a cell's
parent only changes on a strictly cheaper route. Identical inputs always
produce identical paths.

Failures are values, not exceptions: see :class:`NotFound`.
"""

import heapq
import itertools
import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Sequence, Set, Tuple, Union

from pyrsistent import pvector
from pyrsistent.typing import PVector

from tilepath.components import Cell, Waypoint
from tilepath.config import NavigationConfig
from tilepath.grid import Grid
from tilepath.types import Anchor, NotFoundReason, TileSize
from tilepath.utils.grid import (
    CARDINAL_NEIGHBORHOOD,
    DIAGONAL_NEIGHBORHOOD,
    SQRT_OF_2,
    cell_to_world,
    manhattan_distance,
    octile_distance,
    tile_dimensions,
)


@dataclass(frozen=True)
class Path:
    """Found path.

    Attributes:
        cells: Ordered cells, first = start, last = goal.
        cost: Sum of the step costs (0 for a single-cell path).
    """

    cells: PVector[Cell]
    cost: float

    @property
    def start(self) -> Cell:
        return self.cells[0]

    @property
    def goal(self) -> Cell:
        return self.cells[-1]

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)


@dataclass(frozen=True)
class NotFound:
    """No path for the request, with the reason callers can act on."""

    reason: NotFoundReason


PathResult = Union[Path, NotFound]


def _neighbors(grid: Grid, cell: Cell, diagonal: bool) -> Iterator[Tuple[Cell, float]]:
    """Walkable neighbors of ``cell`` with the cost of stepping into each."""
    for dx, dy in CARDINAL_NEIGHBORHOOD:
        neighbor = Cell(cell.x + dx, cell.y + dy)
        if grid.is_walkable(neighbor):
            yield neighbor, grid.cost_of(neighbor)
    if not diagonal:
        return
    for dx, dy in DIAGONAL_NEIGHBORHOOD:
        neighbor = Cell(cell.x + dx, cell.y + dy)
        # No corner cutting: both orthogonal cells must be open.
        if (
            grid.is_walkable(neighbor)
            and grid.is_walkable(Cell(cell.x + dx, cell.y))
            and grid.is_walkable(Cell(cell.x, cell.y + dy))
        ):
            yield neighbor, grid.cost_of(neighbor) * SQRT_OF_2


def _reconstruct_path(came_from: Dict[Cell, Cell], end: Cell) -> List[Cell]:
    path = [end]
    current = end
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path


def find_path(grid: Grid, start: Cell, goal: Cell, diagonal: bool = False) -> PathResult:
    """Minimum-cost walkable path from ``start`` to ``goal``.

    Args:
        grid (Grid): Snapshot to search; it is not retained.
        start (Cell): First cell of the path.
        goal (Cell): Last cell of the path.
        diagonal (bool): Allow 8-connected steps.

    Returns:
        PathResult: ``Path`` on success; ``NotFound`` with ``OUT_OF_BOUNDS``
            when an endpoint is outside the grid, ``INVALID_ENDPOINT`` when an
            endpoint is not walkable, ``UNREACHABLE`` when no route exists.
    """
    if not grid.in_bounds(start) or not grid.in_bounds(goal):
        return NotFound(NotFoundReason.OUT_OF_BOUNDS)
    if not grid.is_walkable(start) or not grid.is_walkable(goal):
        return NotFound(NotFoundReason.INVALID_ENDPOINT)
    if start == goal:
        return Path(cells=pvector([start]), cost=0.0)

    distance: Callable[[Cell, Cell], float] = (
        octile_distance if diagonal else manhattan_distance
    )
    scale = grid.min_walkable_cost()

    def heuristic(cell: Cell) -> float:
        return scale * distance(cell, goal)

    counter = itertools.count()
    open_heap: List[Tuple[float, int, Cell]] = [(heuristic(start), next(counter), start)]
    g_score: Dict[Cell, float] = {start: 0.0}
    came_from: Dict[Cell, Cell] = {}
    closed: Set[Cell] = set()

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current == goal:
            return Path(
                cells=pvector(_reconstruct_path(came_from, current)),
                cost=g_score[current],
            )
        if current in closed:
            continue
        closed.add(current)

        for neighbor, step_cost in _neighbors(grid, current, diagonal):
            if neighbor in closed:
                continue
            tentative = g_score[current] + step_cost
            if tentative < g_score.get(neighbor, math.inf):
                came_from[neighbor] = current
                g_score[neighbor] = tentative
                heapq.heappush(
                    open_heap, (tentative + heuristic(neighbor), next(counter), neighbor)
                )

    # Search space exhausted
    return NotFound(NotFoundReason.UNREACHABLE)


def to_waypoints(
    path: Union[Path, Sequence[Cell]],
    tile_size: TileSize,
    per_tile_duration: float,
    anchor: Anchor = Anchor.TOP_LEFT,
) -> List[Waypoint]:
    """Timed world-space targets for playing back ``path``.

    One waypoint per cell after the start (the mover is already there), each
    lasting ``per_tile_duration`` regardless of step length or cost.

    Raises:
        ValueError: On a non-positive tile size or negative duration.
    """
    tile_dimensions(tile_size)
    if per_tile_duration < 0:
        raise ValueError(f"per_tile_duration must not be negative, got {per_tile_duration}")
    cells = list(path)
    return [
        Waypoint(target=cell_to_world(cell, tile_size, anchor), duration=per_tile_duration)
        for cell in cells[1:]
    ]


class PathPlanner:
    """Planner bound to a :class:`NavigationConfig`.

    Holds options only; grids are passed per call and never retained.
    """

    def __init__(self, config: NavigationConfig = NavigationConfig()):
        self.config = config

    def find_path(self, grid: Grid, start: Cell, goal: Cell) -> PathResult:
        return find_path(grid, start, goal, diagonal=self.config.diagonal)

    def to_waypoints(self, path: Union[Path, Sequence[Cell]]) -> List[Waypoint]:
        return to_waypoints(
            path,
            self.config.tile_size,
            self.config.per_tile_duration,
            anchor=self.config.anchor,
        )
