"""Click-to-move navigation session.

Wires a world-space click to a path request, optional obstacle placement and
waypoint playback through an external motion player:

1. ``request_move`` converts the mover and the click to cells, cancels any
    running playback, supersedes any in-flight search and submits a new one on
    the grid snapshot of *this* moment.
2. If ``place_obstacle_on_click`` is set the clicked cell is blocked next; the
    in-flight search does not see it.
3. ``update`` (called by the game loop, once per frame) applies a finished
    search: waypoints go to the player (``MOVING``) or the failure is reported
    (``PATH_NOT_FOUND``) and the session goes back to ``IDLE``.
4. The player calls back when playback completes; the session returns to
    ``IDLE`` with the mover on the goal cell.

Searches run through :class:`AsyncPathPlanner`. Without an executor they run
inline and ``request_move`` applies the result before returning. With a
thread pool, results are only applied from ``update`` so that every state
change happens on the game loop's thread.
"""

from concurrent.futures import CancelledError, Executor, Future
from dataclasses import dataclass
from enum import StrEnum, auto
from functools import partial
from typing import Any, Callable, List, Mapping, Optional, Protocol, Sequence

from loguru import logger

from tilepath.components import Cell, Waypoint, WorldPoint
from tilepath.config import NavigationConfig
from tilepath.grid import Grid
from tilepath.grid_model import GridModel
from tilepath.levels.tilemap import tile_layers_from_tiled
from tilepath.planner import NotFound, Path, PathPlanner, PathResult
from tilepath.utils.grid import cell_to_world, world_to_cell


class NavigationState(StrEnum):
    IDLE = auto()
    PATH_REQUESTED = auto()
    PATH_FOUND = auto()
    PATH_NOT_FOUND = auto()
    MOVING = auto()


class WaypointPlayer(Protocol):
    """Chained motion player provided by the engine layer."""

    def play(self, waypoints: Sequence[Waypoint], on_complete: Callable[[], None]) -> None:
        """Play ``waypoints`` in order, then call ``on_complete``."""
        ...

    def cancel(self) -> None:
        """Stop the current playback without calling its ``on_complete``."""
        ...


class PlanHandle:
    """Completion handle for one path search.

    Wraps a :class:`concurrent.futures.Future`. A cancelled handle never
    delivers its result, even if the underlying search already finished.
    """

    def __init__(self, future: "Future[PathResult]", start: Cell, goal: Cell):
        self._future = future
        self._cancelled = False
        self.start = start
        self.goal = goal

    def cancel(self) -> None:
        self._cancelled = True
        self._future.cancel()

    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        return self._cancelled or self._future.done()

    def result(self, timeout: Optional[float] = None) -> PathResult:
        """Search result; blocks up to ``timeout`` seconds.

        Raises:
            CancelledError: If the handle was cancelled.
            TimeoutError: If the search did not finish in time.
        """
        if self._cancelled:
            raise CancelledError()
        return self._future.result(timeout)

    def add_done_callback(self, fn: Callable[[PathResult], None]) -> None:
        """Call ``fn(result)`` once the search finishes, unless cancelled first."""

        def _deliver(future: "Future[PathResult]") -> None:
            if self._cancelled or future.cancelled():
                return
            fn(future.result())

        self._future.add_done_callback(_deliver)


def _run_inline(planner: PathPlanner, grid: Grid, start: Cell, goal: Cell) -> "Future[PathResult]":
    future: "Future[PathResult]" = Future()
    try:
        future.set_result(planner.find_path(grid, start, goal))
    except Exception as exc:
        future.set_exception(exc)
    return future


class AsyncPathPlanner:
    """Runs searches for a single mover, at most one in flight.

    Each request cancels the previous handle. ``executor`` is any
    :class:`concurrent.futures.Executor` (e.g. a ``ThreadPoolExecutor``);
    ``None`` runs searches inline and returns an already completed handle.
    """

    def __init__(self, planner: PathPlanner, executor: Optional[Executor] = None):
        self.planner = planner
        self._executor = executor
        self._current: Optional[PlanHandle] = None

    @property
    def current(self) -> Optional[PlanHandle]:
        return self._current

    def request(self, grid: Grid, start: Cell, goal: Cell) -> PlanHandle:
        """Search on ``grid`` (a snapshot) and supersede any earlier request."""
        if self._current is not None and not self._current.done():
            self._current.cancel()
        if self._executor is None:
            future = _run_inline(self.planner, grid, start, goal)
        else:
            future = self._executor.submit(self.planner.find_path, grid, start, goal)
        self._current = PlanHandle(future, start, goal)
        return self._current

    def cancel(self) -> None:
        if self._current is not None:
            self._current.cancel()
            self._current = None


@dataclass(frozen=True)
class Marker:
    """Tile under the pointer.

    Attributes:
        cell: Hovered cell.
        position: World position of the cell's top-left corner.
        walkable: Whether the cell can be a destination (marker visibility).
    """

    cell: Cell
    position: WorldPoint
    walkable: bool


class NavigationSession:
    """Click-to-move controller for one mover on one map."""

    def __init__(
        self,
        grid_model: GridModel,
        player: WaypointPlayer,
        mover_cell: Cell,
        config: NavigationConfig = NavigationConfig(),
        executor: Optional[Executor] = None,
    ):
        self.grid_model = grid_model
        self.player = player
        self.mover_cell = mover_cell
        self.config = config
        self.planner = PathPlanner(config)
        self._searches = AsyncPathPlanner(self.planner, executor)
        self._pending: Optional[PlanHandle] = None
        self._playback_id = 0
        self.state = NavigationState.IDLE
        self.last_result: Optional[PathResult] = None
        self.waypoints: List[Waypoint] = []

    @classmethod
    def from_tiled(
        cls,
        map_data: Mapping[str, Any],
        player: WaypointPlayer,
        mover_cell: Cell,
        config: NavigationConfig = NavigationConfig(),
        executor: Optional[Executor] = None,
    ) -> "NavigationSession":
        """Session over a decoded Tiled JSON map.

        Layers are resolved in ``config.layer_order``; tile properties come
        from the map's tilesets.

        Raises:
            TileMapError: If the map cannot be decoded.
            KeyError: If a layer named in ``config.layer_order`` is missing.
        """
        layers, tile_properties = tile_layers_from_tiled(map_data)
        grid_model = GridModel.build(layers, tile_properties, config.layer_fallback)
        logger.debug(
            "loaded {}x{} map with layers {}", grid_model.width, grid_model.height, layers.names
        )
        return cls(grid_model, player, mover_cell, config, executor)

    def hover(self, point: WorldPoint) -> Marker:
        cell = world_to_cell(point, self.config.tile_size)
        return Marker(
            cell=cell,
            position=cell_to_world(cell, self.config.tile_size),
            walkable=self.grid_model.is_walkable(cell),
        )

    def request_move(
        self, target: WorldPoint, mover_position: Optional[WorldPoint] = None
    ) -> PlanHandle:
        """Plan a move of the mover to the tile containing ``target``.

        Args:
            target: Clicked world position.
            mover_position: Mover's current world position. Pass it when a
                move is interrupted mid-way; without it the session plans from
                ``mover_cell``, which only advances when playback completes.

        Returns:
            PlanHandle: Handle of the submitted search.
        """
        if mover_position is not None:
            self.mover_cell = world_to_cell(mover_position, self.config.tile_size)
        start = self.mover_cell
        goal = world_to_cell(target, self.config.tile_size)
        logger.debug("going from {} to {}", start, goal)

        self._stop_playback()
        self.state = NavigationState.PATH_REQUESTED
        # The mover may stand on a cell it blocked earlier.
        grid = self.grid_model.snapshot().opened(start)
        self._pending = self._searches.request(grid, start, goal)

        if self.config.place_obstacle_on_click:
            self.grid_model.mark_blocked(goal)
            logger.info("placed obstacle at {}", goal)

        handle = self._pending
        self.update()
        return handle

    def update(self) -> None:
        """Apply the pending search result if it has finished."""
        handle = self._pending
        if handle is None or not handle.done():
            return
        self._pending = None
        if handle.cancelled():
            return
        result = handle.result()
        self.last_result = result
        if isinstance(result, NotFound):
            self._report_not_found(handle, result)
            return
        self._start_playback(result)

    def _report_not_found(self, handle: PlanHandle, result: NotFound) -> None:
        self.state = NavigationState.PATH_NOT_FOUND
        logger.warning(
            "Path was not found from {} to {}: {}", handle.start, handle.goal, result.reason
        )
        # the mover stays put, ready for the next click
        self.state = NavigationState.IDLE

    def cancel(self) -> None:
        """Drop any in-flight search and stop playback."""
        self._searches.cancel()
        self._pending = None
        self._stop_playback()
        self.state = NavigationState.IDLE

    def _start_playback(self, path: Path) -> None:
        self.state = NavigationState.PATH_FOUND
        self.waypoints = self.planner.to_waypoints(path)
        if not self.waypoints:
            self.state = NavigationState.IDLE
            return
        self._playback_id += 1
        logger.debug("moving along {} tiles (cost {})", len(self.waypoints), path.cost)
        self.state = NavigationState.MOVING
        self.player.play(
            self.waypoints, partial(self._on_playback_complete, self._playback_id, path.goal)
        )

    def _stop_playback(self) -> None:
        if self.state == NavigationState.MOVING:
            self.player.cancel()
            self._playback_id += 1
        self.waypoints = []

    def _on_playback_complete(self, playback_id: int, goal: Cell) -> None:
        if playback_id != self._playback_id:
            return  # superseded
        self.mover_cell = goal
        self.state = NavigationState.IDLE
