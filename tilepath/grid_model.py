"""Walkability classification and the mutable grid owner.

:func:`build_grid` turns tile layers plus a sparse tile property table into an
immutable :class:`~tilepath.grid.Grid`. :class:`GridModel` is the single
owner of the *current* snapshot for a map session: it answers queries and
swaps in a new snapshot whenever a cell becomes an obstacle.

Classification rule for the tile index resolved at a cell:

* no tile in any layer, or no declared properties: walkable, default cost;
* ``collides`` declared true: not walkable;
* otherwise walkable with the declared ``cost`` (default cost if absent).
"""

from typing import Dict, Optional

from tilepath.components import (
    BLOCKED,
    DEFAULT_COST,
    Cell,
    CellAttributes,
    TileProperties,
)
from tilepath.grid import Grid
from tilepath.levels.tilemap import WORLD_THEN_BELOW, LayerFallback, TileLayers
from tilepath.types import TileIndex, TilePropertyTable


def classify_tile(
    index: Optional[TileIndex], tile_properties: TilePropertyTable
) -> CellAttributes:
    """Cell attributes for a resolved tile index.

    Raises:
        ValueError: If the tile declares a non-positive cost.
    """
    if index is None:
        return CellAttributes()
    props: Optional[TileProperties] = tile_properties.get(index)
    if props is None:
        return CellAttributes()
    if props.collides:
        return BLOCKED
    if props.cost is None:
        return CellAttributes(walkable=True, cost=DEFAULT_COST)
    if props.cost <= 0:
        raise ValueError(f"Tile {index} declares non-positive cost {props.cost}")
    return CellAttributes(walkable=True, cost=float(props.cost))


def build_grid(
    layers: TileLayers,
    tile_properties: TilePropertyTable,
    policy: LayerFallback = WORLD_THEN_BELOW,
) -> Grid:
    """Classify every cell of ``layers`` into a grid snapshot.

    Args:
        layers (TileLayers): Tile layers of the map.
        tile_properties (TilePropertyTable): Sparse tile index -> properties.
        policy (LayerFallback): Layer order used to resolve each cell's tile.

    Returns:
        Grid: Snapshot with the map's width and height.

    Raises:
        KeyError: If ``policy`` names a layer the map does not have.
        ValueError: If a tile declares a non-positive cost.
    """
    layers.check_policy(policy)
    # Classification depends only on the tile index; reuse it across cells.
    by_index: Dict[Optional[TileIndex], CellAttributes] = {}
    attributes: Dict[Cell, CellAttributes] = {}
    for y in range(layers.height):
        for x in range(layers.width):
            cell = Cell(x, y)
            index = layers.resolve(cell, policy)
            if index not in by_index:
                by_index[index] = classify_tile(index, tile_properties)
            attributes[cell] = by_index[index]
    return Grid.from_attributes(layers.width, layers.height, attributes)


class GridModel:
    """Owner of the current grid snapshot for one map session.

    Only the owning game loop mutates the model. Searches take
    :meth:`snapshot` at request time and never observe later blocking.
    """

    def __init__(self, grid: Grid):
        self._grid = grid

    @classmethod
    def build(
        cls,
        layers: TileLayers,
        tile_properties: TilePropertyTable,
        policy: LayerFallback = WORLD_THEN_BELOW,
    ) -> "GridModel":
        return cls(build_grid(layers, tile_properties, policy))

    @property
    def width(self) -> int:
        return self._grid.width

    @property
    def height(self) -> int:
        return self._grid.height

    def snapshot(self) -> Grid:
        """Current immutable grid."""
        return self._grid

    def mark_blocked(self, cell: Cell) -> None:
        """Make ``cell`` non-walkable from now on.

        Idempotent. Out-of-bounds cells are ignored.
        """
        self._grid = self._grid.block(cell)

    def is_walkable(self, cell: Cell) -> bool:
        return self._grid.is_walkable(cell)

    def cost_of(self, cell: Cell) -> float:
        return self._grid.cost_of(cell)
