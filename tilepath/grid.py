"""Immutable grid snapshot.

This module defines the frozen :class:`Grid` object: width, height and one
:class:`~tilepath.components.CellAttributes` record per in-range cell. A grid
is a *value object*; blocking a cell returns a new ``Grid`` and leaves the old
one untouched. Path searches therefore always run on a consistent snapshot
even if the owner blocks further cells while a search is in flight.

Design notes:

* Cell records live in a persistent map (``pyrsistent.PMap``) keyed by
    :class:`~tilepath.components.Cell`. Updates share structure with the
    previous snapshot, so blocking one cell is cheap.
* Queries are bounds-checked. Out-of-bounds cells are reported as not
    walkable with infinite cost instead of raising.
"""

import math
from dataclasses import dataclass, field
from typing import Mapping

import numpy as np
import numpy.typing as npt
from pyrsistent import PMap, pmap

from tilepath.components import BLOCKED, Cell, CellAttributes
from tilepath.utils.grid import is_in_bounds


@dataclass(frozen=True)
class Grid:
    """Rectangular snapshot of cell walkability and cost.

    Attributes:
        width (int): Grid width in tiles.
        height (int): Grid height in tiles.
        cells (PMap[Cell, CellAttributes]): Exactly one record per cell with
            ``0 <= x < width`` and ``0 <= y < height``.
    """

    width: int
    height: int
    cells: PMap[Cell, CellAttributes] = field(default_factory=pmap)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Grid dimensions must be positive, got {self.width}x{self.height}"
            )
        if len(self.cells) != self.width * self.height:
            raise ValueError(
                f"Grid {self.width}x{self.height} needs {self.width * self.height} "
                f"cell records, got {len(self.cells)}"
            )

    @classmethod
    def from_attributes(
        cls, width: int, height: int, attributes: Mapping[Cell, CellAttributes]
    ) -> "Grid":
        """Build a grid, filling cells missing from ``attributes`` with defaults.

        Raises:
            ValueError: If ``attributes`` holds a cell outside the grid.
        """
        for cell in attributes:
            if not is_in_bounds(cell, width, height):
                raise ValueError(f"Cell {cell} lies outside grid {width}x{height}")
        records = {
            Cell(x, y): attributes.get(Cell(x, y), CellAttributes())
            for y in range(height)
            for x in range(width)
        }
        return cls(width=width, height=height, cells=pmap(records))

    def in_bounds(self, cell: Cell) -> bool:
        return is_in_bounds(cell, self.width, self.height)

    def is_walkable(self, cell: Cell) -> bool:
        """Return True if ``cell`` is in bounds and walkable."""
        record = self.cells.get(cell)
        return record is not None and record.walkable

    def cost_of(self, cell: Cell) -> float:
        """Traversal cost of ``cell``; ``inf`` when out of bounds."""
        record = self.cells.get(cell)
        if record is None:
            return math.inf
        return record.cost

    def block(self, cell: Cell) -> "Grid":
        """Return a snapshot with ``cell`` non-walkable.

        Out-of-bounds or already blocked cells return ``self`` unchanged.
        """
        record = self.cells.get(cell)
        if record is None or not record.walkable:
            return self
        return Grid(
            width=self.width,
            height=self.height,
            cells=self.cells.set(cell, BLOCKED),
        )

    def min_walkable_cost(self) -> float:
        """Smallest cost among walkable cells (1.0 if none are walkable)."""
        costs = [record.cost for record in self.cells.values() if record.walkable]
        return min(costs) if costs else 1.0

    def opened(self, cell: Cell) -> "Grid":
        """Return a snapshot with ``cell`` walkable at the default cost.

        Does not change ``self``; used to search from a cell the mover already
        occupies. Out-of-bounds or walkable cells return ``self`` unchanged.
        """
        record = self.cells.get(cell)
        if record is None or record.walkable:
            return self
        return Grid(
            width=self.width,
            height=self.height,
            cells=self.cells.set(cell, CellAttributes()),
        )

    def walkable_mask(self) -> npt.NDArray[np.bool_]:
        """Boolean array indexed ``[y, x]``; True where walkable."""
        mask = np.zeros((self.height, self.width), dtype=np.bool_)
        for cell, record in self.cells.items():
            mask[cell.y, cell.x] = record.walkable
        return mask

    def cost_array(self) -> npt.NDArray[np.float64]:
        """Float array indexed ``[y, x]``; ``inf`` for non-walkable cells."""
        costs = np.full((self.height, self.width), np.inf, dtype=np.float64)
        for cell, record in self.cells.items():
            if record.walkable:
                costs[cell.y, cell.x] = record.cost
        return costs
