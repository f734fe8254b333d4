import math

import numpy as np
import pytest
from pyrsistent import pmap

from tilepath.components import Cell, CellAttributes
from tilepath.grid import Grid
from tests.test_utils import make_grid, make_open_grid


def test_from_attributes_fills_defaults() -> None:
    grid = Grid.from_attributes(3, 2, {Cell(1, 1): CellAttributes(walkable=False)})
    assert len(grid.cells) == 6
    assert grid.is_walkable(Cell(0, 0))
    assert grid.cost_of(Cell(0, 0)) == 1.0
    assert not grid.is_walkable(Cell(1, 1))


@pytest.mark.parametrize("width, height", [(0, 3), (3, 0), (-1, 2)])
def test_invalid_dimensions_rejected(width: int, height: int) -> None:
    with pytest.raises(ValueError):
        Grid.from_attributes(width, height, {})


def test_attribute_outside_grid_rejected() -> None:
    with pytest.raises(ValueError):
        Grid.from_attributes(2, 2, {Cell(2, 0): CellAttributes()})


def test_incomplete_cell_records_rejected() -> None:
    with pytest.raises(ValueError):
        Grid(width=2, height=2, cells=pmap({Cell(0, 0): CellAttributes()}))


@pytest.mark.parametrize("cell", [Cell(-1, 0), Cell(0, -1), Cell(3, 0), Cell(0, 3)])
def test_out_of_bounds_queries_are_safe(cell: Cell) -> None:
    grid = make_open_grid(3, 3)
    assert not grid.in_bounds(cell)
    assert not grid.is_walkable(cell)
    assert grid.cost_of(cell) == math.inf


def test_block_returns_new_snapshot() -> None:
    grid = make_open_grid(3, 3)
    blocked = grid.block(Cell(1, 1))
    assert not blocked.is_walkable(Cell(1, 1))
    assert grid.is_walkable(Cell(1, 1))


def test_block_is_idempotent_and_ignores_out_of_bounds() -> None:
    grid = make_open_grid(2, 2).block(Cell(0, 1))
    assert grid.block(Cell(0, 1)) is grid
    assert grid.block(Cell(5, 5)) is grid


def test_min_walkable_cost_ignores_blocked_cells() -> None:
    grid = make_grid(["3#", "25"])
    assert grid.min_walkable_cost() == 2.0


def test_min_walkable_cost_defaults_without_walkable_cells() -> None:
    assert make_grid(["##"]).min_walkable_cost() == 1.0


def test_opened_returns_walkable_copy() -> None:
    grid = make_open_grid(2, 2).block(Cell(1, 0))
    opened = grid.opened(Cell(1, 0))
    assert opened.is_walkable(Cell(1, 0))
    assert opened.cost_of(Cell(1, 0)) == 1.0
    assert not grid.is_walkable(Cell(1, 0))
    assert grid.opened(Cell(0, 0)) is grid
    assert grid.opened(Cell(7, 7)) is grid


def test_numpy_views_are_indexed_by_row() -> None:
    grid = make_grid([".#4", "..."])
    mask = grid.walkable_mask()
    costs = grid.cost_array()
    assert mask.shape == (2, 3)
    assert not mask[0, 1]
    assert mask[1, 1]
    assert costs[0, 2] == 4.0
    assert np.isinf(costs[0, 1])
