import math

import pytest

from tilepath.components import Cell, WorldPoint
from tilepath.types import Anchor
from tilepath.utils.grid import (
    cell_to_world,
    manhattan_distance,
    octile_distance,
    tile_dimensions,
    world_to_cell,
)


@pytest.mark.parametrize(
    "point, expected",
    [
        (WorldPoint(0, 0), Cell(0, 0)),
        (WorldPoint(31.9, 31.9), Cell(0, 0)),
        (WorldPoint(32, 0), Cell(1, 0)),
        (WorldPoint(100, 70), Cell(3, 2)),
        # floors toward negative infinity
        (WorldPoint(-1, -33), Cell(-1, -2)),
    ],
)
def test_world_to_cell(point: WorldPoint, expected: Cell) -> None:
    assert world_to_cell(point, 32) == expected


def test_world_to_cell_rectangular_tiles() -> None:
    assert world_to_cell(WorldPoint(20, 20), (16, 8)) == Cell(1, 2)


def test_cell_to_world_anchors() -> None:
    assert cell_to_world(Cell(2, 3), 32) == WorldPoint(64, 96)
    assert cell_to_world(Cell(2, 3), 32, Anchor.CENTER) == WorldPoint(80, 112)


def test_tile_dimensions() -> None:
    assert tile_dimensions(32) == (32.0, 32.0)
    assert tile_dimensions((16, 8)) == (16.0, 8.0)
    with pytest.raises(ValueError):
        tile_dimensions(0)


def test_distances() -> None:
    assert manhattan_distance(Cell(0, 0), Cell(3, -4)) == 7
    assert octile_distance(Cell(0, 0), Cell(3, 3)) == pytest.approx(3 * math.sqrt(2))
    assert octile_distance(Cell(0, 0), Cell(3, 1)) == pytest.approx(2 + math.sqrt(2))

