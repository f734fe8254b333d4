import base64
import struct
import zlib
from typing import Any, Dict, List

import pytest

from tilepath.components import Cell, TileProperties
from tilepath.levels.tilemap import (
    WORLD_THEN_BELOW,
    TileLayers,
    TileMapError,
    tile_layers_from_tiled,
)


def make_tiled_map(**overrides: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "width": 3,
        "height": 2,
        "layers": [
            {"type": "tilelayer", "name": "Below Player", "data": [1, 1, 1, 1, 1, 1]},
            {"type": "tilelayer", "name": "World", "data": [0, 3, 0, 0, 0, 4]},
            {"type": "objectgroup", "name": "Objects", "objects": []},
        ],
        "tilesets": [
            {
                "firstgid": 1,
                "tileproperties": {"2": {"collides": True}, "3": {"cost": 4}},
            }
        ],
    }
    data.update(overrides)
    return data


def test_tile_layers_lookup() -> None:
    layers = TileLayers(2, 1, {"World": [[None, 5]]})
    assert layers.names == ["World"]
    assert layers.tile_at(Cell(0, 0), "World") is None
    assert layers.tile_at(Cell(1, 0), "World") == 5
    assert layers.tile_at(Cell(2, 0), "World") is None
    with pytest.raises(KeyError):
        layers.tile_at(Cell(0, 0), "Missing")


def test_tile_layers_reject_mismatched_shapes() -> None:
    with pytest.raises(TileMapError):
        TileLayers(2, 1, {"World": [[1]]})
    with pytest.raises(TileMapError):
        TileLayers(0, 1, {})


def test_resolve_uses_policy_order() -> None:
    layers = TileLayers(2, 1, {"World": [[None, 7]], "Below Player": [[1, 1]]})
    assert layers.resolve(Cell(0, 0), WORLD_THEN_BELOW) == 1
    assert layers.resolve(Cell(1, 0), WORLD_THEN_BELOW) == 7


def test_decode_legacy_tileproperties() -> None:
    layers, table = tile_layers_from_tiled(make_tiled_map())
    assert (layers.width, layers.height) == (3, 2)
    assert sorted(layers.names) == ["Below Player", "World"]
    assert layers.tile_at(Cell(1, 0), "World") == 3
    assert layers.tile_at(Cell(0, 0), "World") is None
    # gid = firstgid + local id
    assert table == {
        3: TileProperties(collides=True),
        4: TileProperties(cost=4.0),
    }


@pytest.mark.parametrize(
    "props, expected",
    [
        ({"collides": "false"}, TileProperties(collides=False)),
        ({"collides": "True"}, TileProperties(collides=True)),
        ({"collides": 0}, TileProperties(collides=False)),
        ({"cost": 0}, TileProperties()),
        ({"cost": ""}, TileProperties()),
        ({"cost": "2.5"}, TileProperties(cost=2.5)),
    ],
)
def test_decode_loosely_typed_properties(props: Dict[str, Any], expected: TileProperties) -> None:
    tiled = make_tiled_map(tilesets=[{"firstgid": 1, "tileproperties": {"0": props}}])
    _, table = tile_layers_from_tiled(tiled)
    assert table == {1: expected}


def test_decode_tiles_property_list_with_offset_firstgid() -> None:
    tileset = {
        "firstgid": 10,
        "tiles": [
            {"id": 0, "properties": [{"name": "collides", "type": "bool", "value": True}]},
            {"id": 1, "properties": [{"name": "cost", "type": "float", "value": 2.5}]},
            {"id": 2, "properties": [{"name": "label", "type": "string", "value": "x"}]},
        ],
    }
    _, table = tile_layers_from_tiled(make_tiled_map(tilesets=[tileset]))
    assert table == {
        10: TileProperties(collides=True),
        11: TileProperties(cost=2.5),
    }


def test_decode_strips_flip_flags() -> None:
    flipped = 0x80000000 | 3
    raw = make_tiled_map(
        layers=[{"type": "tilelayer", "name": "World", "data": [flipped, 0, 0, 0, 0, 0]}]
    )
    layers, _ = tile_layers_from_tiled(raw)
    assert layers.tile_at(Cell(0, 0), "World") == 3


def test_decode_layer_groups() -> None:
    raw = make_tiled_map(
        layers=[
            {
                "type": "group",
                "name": "Ground",
                "layers": [{"type": "tilelayer", "name": "World", "data": [1] * 6}],
            }
        ]
    )
    layers, _ = tile_layers_from_tiled(raw)
    assert layers.names == ["World"]


@pytest.mark.parametrize("compression", ["", "zlib"])
def test_decode_base64_data(compression: str) -> None:
    gids: List[int] = [1, 2, 3, 0, 0, 6]
    payload = struct.pack("<6I", *gids)
    if compression == "zlib":
        payload = zlib.compress(payload)
    layer = {
        "type": "tilelayer",
        "name": "World",
        "encoding": "base64",
        "compression": compression,
        "data": base64.b64encode(payload).decode("ascii"),
    }
    layers, _ = tile_layers_from_tiled(make_tiled_map(layers=[layer]))
    assert layers.tile_at(Cell(2, 0), "World") == 3
    assert layers.tile_at(Cell(0, 1), "World") is None
    assert layers.tile_at(Cell(2, 1), "World") == 6


@pytest.mark.parametrize(
    "overrides",
    [
        {"width": None},
        {"layers": [{"type": "tilelayer", "name": "World", "data": [1, 2]}]},
        {"layers": [{"type": "tilelayer", "data": [1] * 6}]},
        {"layers": [{"type": "tilelayer", "name": "W", "encoding": "base64", "compression": "zstd", "data": ""}]},
        {"tilesets": [{"firstgid": 1, "tiles": [{"properties": []}]}]},
    ],
)
def test_malformed_maps_raise(overrides: Dict[str, Any]) -> None:
    raw = make_tiled_map()
    raw.update(overrides)
    with pytest.raises(TileMapError):
        tile_layers_from_tiled(raw)


def test_tilemap_error_is_value_error() -> None:
    assert issubclass(TileMapError, ValueError)
