from __future__ import annotations

import base64
import gzip
import struct
import zlib
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from tilepath.components import Cell, TileProperties
from tilepath.types import TileIndex

# Tiled stores flip/rotation flags in the top bits of each gid.
GID_FLAGS_MASK = 0xE0000000

# Layer row: tile index per column, ``None`` where the layer has no tile.
LayerRows = Sequence[Sequence[Optional[TileIndex]]]


class TileMapError(ValueError):
    """Raised when decoded map data does not describe a usable tile map."""


@dataclass(frozen=True)
class LayerFallback:
    """Named policy for resolving the tile index at a cell across layers.

    Layers are consulted in ``order``; the first layer holding a tile at the
    cell wins. A cell with no tile in any listed layer resolves to ``None``.
    """

    order: Tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.order:
            raise ValueError("LayerFallback needs at least one layer name")


WORLD_THEN_BELOW = LayerFallback(order=("World", "Below Player"))


class TileLayers:
    """
    Named rectangular tile layers sharing one width x height.
    - ``layers[name][y][x]`` is the tile index at (x, y) or ``None``.
    - Read-only view used to build a grid; it never changes after construction.
    """

    def __init__(self, width: int, height: int, layers: Mapping[str, LayerRows]):
        if width <= 0 or height <= 0:
            raise TileMapError(f"Map dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._layers: Dict[str, Tuple[Tuple[Optional[TileIndex], ...], ...]] = {}
        for name, rows in layers.items():
            if len(rows) != height or any(len(row) != width for row in rows):
                raise TileMapError(f"Layer {name!r} is not {width}x{height}")
            self._layers[name] = tuple(tuple(row) for row in rows)

    @property
    def names(self) -> List[str]:
        return list(self._layers)

    def tile_at(self, cell: Cell, layer: str) -> Optional[TileIndex]:
        """
        Tile index at ``cell`` in ``layer``; ``None`` if empty or out of bounds.
        Raises KeyError for an unknown layer name.
        """
        rows = self._layers[layer]
        if not (0 <= cell.x < self.width and 0 <= cell.y < self.height):
            return None
        return rows[cell.y][cell.x]

    def resolve(self, cell: Cell, policy: LayerFallback) -> Optional[TileIndex]:
        """
        Tile index at ``cell`` following ``policy``'s layer order.
        """
        for layer in policy.order:
            index = self.tile_at(cell, layer)
            if index is not None:
                return index
        return None

    def check_policy(self, policy: LayerFallback) -> None:
        """
        Raise KeyError if ``policy`` names a layer this map does not have.
        """
        missing = [name for name in policy.order if name not in self._layers]
        if missing:
            raise KeyError(f"Unknown layer(s) {missing}; available: {self.names}")


# -------- Tiled JSON decoding --------


def tile_layers_from_tiled(
    map_data: Mapping[str, Any],
) -> Tuple[TileLayers, Dict[TileIndex, TileProperties]]:
    """Decode an already-parsed Tiled JSON map.

    Returns the map's tile layers (gid 0 becomes ``None``) and a property
    table keyed by global tile index (``firstgid + local id``) holding only
    the tiles that declare ``collides`` or ``cost``.
    """
    try:
        width = int(map_data["width"])
        height = int(map_data["height"])
        raw_layers = map_data["layers"]
    except (KeyError, TypeError, ValueError) as exc:
        raise TileMapError(f"Map data lacks width/height/layers: {exc}") from exc

    layers: Dict[str, LayerRows] = {}
    for raw in _tile_layers(raw_layers):
        name = raw.get("name")
        if not isinstance(name, str):
            raise TileMapError("Tile layer without a name")
        gids = _decode_layer_data(raw, width * height)
        layers[name] = [
            [_gid_to_index(gids[y * width + x]) for x in range(width)]
            for y in range(height)
        ]

    properties: Dict[TileIndex, TileProperties] = {}
    for tileset in map_data.get("tilesets", []):
        try:
            properties.update(_tileset_properties(tileset))
        except (KeyError, TypeError, ValueError) as exc:
            raise TileMapError(f"Malformed tileset properties: {exc}") from exc

    return TileLayers(width, height, layers), properties


def _tile_layers(raw_layers: Any) -> List[Mapping[str, Any]]:
    """Flatten tile layers, descending into Tiled layer groups."""
    found: List[Mapping[str, Any]] = []
    for raw in raw_layers:
        kind = raw.get("type")
        if kind == "tilelayer":
            found.append(raw)
        elif kind == "group":
            found.extend(_tile_layers(raw.get("layers", [])))
    return found


def _decode_layer_data(raw: Mapping[str, Any], expected: int) -> List[int]:
    data = raw.get("data")
    encoding = raw.get("encoding", "csv")
    if encoding == "base64":
        if not isinstance(data, str):
            raise TileMapError(f"Layer {raw.get('name')!r}: base64 data must be a string")
        payload = base64.b64decode(data)
        compression = raw.get("compression", "")
        if compression == "zlib":
            payload = zlib.decompress(payload)
        elif compression == "gzip":
            payload = gzip.decompress(payload)
        elif compression:
            raise TileMapError(f"Unsupported layer compression {compression!r}")
        if len(payload) != expected * 4:
            raise TileMapError(f"Layer {raw.get('name')!r} has the wrong size")
        return list(struct.unpack(f"<{expected}I", payload))
    if encoding != "csv" or not isinstance(data, list):
        raise TileMapError(f"Layer {raw.get('name')!r}: unsupported data encoding")
    if len(data) != expected:
        raise TileMapError(
            f"Layer {raw.get('name')!r} has {len(data)} tiles, expected {expected}"
        )
    return [int(gid) for gid in data]


def _gid_to_index(gid: int) -> Optional[TileIndex]:
    gid &= ~GID_FLAGS_MASK
    return gid if gid else None


def _tileset_properties(tileset: Mapping[str, Any]) -> Dict[TileIndex, TileProperties]:
    firstgid = int(tileset.get("firstgid", 1))
    declared: Dict[int, Dict[str, Any]] = {}

    # Legacy format: {"tileproperties": {"<local id>": {"collides": true}}}
    for local_id, props in tileset.get("tileproperties", {}).items():
        declared.setdefault(int(local_id), {}).update(props)

    # Current format: {"tiles": [{"id": 3, "properties": [{"name": ..., "value": ...}]}]}
    for tile in tileset.get("tiles", []):
        entries = tile.get("properties", [])
        if isinstance(entries, Mapping):
            props = dict(entries)
        else:
            props = {entry["name"]: entry.get("value") for entry in entries}
        declared.setdefault(int(tile["id"]), {}).update(props)

    table: Dict[TileIndex, TileProperties] = {}
    for local_id, props in declared.items():
        if "collides" not in props and "cost" not in props:
            continue
        cost = props.get("cost")
        cost = float(cost) if cost not in (None, "") else None
        table[firstgid + local_id] = TileProperties(
            collides=_as_bool(props.get("collides", False)),
            # zero cost means no override
            cost=cost or None,
        )
    return table


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1")
    return bool(value)
