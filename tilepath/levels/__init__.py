"""Tile map inputs.

Named tile layers, the explicit layer fallback policy used to pick the tile
index of a cell, and decoding of already-parsed Tiled JSON map data.
"""

from .tilemap import (
    WORLD_THEN_BELOW,
    LayerFallback,
    TileLayers,
    TileMapError,
    tile_layers_from_tiled,
)

__all__ = [
    "WORLD_THEN_BELOW",
    "LayerFallback",
    "TileLayers",
    "TileMapError",
    "tile_layers_from_tiled",
]
