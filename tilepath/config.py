from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Tuple

from tilepath.levels.tilemap import LayerFallback
from tilepath.types import Anchor


# -----------------------------
# Config Dataclass
# -----------------------------
@dataclass(frozen=True)
class NavigationConfig:
    """Settings shared by the planner and the navigation session.

    Attributes:
        tile_width: Tile width in world units.
        tile_height: Tile height in world units.
        per_tile_duration: Playback time for one tile step.
        layer_order: Layers consulted, in order, to resolve a cell's tile.
        diagonal: Allow 8-connected movement (corners are never cut).
        anchor: Tile point used as a waypoint target.
        place_obstacle_on_click: Block the clicked cell after requesting a path.
    """

    tile_width: float = 32
    tile_height: float = 32
    per_tile_duration: float = 200
    layer_order: Tuple[str, ...] = ("World", "Below Player")
    diagonal: bool = False
    anchor: Anchor = Anchor.TOP_LEFT
    place_obstacle_on_click: bool = False

    def __post_init__(self) -> None:
        if self.tile_width <= 0 or self.tile_height <= 0:
            raise ValueError("Tile dimensions must be positive")
        if self.per_tile_duration < 0:
            raise ValueError("per_tile_duration must not be negative")
        if not self.layer_order:
            raise ValueError("layer_order must name at least one layer")

    @property
    def tile_size(self) -> Tuple[float, float]:
        return (self.tile_width, self.tile_height)

    @property
    def layer_fallback(self) -> LayerFallback:
        return LayerFallback(order=tuple(self.layer_order))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> NavigationConfig:
        """Build a config from plain data (e.g. a decoded settings file)."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown navigation config keys: {unknown}")
        values = dict(data)
        if "layer_order" in values:
            values["layer_order"] = tuple(values["layer_order"])
        if "anchor" in values:
            values["anchor"] = Anchor(values["anchor"])
        return cls(**values)
