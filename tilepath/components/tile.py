"""Declared tile metadata.

Tile property tables are sparse: only exceptional tiles (colliding ones or
ones with a non-default cost) are listed. A tile index missing from the table
is an ordinary walkable tile.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TileProperties:
    """Properties declared for a tile index.

    Attributes:
        collides: Tile blocks movement.
        cost: Traversal cost when walkable. ``None`` means the default cost.
    """

    collides: bool = False
    cost: Optional[float] = None
