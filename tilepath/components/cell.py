"""Cell component.

Immutable integer tile coordinates. A cell's identity is its coordinate; there
is no separate id. Cells are used as keys of :class:`tilepath.grid.Grid`.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Cell:
    """Tile coordinate.

    Attributes:
        x: Column index (0 at left).
        y: Row index (0 at top).
    """

    x: int
    y: int
