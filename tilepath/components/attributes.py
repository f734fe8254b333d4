"""Per-cell traversal attributes stored in a grid snapshot."""

from dataclasses import dataclass

DEFAULT_COST = 1.0


@dataclass(frozen=True)
class CellAttributes:
    """Walkability and traversal cost of one cell.

    ``cost`` is only meaningful when ``walkable`` is True.
    """

    walkable: bool = True
    cost: float = DEFAULT_COST


BLOCKED = CellAttributes(walkable=False)
