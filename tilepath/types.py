"""Common type aliases and enumerations."""

from enum import StrEnum, auto
from typing import Mapping, Tuple, Union

from tilepath.components import TileProperties

TileIndex = int
TilePropertyTable = Mapping[TileIndex, TileProperties]

# A single number for square tiles or an explicit (width, height) pair.
TileSize = Union[float, Tuple[float, float]]


class NotFoundReason(StrEnum):
    """Why a path request produced no path."""

    OUT_OF_BOUNDS = auto()
    INVALID_ENDPOINT = auto()
    UNREACHABLE = auto()


class Anchor(StrEnum):
    """Point of a tile used as its world-space position."""

    TOP_LEFT = auto()
    CENTER = auto()
