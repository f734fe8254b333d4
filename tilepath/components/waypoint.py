"""Motion waypoint components consumed by an external playback layer."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WorldPoint:
    """World-space position (engine units, typically pixels)."""

    x: float
    y: float


@dataclass(frozen=True)
class Waypoint:
    """One chained motion step.

    Attributes:
        target: World position to reach at the end of the step.
        duration: Time the step takes, in the playback layer's time unit.
    """

    target: WorldPoint
    duration: float
