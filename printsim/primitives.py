# printsim/primitives.py

from dataclasses import dataclass
from enum import Enum
from typing import Tuple
import math


Point = Tuple[float, float, float]


class PositioningMode(Enum):
    """
    Distance mode for an axis class.

    Positional axes switch with G90/G91, the extruder with M82/M83.
    """
    ABSOLUTE = "absolute"
    RELATIVE = "relative"


class RunMode(Enum):
    """
    High-level run state of the simulated machine.

    The values are the strings reported in the DSF status payload.
    """
    IDLE = "idle"          # No job running
    PRINTING = "printing"  # Job running (loops until stopped)
    PAUSED = "paused"      # Job held by an explicit pause
    STOPPED = "stopped"    # Job stopped by an explicit stop


@dataclass(frozen=True)
class Segment:
    """
    A single linear move in world space.

    Segments are produced by the interpreter and never modified
    afterwards. Only segments with ``extrude`` set count as printed
    material; travel moves and retractions have it cleared.
    """

    # World-space start position
    start: Point

    # World-space end position
    end: Point

    # True when the move carried a strictly positive extrusion delta
    extrude: bool = False

    def length(self):
        """
        Compute the Euclidean length of the segment.

        Used for printed length and duration estimation.
        """
        x0, y0, z0 = self.start
        x1, y1, z1 = self.end

        dx = x1 - x0
        dy = y1 - y0
        dz = z1 - z0

        return math.sqrt(dx*dx + dy*dy + dz*dz)
