# printsim/program.py

from dataclasses import dataclass, field
from typing import List, Tuple

from .interpreter import interpret_text
from .primitives import Point, Segment


# Bounding box used when a program has no motion at all
EMPTY_BBOX = ((0.0, 0.0, 0.0), (10.0, 10.0, 0.0))

# Lower bounds keeping the duration finite and non-zero
MIN_DURATION_MS = 1000.0
MIN_FEED_MM_PER_SEC = 1e-6


@dataclass
class ParsedProgram:
    """
    Container for a printer program represented as motion segments.

    Holds the ordered segments plus the geometry derived from them:
    - World bounding box over all segments (travel included)
    - Printed z-range over extruding segments only
    - Endpoint path: the end point of each extruding segment, in order

    The endpoint path is what the simulator walks to show progress.
    """

    segments: List[Segment] = field(default_factory=list)
    bbox: Tuple[Point, Point] = EMPTY_BBOX
    printed_z_range: Tuple[float, float] = (0.0, 0.0)
    endpoints: List[Point] = field(default_factory=list)

    @property
    def segment_count(self):
        return len(self.segments)

    @property
    def printed_z_min(self):
        return self.printed_z_range[0]

    @property
    def printed_z_max(self):
        return self.printed_z_range[1]

    def printed_length(self):
        """
        Return the total length of extruding segments.
        """
        return printed_length(self.segments)


def analyze(segments):
    """
    Derive bounding box, printed z-range and endpoint path.

    Returns (bbox, printed_z_range, endpoints). bbox and z-range do not
    depend on segment order; endpoints keep it.
    """
    if not segments:
        (_, _, z0), (_, _, z1) = EMPTY_BBOX
        return EMPTY_BBOX, (z0, z1), []

    points = [p for s in segments for p in (s.start, s.end)]
    lo = tuple(min(p[i] for p in points) for i in range(3))
    hi = tuple(max(p[i] for p in points) for i in range(3))

    # Printed (extruding) z-range only
    printed = [s for s in segments if s.extrude]
    if printed:
        zs = [z for s in printed for z in (s.start[2], s.end[2])]
        z_range = (min(zs), max(zs))
    else:
        z_range = (lo[2], hi[2])

    endpoints = [s.end for s in printed]

    return (lo, hi), z_range, endpoints


def printed_length(segments):
    """
    Sum the Euclidean length of extruding segments.

    Travel moves contribute nothing, whatever their length.
    """
    total = 0.0
    for s in segments:
        if s.extrude:
            total += s.length()
    return total


def estimate_duration_ms(program, feed_mm_min):
    """
    Estimate the job duration in milliseconds.

    Time is the printed length at a constant feed rate, with the feed
    rate floored to keep the division finite and the result floored to
    one second.
    """
    feed_mm_sec = max(MIN_FEED_MM_PER_SEC, feed_mm_min / 60.0)
    length = program.printed_length()
    return max(MIN_DURATION_MS, length / feed_mm_sec * 1000.0)


def parse_program(text):
    """
    Interpret program text and analyze the resulting geometry.
    """
    segments = interpret_text(text)
    bbox, z_range, endpoints = analyze(segments)
    return ParsedProgram(
        segments=segments,
        bbox=bbox,
        printed_z_range=z_range,
        endpoints=endpoints,
    )
