# printsim/interpreter.py

import logging
import re

from .modal_state import PrinterModalState
from .parser import parse_gcode_line
from .primitives import Segment


log = logging.getLogger(__name__)

# Lines end in "\n" or "\r\n"; no other line boundaries
LINE_SPLIT_RE = re.compile(r"\r?\n")


class PrintInterpreter:
    """
    Printer G-code interpreter.

    This class converts parsed G-code lines into motion segments
    while updating and respecting printer modal state.

    Responsibilities:
    - Update modal state (G90/G91, M82/M83, G92 E)
    - Resolve G1 targets and extrusion amounts
    - Emit one Segment per move that changes position

    Unrecognized commands are skipped; the interpreter never raises on
    program text.
    """

    def __init__(self, modal_state):
        # Modal printer state (shared across G-code lines)
        self.state = modal_state

    def interpret(self, parsed):
        """
        Interpret one parsed line and return a list of Segments.

        Input format (see parser.parse_gcode_line):
        {
            "command": "G1",
            "words": { "X": 1.0, "E": 0.4, ... },
        }

        Returns an empty list or a single Segment.
        """
        if not parsed or parsed["command"] is None:
            return []

        command = parsed["command"]
        words = parsed["words"]

        # --- Modal updates (no geometry) ---
        if command in ("G90", "G91"):
            self.state.set_positioning(command)
            return []

        if command in ("M82", "M83"):
            self.state.set_extrusion_mode(command)
            return []

        if command == "G92":
            self.state.set_extrusion(words)
            return []

        if command == "G1":
            return self._linear_move(words)

        log.debug("Skipping unsupported command %s", command)
        return []

    def _linear_move(self, words):
        state = self.state

        start = tuple(state.position)
        end = state.resolve_target(words)
        extrusion = state.resolve_extrusion(words)

        # First point priming: a segment needs a known start point
        if not state.primed:
            state.position = end
            state.extrusion = extrusion
            return []

        # Count *all* positive extrusion as printed
        extrude = "E" in words and (extrusion - state.extrusion) > 0

        moved = tuple(end) != start

        state.position = end
        state.extrusion = extrusion

        if not moved:
            return []

        return [Segment(start=start, end=tuple(end), extrude=extrude)]


def interpret_text(text, modal_state=None):
    """
    Interpret a whole program and return its ordered Segments.

    A fresh modal state is used unless one is passed in.
    """
    interpreter = PrintInterpreter(modal_state or PrinterModalState())

    segments = []
    for line in LINE_SPLIT_RE.split(text):
        segments.extend(interpreter.interpret(parse_gcode_line(line)))
    return segments
