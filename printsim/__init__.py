# printsim/__init__.py
#
# Mock printer controller: G-code interpretation, path analysis and
# time-driven progress simulation.

from .controller import MachineController, Snapshot, tick
from .primitives import PositioningMode, RunMode, Segment
from .printer_mode import PrinterMode
from .program import ParsedProgram, estimate_duration_ms, parse_program
