# printsim/printer_mode.py

import logging
import re

from .config import SimConfig
from .controller import MachineController
from .file_loader import GCodeFileLoader
from .parser import parse_gcode_line
from . import status
from .store import ProgramNotFoundError, ProgramStore, normalize_name


# M32 "<file>": select and start a print from the store
M32_RE = re.compile(r'M32\s+"([^"]+)"', re.IGNORECASE)


class CommandError(ValueError):
    """
    Raised for a G-code command the mock controller does not support.
    """
    pass


class PrinterMode:
    """
    Command layer of the mock printer controller.

    Wires the program store and the machine controller together and
    exposes the operations a transport would route requests to: start,
    pause/resume/stop, uploads, downloads and both status dialects.
    """

    def __init__(self, config=None, clock=None):
        self.config = config if config is not None else SimConfig()
        self.log = logging.getLogger(__name__)

        # Duration override in seconds (0 = estimate from feed rate)
        self.print_seconds = self.config.getfloat("print_seconds", 0.0,
                                                  minval=0.0)

        # Feed rate used for duration estimates (mm/min)
        self.feed_rate = self.config.getfloat("feed_rate", 600.0, above=0.0)

        self.store = ProgramStore()
        self.controller = MachineController(feed_rate=self.feed_rate,
                                            clock=clock)

    def _duration_override_ms(self):
        if self.print_seconds > 0:
            return self.print_seconds * 1000.0
        return None

    # -------------------------
    # Job commands
    # -------------------------

    def cmd_start(self, filename, now=None):
        """
        Start printing a stored program; returns its name with a slash.

        Raises ProgramNotFoundError if the program is not stored
        or is empty.
        """
        name = normalize_name(filename)
        text = self.store.get(name)
        if not text:
            raise ProgramNotFoundError(name)
        self.controller.start_job(name, text, now=now,
                                  duration_ms=self._duration_override_ms())
        return "/" + name

    def cmd_pause(self, now=None):
        return self.controller.pause(now=now)

    def cmd_resume(self, now=None):
        return self.controller.resume(now=now)

    def cmd_stop(self, now=None):
        return self.controller.stop(now=now)

    def cmd_gcode(self, gcode, now=None):
        """
        Execute a single G-code sent by a client.

        Supported: M32 "<file>" (start), M25 (pause), M24 (resume),
        M0 (stop). Returns "ok".
        """
        gcode = str(gcode or "").strip()

        m = M32_RE.search(gcode)
        if m:
            self.cmd_start(m.group(1), now=now)
            return "ok"

        parsed = parse_gcode_line(gcode)
        command = parsed["command"] if parsed else None

        if command == "M25":
            self.cmd_pause(now=now)
        elif command == "M24":
            self.cmd_resume(now=now)
        elif command == "M0":
            self.cmd_stop(now=now)
        else:
            raise CommandError("Unsupported gcode")
        return "ok"

    # -------------------------
    # Files
    # -------------------------

    def cmd_upload(self, filename, data):
        """
        Form upload; stored under /gcodes/<basename>.
        """
        return self.store.upload_file(filename, data)

    def cmd_upload_raw(self, name, data):
        """
        Raw upload to an explicit /gcodes/... path.
        """
        return self.store.upload_raw(name, data)

    def cmd_download(self, name):
        return self.store.get(name)

    def seed_from_file(self, path=None, now=None):
        """
        Load a program from disk and start it.

        ``path`` defaults to the ``start_file`` option. Returns the
        stored name, or None if there was nothing to load.
        """
        path = path or self.config.get("start_file", None)
        loader = GCodeFileLoader(path)
        if not loader.exists():
            return None

        text = loader.load()
        if not text:
            self.log.warning("[seed] %s is empty, not starting it", path)
            return None

        name = self.store.put(loader.store_name(), text)
        self.cmd_start(name, now=now)
        self.log.info("[seed] Loaded and started %s", name)
        return name

    # -------------------------
    # Status
    # -------------------------

    def machine_status(self, now=None):
        """
        DSF-style status; advances the simulation first.
        """
        return status.dsf_status(self.controller.status(now=now))

    def rr_status(self, now=None):
        """
        Legacy rr_status; advances the simulation first.
        """
        return status.rr_status(self.controller.status(now=now))
