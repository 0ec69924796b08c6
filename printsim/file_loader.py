# printsim/file_loader.py

import os

from .store import GCODES_DIR


class GCodeFileLoader:
    """
    Simple loader for G-code files on disk.

    The text is returned unmodified (comments and blank lines kept) so
    that the stored byte size matches the file the job reports.
    """

    def __init__(self, filename):
        # Path to the G-code (.gcode) file
        self.filename = filename

    def exists(self):
        return bool(self.filename) and os.path.isfile(self.filename)

    def store_name(self):
        """
        Name the file is stored under, e.g. "gcodes/part.gcode".
        """
        return GCODES_DIR + os.path.basename(self.filename)

    def load(self):
        """
        Read the whole file as UTF-8 text.
        """
        with open(self.filename, "r", encoding="utf-8", newline="") as f:
            return f.read()
