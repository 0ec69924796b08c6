# printsim/store.py

import os


# Directory prefix that uploaded programs live under, Duet style
GCODES_DIR = "gcodes/"


class ProgramNotFoundError(KeyError):
    """
    Raised when a program name is not present in the store.
    """
    pass


class UploadError(ValueError):
    """
    Raised when an upload is rejected (bad target name or empty body).
    """
    pass


def normalize_name(name):
    """
    Strip leading slashes: "/gcodes/a.gcode" -> "gcodes/a.gcode".
    """
    return str(name or "").lstrip("/")


def decode_program(data):
    """
    Return program text from either bytes (UTF-8) or str.
    """
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="replace")
    return data


class ProgramStore:
    """
    In-memory "SD card" holding program text by name.

    Names look like 'gcodes/filename.gcode' to mimic Duet paths; a
    leading slash is accepted everywhere and ignored.
    """

    def __init__(self):
        self.files = {}

    def put(self, name, text):
        name = normalize_name(name)
        self.files[name] = decode_program(text)
        return name

    def get(self, name):
        name = normalize_name(name)
        try:
            return self.files[name]
        except KeyError:
            raise ProgramNotFoundError(name) from None

    def contains(self, name):
        return normalize_name(name) in self.files

    def remove(self, name):
        name = normalize_name(name)
        if self.files.pop(name, None) is None:
            raise ProgramNotFoundError(name)

    def names(self):
        return sorted(self.files)

    def upload_file(self, filename, data):
        """
        Store a form upload under gcodes/<basename>.

        Returns the stored name with a leading slash.
        """
        basename = os.path.basename(filename or "") or "upload.gcode"
        dest = self.put(GCODES_DIR + basename, data)
        return "/" + dest

    def upload_raw(self, name, data):
        """
        Store a raw upload at an explicit path under gcodes/.
        """
        name = normalize_name(name)
        if not name.startswith(GCODES_DIR):
            raise UploadError("Must upload to /gcodes/")
        if not data:
            raise UploadError("Empty body")
        return self.put(name, data)
