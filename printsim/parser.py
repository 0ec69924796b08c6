# printsim/parser.py

import re

# Regular expression matching a G-code "word":
#   <LETTER><NUMBER>
# Examples: X10, Y-2.5, E.4, G1, M83
WORD_RE = re.compile(r'([A-Z])([-+]?[0-9]*\.?[0-9]+)')


def parse_gcode_line(line):
    """
    Parse a single G-code line into a command and its axis words.

    The command is the first word of the line and must start at the
    very beginning (after trimming). Any further G/M words on the line
    are ignored. For every other letter only the first occurrence is
    kept, so "G1 X1 X2" resolves X to 1.

    Returns None for empty and comment-only lines, otherwise:
        {
            "command": "G1",           # or None if the line has no command
            "words": { "X": 1.0, "E": 0.4, ... },
        }
    """

    # Remove semicolon comments
    line = line.split(';')[0]

    # Normalize whitespace and case
    line = line.strip().upper()

    # Empty or comment-only line
    if not line:
        return None

    command = None
    words = {}

    for match in WORD_RE.finditer(line):
        letter, value = match.groups()

        if letter in ("G", "M"):
            # Only a leading G/M word names the command
            if match.start() == 0:
                command = format_command(letter, float(value))
            continue

        words.setdefault(letter, float(value))

    return {
        "command": command,
        "words": words,
    }


def format_command(letter, code):
    """
    Build a canonical command name, e.g. ("G", 1.0) -> "G1".

    Leading zeros are dropped (G01 -> G1); fractional codes keep their
    fraction (G59.1).
    """
    if code == int(code):
        return f"{letter}{int(code)}"
    return f"{letter}{code:g}"
