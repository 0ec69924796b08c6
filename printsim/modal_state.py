# printsim/modal_state.py

from .primitives import PositioningMode


class PrinterModalState:
    """
    Printer modal state across G-code lines.

    X and Y start unknown (None) and stay that way until a move names
    them; Z starts at 0. The extrusion amount is tracked separately
    because it has its own absolute/relative mode.
    """

    def __init__(self):
        self.reset()

    def reset(self):
        # Running position; X/Y unknown until primed by a move
        self.position = [None, None, 0.0]

        # Running extrusion amount (mm of filament)
        self.extrusion = 0.0

        # G90/G91
        self.positioning = PositioningMode.ABSOLUTE

        # M82/M83
        self.extrusion_mode = PositioningMode.ABSOLUTE

    @property
    def primed(self):
        """
        True once both horizontal axes have been established.
        """
        return self.position[0] is not None and self.position[1] is not None

    def set_positioning(self, command):
        if command == "G90":
            self.positioning = PositioningMode.ABSOLUTE
        elif command == "G91":
            self.positioning = PositioningMode.RELATIVE

    def set_extrusion_mode(self, command):
        if command == "M82":
            self.extrusion_mode = PositioningMode.ABSOLUTE
        elif command == "M83":
            self.extrusion_mode = PositioningMode.RELATIVE

    def set_extrusion(self, words):
        """
        G92: overwrite the running extrusion amount.

        Only the E word is honored; G92 never moves the positional axes.
        """
        if "E" in words:
            self.extrusion = float(words["E"])

    def resolve_target(self, target_words):
        """
        Resolve X/Y/Z targets according to the positioning mode.

        An axis that is still unknown takes its value as absolute,
        whatever the mode.
        """
        relative = self.positioning is PositioningMode.RELATIVE
        resolved = list(self.position)
        for axis, idx in (("X", 0), ("Y", 1), ("Z", 2)):
            if axis not in target_words:
                continue
            val = float(target_words[axis])
            if relative and resolved[idx] is not None:
                resolved[idx] += val
            else:
                resolved[idx] = val
        return resolved

    def resolve_extrusion(self, target_words):
        """
        Resolve the E target according to the extrusion mode.
        """
        if "E" not in target_words:
            return self.extrusion
        val = float(target_words["E"])
        if self.extrusion_mode is PositioningMode.RELATIVE:
            return self.extrusion + val
        return val
