# printsim/config.py

import os


class ConfigError(ValueError):
    """
    Raised for a config value that cannot be parsed or is out of range.
    """
    pass


_UNSET = object()


class SimConfig:
    """
    Klipper-style config section over a flat mapping.

    Options are looked up by name, then by their environment alias, then
    upper-cased, so ``feed_rate``, ``FEED_MM_PER_MIN`` and ``FEED_RATE``
    all resolve the same option. Empty values count as unset. Defaults
    to reading ``os.environ``.
    """

    # Option name -> environment variable name
    ALIASES = {
        "print_seconds": "PRINT_SECONDS",
        "feed_rate": "FEED_MM_PER_MIN",
        "start_file": "START_FILE",
    }

    def __init__(self, values=None):
        self.values = dict(os.environ if values is None else values)

    def _lookup(self, option):
        for key in (option, self.ALIASES.get(option), option.upper()):
            if key and key in self.values and self.values[key] != "":
                return self.values[key]
        return _UNSET

    def get(self, option, default=_UNSET):
        value = self._lookup(option)
        if value is _UNSET:
            if default is _UNSET:
                raise ConfigError(f"Option '{option}' must be specified")
            return default
        return value

    def getfloat(self, option, default=_UNSET, minval=None, above=None):
        value = self.get(option, default)
        if value is None:
            return None
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ConfigError(
                f"Unable to parse option '{option}': {value!r}") from None
        self._check_range(option, value, minval, above)
        return value

    def _check_range(self, option, value, minval, above):
        if minval is not None and value < minval:
            raise ConfigError(
                f"Option '{option}' must have minimum of {minval}")
        if above is not None and value <= above:
            raise ConfigError(
                f"Option '{option}' must be above {above}")
