import logging
from typing import Optional

# Quietest first; moreVerbose walks towards DEBUG.
LEVELS = (logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG)


class VerbosityController:
    """Steps a logger's level one notch at a time at runtime."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger()

    @property
    def level(self) -> int:
        return self.logger.getEffectiveLevel()

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)

    @property
    def is_debug(self) -> bool:
        return self.level <= logging.DEBUG

    def _position(self) -> int:
        level = self.level
        for i, candidate in enumerate(LEVELS):
            if level >= candidate:
                return i
        return len(LEVELS) - 1

    def less_verbose(self) -> bool:
        position = self._position()
        if position == 0:
            return False
        self.logger.setLevel(LEVELS[position - 1])
        return True

    def more_verbose(self) -> bool:
        position = self._position()
        if position == len(LEVELS) - 1:
            return False
        self.logger.setLevel(LEVELS[position + 1])
        return True
