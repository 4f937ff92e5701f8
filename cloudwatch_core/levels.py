"""
Severity levels and the level filter.

Levels share numbers with the stdlib logging module so that a record's
``levelno`` maps straight onto the nearest level at or below it.
"""

import logging
from enum import IntEnum
from typing import Iterable, Optional


class Level(IntEnum):
    """Log severities, least to most severe."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR
    FATAL = 45
    CRITICAL = logging.CRITICAL

    @classmethod
    def from_levelno(cls, levelno: int) -> Optional["Level"]:
        """Map a stdlib levelno onto the highest Level not above it.

        Levels below DEBUG (a custom TRACE, say) have no counterpart and
        map to None.
        """
        for level in reversed(ALL_LEVELS):
            if levelno >= level:
                return level
        return None

    @classmethod
    def parse(cls, value) -> "Level":
        """Parse a Level from a name, a number or a Level."""
        if isinstance(value, Level):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid log level: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(f"Invalid log level: {value!r}") from None
        if isinstance(value, str):
            name = value.strip().upper()
            name = _ALIASES.get(name, name)
            if name in cls.__members__:
                return cls[name]
        raise ValueError(f"Invalid log level: {value!r}")


_ALIASES = {"WARNING": "WARN"}

# Ordered from least to most severe
ALL_LEVELS: tuple[Level, ...] = tuple(sorted(Level))


def level_threshold(threshold: int) -> tuple[Level, ...]:
    """Return every level at or above the given threshold."""
    for i, level in enumerate(ALL_LEVELS):
        if level >= threshold:
            return ALL_LEVELS[i:]
    return ()


class LevelFilter:
    """Decides whether a record's severity should be shipped."""

    def __init__(self, accepted: Optional[Iterable[Level]] = None):
        self._accepted = tuple(accepted) if accepted is not None else None

    @classmethod
    def from_threshold(cls, threshold: int) -> "LevelFilter":
        return cls(level_threshold(threshold))

    @property
    def levels(self) -> tuple[Level, ...]:
        """Accepted levels. All levels when nothing was configured."""
        if self._accepted is None:
            return ALL_LEVELS
        return self._accepted

    def accepts(self, level: int) -> bool:
        return level in self.levels

    def __repr__(self) -> str:
        names = ",".join(level.name for level in self.levels)
        return f"LevelFilter({names})"
