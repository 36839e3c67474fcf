"""
Enums for the stats generator
=============================

Type-safe enumerations for job stages, manifest versions and log levels.
"""

import logging
from enum import Enum
from typing import Tuple


# Below DEBUG, used for the "silly" log level
SILLY = 5


class Stage(str, Enum):
    """
    Sequential stages of a stats generation run.

    Every error raised by the job is tagged with the stage it failed in.
    """
    CONFIG = "config"
    INIT = "init"
    COUNT = "count"
    AGGREGATE = "aggregate"
    MANIFEST = "manifest"
    PUBLISH = "publish"
    CLOSE = "close"

    def __str__(self) -> str:
        return self.value


class ManifestVersion(str, Enum):
    """
    Output repository schema versions.

    - V1: repository consumed by the legacy (v1) server
    - V2: repository consumed by the v2 server
    """
    V1 = "1"
    V2 = "2"

    def __str__(self) -> str:
        return self.value


class LogLevel(str, Enum):
    """Accepted values for NODE_LOG_LEVEL."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"
    SILLY = "silly"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(level.value for level in cls)

    def to_logging_level(self) -> int:
        """Map to the stdlib logging level."""
        return {
            LogLevel.ERROR: logging.ERROR,
            LogLevel.WARN: logging.WARNING,
            LogLevel.INFO: logging.INFO,
            LogLevel.DEBUG: logging.DEBUG,
            LogLevel.SILLY: SILLY,
        }[self]
