"""
Error taxonomy for the stats generator.

Each error kind is tagged with the Stage it belongs to and carries the
process exit code used by the entry point.
"""
from typing import Optional

from statsgen.enums import Stage


class StatsGenError(Exception):
    """Base class for all stats generation failures."""

    stage: Stage = Stage.INIT
    exit_code: int = 1

    def __init__(self, message: str, stage: Optional[Stage] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


class ConfigError(StatsGenError):
    """Missing or invalid environment configuration."""
    stage = Stage.CONFIG
    exit_code = 2


class DatastoreConnectionError(StatsGenError):
    """Datastore unreachable or health check failed."""
    stage = Stage.INIT


class NotInitializedError(StatsGenError):
    """A query was attempted before the pool was initialized."""
    stage = Stage.COUNT


class QueryError(StatsGenError):
    """The aggregation query failed."""
    stage = Stage.COUNT


class SerializationError(StatsGenError):
    """Stats or manifest could not be built or encoded."""
    stage = Stage.AGGREGATE


class PublishError(StatsGenError):
    """Writing output files failed. Earlier files of the run may remain."""
    stage = Stage.PUBLISH
