"""Verification stats generator - publishes per-chain match counts to the v1 and v2 repositories."""

__version__ = "0.1.0"

from statsgen.enums import ManifestVersion, Stage
from statsgen.errors import (
    ConfigError,
    DatastoreConnectionError,
    NotInitializedError,
    PublishError,
    QueryError,
    SerializationError,
    StatsGenError,
)
from statsgen.models import ChainContractCount, JobResult, Manifest, StatsReport

__all__ = [
    "ChainContractCount",
    "ConfigError",
    "DatastoreConnectionError",
    "JobResult",
    "Manifest",
    "ManifestVersion",
    "NotInitializedError",
    "PublishError",
    "QueryError",
    "SerializationError",
    "Stage",
    "StatsGenError",
    "StatsReport",
    "__version__",
]
