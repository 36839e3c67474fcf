"""Config package."""
from .config import (
    REQUIRED_ENV_VARS,
    PostgresConfig,
    RepositoryConfig,
    StatsGenConfig,
    load_config,
)

__all__ = [
    "REQUIRED_ENV_VARS",
    "PostgresConfig",
    "RepositoryConfig",
    "StatsGenConfig",
    "load_config",
]
