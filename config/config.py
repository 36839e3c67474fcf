"""Configuration management for the stats generator."""
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, ValidationError

from statsgen.enums import LogLevel
from statsgen.errors import ConfigError


# Environment variables that must be present (and non-empty) for a run
REQUIRED_ENV_VARS = (
    "POSTGRES_HOST",
    "POSTGRES_DATABASE",
    "POSTGRES_USER",
    "POSTGRES_PASSWORD",
    "REPOV1_PATH",
    "REPOV2_PATH",
)


class PostgresConfig(BaseModel):
    """PostgreSQL connection configuration."""
    host: str = Field(..., min_length=1, description="Database host")
    port: int = Field(default=5432, gt=0, lt=65536, description="Database port")
    database: str = Field(..., min_length=1, description="Database name")
    user: str = Field(..., min_length=1, description="Database user")
    password: SecretStr = Field(..., description="Database password (never logged)")
    pool_size: int = Field(default=5, ge=1, description="Max connections in the pool")
    connect_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait when connecting to the database or opening the pool",
    )

    def connection_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments passed to psycopg.connect() by the pool."""
        return {
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
            "user": self.user,
            "password": self.password.get_secret_value(),
            "connect_timeout": max(1, int(self.connect_timeout)),
        }

    def describe(self) -> Dict[str, Any]:
        """Connection parameters safe to log."""
        return {
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "user": self.user,
        }


class RepositoryConfig(BaseModel):
    """Output repositories receiving stats.json and manifest.json."""
    v1_path: Path = Field(..., description="Repository using manifest version 1")
    v2_path: Path = Field(..., description="Repository using manifest version 2")


class StatsGenConfig(BaseModel):
    """Root configuration for the stats generator."""
    postgres: PostgresConfig
    repositories: RepositoryConfig

    # Logging
    log_level: LogLevel = LogLevel.DEBUG
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    json_logs: bool = Field(
        default=False,
        description="Emit one JSON object per log line (NODE_ENV=production)",
    )


def _default_log_level(env: Mapping[str, str]) -> str:
    """NODE_LOG_LEVEL wins; otherwise info in production and debug elsewhere."""
    level = env.get("NODE_LOG_LEVEL")
    if level:
        return level
    return "info" if env.get("NODE_ENV") == "production" else "debug"


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[str] = None,
) -> StatsGenConfig:
    """
    Build configuration from environment variables.

    Args:
        environ: Mapping to read from. If None, a ``.env`` file (``env_file``
            or ``./.env``) is loaded into the process environment first and
            ``os.environ`` is used. Existing variables are never overridden.
        env_file: Optional path to a dotenv file.

    Returns:
        StatsGenConfig instance

    Raises:
        ConfigError: If a required variable is missing or a value is invalid.
    """
    if environ is None:
        load_dotenv(dotenv_path=env_file, override=False)
        environ = os.environ

    missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]
    if missing:
        raise ConfigError(
            f"One or more required environment variables are missing: {', '.join(missing)}"
        )

    level = _default_log_level(environ)
    if level not in LogLevel.names():
        raise ConfigError(
            f"Invalid log level: {level}. level can take: {', '.join(LogLevel.names())}"
        )

    postgres: Dict[str, Any] = {
        "host": environ["POSTGRES_HOST"],
        "database": environ["POSTGRES_DATABASE"],
        "user": environ["POSTGRES_USER"],
        "password": environ["POSTGRES_PASSWORD"],
    }
    # Optional overrides; pydantic coerces and validates the strings
    if environ.get("POSTGRES_PORT"):
        postgres["port"] = environ["POSTGRES_PORT"]
    if environ.get("POSTGRES_POOL_SIZE"):
        postgres["pool_size"] = environ["POSTGRES_POOL_SIZE"]
    if environ.get("POSTGRES_CONNECT_TIMEOUT"):
        postgres["connect_timeout"] = environ["POSTGRES_CONNECT_TIMEOUT"]

    try:
        return StatsGenConfig(
            postgres=PostgresConfig(**postgres),
            repositories=RepositoryConfig(
                v1_path=environ["REPOV1_PATH"],
                v2_path=environ["REPOV2_PATH"],
            ),
            log_level=level,
            json_logs=environ.get("NODE_ENV") == "production",
        )
    except ValidationError as e:
        # Render field errors without the offending input values (may hold secrets)
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e
