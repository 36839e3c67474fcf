"""Logging setup and helpers shared by the job components."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Union

from pythonjsonlogger.json import JsonFormatter as BaseJsonFormatter

from statsgen.enums import SILLY, LogLevel

if TYPE_CHECKING:
    from config.config import StatsGenConfig

logging.addLevelName(SILLY, "SILLY")


def resolve_log_level(level: Union[str, LogLevel]) -> int:
    """
    Convert a NODE_LOG_LEVEL style name to a stdlib logging level.

    Raises:
        ValueError: If the name is not one of error, warn, info, debug, silly
    """
    try:
        return LogLevel(level).to_logging_level()
    except ValueError:
        raise ValueError(
            f"Invalid log level: {level}. level can take: {', '.join(LogLevel.names())}"
        ) from None


class JsonFormatter(BaseJsonFormatter):
    """
    One JSON object per line, used in production.

    Records logged with exc_info get an ``error`` object holding the
    exception message, name and stack.
    """

    LEVEL_NAMES = {
        logging.ERROR: "error",
        logging.WARNING: "warn",
        logging.INFO: "info",
        logging.DEBUG: "debug",
        SILLY: "silly",
    }

    def __init__(self) -> None:
        super().__init__("%(message)s")

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_record["timestamp"] = created.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        log_record["level"] = self.LEVEL_NAMES.get(record.levelno, record.levelname.lower())
        log_record["logger"] = record.name

        # Replace the flat traceback text with a structured error
        log_record.pop("exc_info", None)
        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            log_record["error"] = {
                "message": str(exc),
                "name": type(exc).__name__,
                "stack": self.formatException(record.exc_info),
            }


def build_handler(config: "StatsGenConfig") -> logging.Handler:
    """Stream handler with the JSON or plain text formatter."""
    handler = logging.StreamHandler()
    if config.json_logs:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(config.log_format))
    return handler


def setup_logging(config: "StatsGenConfig") -> None:
    """Configure the root logger once at startup."""
    logging.basicConfig(
        level=resolve_log_level(config.log_level),
        handlers=[build_handler(config)],
    )


def set_log_level(level: Union[str, LogLevel]) -> None:
    """Change the root log level at runtime."""
    numeric = resolve_log_level(level)
    logging.getLogger().setLevel(numeric)
    logging.getLogger(__name__).warning(f"Setting log level to: {level}")


def _render(value: Any) -> str:
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value, default=str)
        except (TypeError, ValueError):
            return repr(value)
    return str(value)


def format_context(**fields: Any) -> str:
    """
    Render contextual fields as a log suffix.

    >>> format_context(host="db", port=5432)
    ' - host=db, port=5432'
    """
    if not fields:
        return ""
    return " - " + ", ".join(f"{key}={_render(value)}" for key, value in fields.items())
