"""Logging configuration using Loguru.

Library modules import ``logger`` from here and only emit records; entry
points call :func:`configure_logging` once to install the sink.

Usage:
    from core.log import logger
    logger.info("Message")
"""

import json
import sys

from loguru import logger

_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)


def _stderr_sink(message):
    sys.stderr.write(message)
    sys.stderr.flush()


def _json_sink(message):
    """Write one NDJSON record per log call to stderr."""
    record = message.record
    payload = {
        "level": record["level"].name,
        "time": record["time"].isoformat(),
        "msg": record["message"],
        "module": record["name"],
    }
    payload.update(record["extra"])
    if record["exception"]:
        exc = record["exception"]
        payload["err"] = {
            "type": exc.type.__name__ if exc.type else "Error",
            "message": str(exc.value) if exc.value else "",
        }
    # Never call logger.* inside a sink
    sys.stderr.write(json.dumps(payload, default=str) + "\n")
    sys.stderr.flush()


def configure_logging(level: str = "INFO", json_output: bool = False) -> int:
    """Replace existing handlers with a single stderr sink.

    Returns:
        The loguru handler id.
    """
    logger.remove()
    level = level.upper()
    if json_output:
        return logger.add(_json_sink, level=level, colorize=False)
    return logger.add(_stderr_sink, level=level, format=_human_format, colorize=sys.stderr.isatty())


__all__ = ["configure_logging", "logger"]
