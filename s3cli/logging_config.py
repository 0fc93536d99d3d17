"""Structured logging configuration for s3cli.

Logs go to stderr; stdout carries command output only.
"""

from __future__ import annotations

import json
import sys
from typing import Any

from loguru import logger

DEFAULT_LEVEL = "WARNING"


class JSONFormatter:
    """One JSON object per log line; bound and keyword fields are merged in."""

    def __call__(self, record: dict[str, Any]) -> str:
        entry: dict[str, Any] = {
            "ts": record["time"].isoformat(),
            "level": record["level"].name,
            "msg": record["message"],
            "where": f"{record['name']}:{record['function']}:{record['line']}",
        }
        error = record.get("exception")
        if error and error.type:
            entry["error"] = f"{error.type.__name__}: {error.value}"
        entry.update(record.get("extra") or {})
        # returned text is a loguru template
        return json.dumps(entry, ensure_ascii=False, default=str).replace("{", "{{").replace("}", "}}") + "\n"


def setup_logging(*, level: str = DEFAULT_LEVEL, json_format: bool = False) -> None:
    """Configure logging for the command line.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Emit one JSON object per line instead of coloured text.
    """
    logger.remove()

    if json_format:
        formatter: Any = JSONFormatter()
    else:
        formatter = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )

    logger.add(
        sys.stderr,
        format=formatter,
        level=level.upper(),
        colorize=not json_format and sys.stderr.isatty(),
    )


__all__ = ["DEFAULT_LEVEL", "JSONFormatter", "setup_logging"]
