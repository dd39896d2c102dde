"""Logging for ReliaSim runs.

Everything logs under the ``reliasim`` namespace. Engine and storage code
attach the run they are working on through ``extra``::

    logger.info("Run complete", extra={"seed": 7, "tick": 40})

The JSON formatter lifts those run-context keys into top-level fields so
log lines from many runs can be filtered by seed or run id.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

ROOT_LOGGER = "reliasim"

RUN_CONTEXT_FIELDS = ("run_id", "seed", "tick")

_TEXT_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"


class _JsonFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, run context."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in RUN_CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(
    level: int = logging.INFO,
    *,
    json_format: bool = False,
) -> logging.Logger:
    """Attach a stderr handler to the ``reliasim`` logger and return it.

    Only the first call installs a handler. Later calls just move the
    logger and its handler to *level*, so the CLI can call this freely.

    Args:
        level: Threshold such as ``logging.DEBUG``. Defaults to INFO.
        json_format: Emit :class:`_JsonFormatter` lines instead of text.

    Returns:
        The ``reliasim`` logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    # Run output stays off the root logger
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return ``reliasim.<name>``, e.g. ``get_logger("engine.circuit")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
