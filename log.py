"""Structured JSON logging for the capacity estimator.

Estimates and sweeps log one JSON object per line on stderr (and in the
optional rotating file), tagged with the resource, tier and instance count
they concern, so a run can be filtered by any of them.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Extra attributes copied into the JSON entry when a call site supplies them.
_EXTRA_FIELDS = ("resource", "tier", "instances")


class JSONFormatter(logging.Formatter):
    """Render a record as one JSON line with the capacity extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val
        return json.dumps(entry, default=str)


def setup_logging(
    *,
    level: int = logging.INFO,
    json_output: bool = True,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """Configure the ``capacity`` logger.

    Parameters
    ----------
    level:
        Logging level.
    json_output:
        If *True*, use JSON formatting; otherwise plain text.
    log_file:
        Optional path to a log file.  When provided a
        :class:`~logging.handlers.RotatingFileHandler` is added
        alongside the console handler (10 MB max, 5 backups,
        always JSON-formatted).

    Returns
    -------
    logging.Logger
        The configured ``capacity`` logger; every ``capacity.*`` module
        logger propagates to it.
    """
    logger = logging.getLogger("capacity")
    logger.setLevel(level)
    logger.handlers.clear()

    formatter: logging.Formatter
    if json_output:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        )

    # Console handler; stdout carries command output, so logs go to stderr
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    return logger
