"""Structured logging for catalog-dedup runs.

Format comes from the CLI ``--log-format`` option or the CATALOG_DEDUP_LOG_FORMAT
env var: "text" (default) or "json". Engine log calls attach ``dedup_*`` extras
(record index, block, comparison counts) which the JSON formatter passes through.
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone

LOG_FORMAT_ENV = "CATALOG_DEDUP_LOG_FORMAT"
LOG_FORMATS = ("text", "json")
EXTRA_PREFIX = "dedup_"

_TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per line, carrying the dedup_* extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value) for key, value in vars(record).items() if key.startswith(EXTRA_PREFIX)
        )
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = "".join(traceback.format_exception(*record.exc_info))
        return json.dumps(entry, default=_json_default)


def _json_default(value):
    if isinstance(value, (tuple, set, frozenset)):
        return list(value)
    return str(value)


def setup_logging(log_format: str, level: int = logging.WARNING) -> None:
    """Route the root logger to stderr in the chosen format, replacing prior handlers."""
    if log_format not in LOG_FORMATS:
        raise ValueError(f"log format must be one of {', '.join(LOG_FORMATS)}, got {log_format!r}")

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if log_format == "json" else logging.Formatter(_TEXT_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
