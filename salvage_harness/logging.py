"""
Logging setup for the salvage harness.

Diagnostics go to stderr so a successful run stays silent on stdout. Each
record carries the run ID, which is what ties a failure in CI output back to
the snapshot it left behind. ``--json-logs`` switches to one JSON object per
line for log collectors.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import UTC, datetime

# Run ID of the harness run in progress, if any
current_run_id: ContextVar[str | None] = ContextVar("current_run_id", default=None)

TEXT_FORMAT = "%(timestamp)s | %(levelname)-8s | %(name)s | %(run_prefix)s%(message)s"


class HarnessFormatter(logging.Formatter):
    """
    Formats harness records as text lines or as JSON objects.

    Text mode prefixes the message with ``[run_id]`` when a run is active.
    JSON mode serialises timestamp, level, module, run_id and message (plus
    the traceback, when there is one) with ``json.dumps``, so quotes and
    backslashes in engine errors or paths cannot break the line.
    """

    def __init__(self, fmt: str | None = TEXT_FORMAT, json_output: bool = False) -> None:
        super().__init__(fmt)
        self.json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, UTC).isoformat()
        run_id = current_run_id.get()

        if not self.json_output:
            record.timestamp = timestamp
            record.run_prefix = f"[{run_id}] " if run_id else ""
            return super().format(record)

        entry: dict[str, str | None] = {
            "timestamp": timestamp,
            "level": record.levelname,
            "module": record.name,
            "run_id": run_id,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(level: str = "WARNING", json_output: bool = False) -> logging.Logger:
    """
    Install the harness handler on the root logger.

    Args:
        level: Level name, case-insensitive; unknown names fall back to WARNING
        json_output: Emit one JSON object per line instead of text

    Returns:
        The root logger
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(HarnessFormatter(json_output=json_output))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(numeric_level)
    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_run_id(run_id: str) -> None:
    current_run_id.set(run_id)


def clear_run_id() -> None:
    current_run_id.set(None)
