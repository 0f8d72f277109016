"""
Logging setup for mama_gateway.

Two outputs under ``<data dir>/logs``, both attached by ``setup_mama_logging``:

- ``local-YYYY-MM-DD.log``: the ``mama_gateway`` logger hierarchy
- ``memory-events-YYYY-MM-DD.log``: one line per memory event (recall,
  capture candidate, checkpoint), for auditing what the gateway did
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from mama_gateway.config import get_data_dir

LOGGER_NAME = "mama_gateway"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

MEMORY_EVENTS_LOGGER_NAME = "mama_gateway.memory_events"
MEMORY_EVENTS_FORMAT = "%(asctime)s | %(message)s"
MEMORY_EVENTS_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _log_dir() -> Path:
    return get_data_dir() / "logs"


def setup_mama_logging(level: str = "INFO") -> logging.Logger:
    """Configure the package logger with a daily file handler.

    Also attaches the memory-events audit file, which stays off until this
    is called.

    Calling this more than once does not add duplicate handlers. DEBUG also
    logs to stderr. Unknown level names fall back to INFO.
    """
    root = logging.getLogger(LOGGER_NAME)
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    root.setLevel(numeric_level)

    log_dir = _log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"local-{datetime.now().strftime('%Y-%m-%d')}.log"
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(isinstance(h, logging.FileHandler) for h in root.handlers):
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    has_console = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in root.handlers
    )
    if numeric_level <= logging.DEBUG and not has_console:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(formatter)
        root.addHandler(console)

    _setup_memory_events(log_dir)

    return root


def _setup_memory_events(log_dir: Path) -> None:
    events = logging.getLogger(MEMORY_EVENTS_LOGGER_NAME)
    events.setLevel(logging.INFO)
    events.propagate = False
    if any(isinstance(h, logging.FileHandler) for h in events.handlers):
        return

    event_file = log_dir / f"memory-events-{datetime.now().strftime('%Y-%m-%d')}.log"
    handler = logging.FileHandler(event_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(MEMORY_EVENTS_FORMAT, MEMORY_EVENTS_DATE_FORMAT))
    events.addHandler(handler)


def log_memory_event(event_type: str, details: str) -> None:
    """Record one memory event on the audit logger.

    Nothing is written to disk until ``setup_mama_logging`` attaches the
    memory-events file; an embedding host can route the logger itself.
    """
    logging.getLogger(MEMORY_EVENTS_LOGGER_NAME).info("%s | %s", event_type, details)


def log_recall(semantic: int, recent: int, checkpoint: bool, compacted: bool = False) -> None:
    details = f"semantic={semantic}, recent={recent}, checkpoint={checkpoint}"
    if compacted:
        details += ", post-compaction"
    log_memory_event("recall", details)


def log_capture(candidate: str) -> None:
    log_memory_event("capture", f"candidate={candidate[:50]}")


def log_checkpoint(checkpoint_id, reason: str, summary_len: int = 0) -> None:
    log_memory_event(
        "checkpoint", f"id={checkpoint_id}, reason={reason}, summary_chars={summary_len}"
    )
