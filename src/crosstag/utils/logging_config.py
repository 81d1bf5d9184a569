"""
Logging configuration for CrossTag.

Library modules only call ``logging.getLogger(__name__)``. The CLI calls
``initialize_logging`` once, which attaches a console handler to the root
logger and, when enabled, a per-day log file under ``LOG_DIR``. Batch
operations (imports, browser ingestion, derived-data recomputes) report
through ``log_task_start``/``log_task_end`` and ``PerformanceMonitor``.
"""

from collections.abc import Mapping
from datetime import datetime
import logging
import logging.handlers
import os
from pathlib import Path
import sys
import time
from typing import Any

# -------------------- Configuration --------------------


LOG_DIR = Path.home() / ".cache" / "crosstag" / "logs"

LOG_RETENTION_DAYS = 3

LOG_FILE_PREFIX = "crosstag-"

CONSOLE_FORMAT = "%(name)s %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# -------------------- Utility Functions --------------------


def resolve_log_level(explicit: str | None = None) -> int:
    """
    Pick the log level for this run.

    An explicit ``--log-level`` wins, then ``CROSSTAG_LOG_LEVEL``, then
    ``LOG_LEVEL``. Unknown names fall back to INFO.
    """
    for candidate in (
        explicit,
        os.getenv("CROSSTAG_LOG_LEVEL"),
        os.getenv("LOG_LEVEL"),
    ):
        name = (candidate or "").strip().upper()
        if name in _LEVEL_NAMES:
            return getattr(logging, name)
    return logging.INFO


def daily_log_file(moment: datetime | None = None) -> Path:
    """Path of the log file for the given day (today by default)."""
    day = (moment or datetime.now()).strftime("%Y-%m-%d")
    return LOG_DIR / f"{LOG_FILE_PREFIX}{day}.log"


def cleanup_old_logs(retention_days: int = LOG_RETENTION_DAYS) -> int:
    """
    Remove CrossTag log files older than ``retention_days``.

    Returns:
        Number of files removed
    """
    if not LOG_DIR.exists():
        return 0

    cutoff = time.time() - retention_days * 24 * 60 * 60
    removed = 0
    try:
        for log_file in LOG_DIR.glob(f"{LOG_FILE_PREFIX}*.log"):
            if log_file.stat().st_mtime < cutoff:
                log_file.unlink()
                removed += 1
    except OSError as e:
        logging.getLogger(__name__).warning(f"Failed to cleanup old logs: {e}")

    return removed


# -------------------- Initialization --------------------


def initialize_logging(level: int | None = None, log_to_file: bool = False) -> None:
    """
    Configure the root logger for a CLI run.

    Args:
        level: Log level; defaults to ``resolve_log_level()``
        log_to_file: Also write to today's file under ``LOG_DIR`` and
            prune files past the retention window
    """
    resolved = level or resolve_log_level()
    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(resolved)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            daily_log_file(),
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=2,
            encoding="utf-8",
        )
        file_handler.setLevel(resolved)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
        root_logger.addHandler(file_handler)
        removed = cleanup_old_logs()
        if removed:
            logging.getLogger(__name__).debug(f"Removed {removed} old log files")

    logging.getLogger(__name__).debug(
        f"Logging initialized. Level: {logging.getLevelName(resolved)}"
    )


# -------------------- Task Summaries --------------------


def _format_counters(counters: Mapping[str, Any]) -> str:
    """Flatten counters into ``key=value`` pairs, e.g. ``imported.tags=2``."""
    parts = []
    for key, value in counters.items():
        if isinstance(value, Mapping):
            parts.extend(f"{key}.{sub}={count}" for sub, count in value.items())
        else:
            parts.append(f"{key}={value}")
    return " ".join(parts)


def log_task_start(logger: logging.Logger, task_name: str, **context: Any) -> None:
    """Log the start of a batch operation together with its inputs."""
    suffix = f" ({_format_counters(context)})" if context else ""
    logger.info(f"▶️ {task_name} started{suffix}")


def log_task_end(
    logger: logging.Logger,
    task_name: str,
    processed: int,
    **counters: Any,
) -> None:
    """
    Log a one-line summary of a finished batch operation.

    Args:
        logger: Logger instance
        task_name: Name of the task
        processed: Entities read from the source
        **counters: Per-outcome counts; nested maps are flattened
            (``imported={"tags": 2}`` becomes ``imported.tags=2``)
    """
    summary = _format_counters({"processed": processed, **counters})
    logger.info(f"✅ {task_name} finished: {summary}")


# -------------------- Performance Monitoring --------------------


class PerformanceMonitor:
    """
    Context manager timing a recompute over the library.

    Entity counts passed as keyword arguments are included in the log
    line. Failures are logged at WARNING and re-raised.

    Example:
        >>> with PerformanceMonitor(logger, "Derived data recompute", bookmarks=3):
        ...     recompute_tag_aggregates(bookmarks, tags)
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation_name: str,
        log_level: int = logging.DEBUG,
        **counts: int,
    ) -> None:
        self.logger = logger
        self.operation_name = operation_name
        self.log_level = log_level
        self.counts = counts
        self.elapsed_ms: float | None = None
        self._started: float | None = None

    def __enter__(self) -> "PerformanceMonitor":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._started is None:
            return

        self.elapsed_ms = (time.perf_counter() - self._started) * 1000
        details = f" ({_format_counters(self.counts)})" if self.counts else ""

        if exc_type is not None:
            self.logger.warning(
                f"{self.operation_name} failed after {self.elapsed_ms:.1f}ms"
                f"{details}: {exc_val}"
            )
            return

        self.logger.log(
            self.log_level,
            f"{self.operation_name} took {self.elapsed_ms:.1f}ms{details}",
        )
