from __future__ import annotations

import logging
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog


@dataclass
class LogRecordEntry:
    logger_name: str
    level: int
    level_name: str
    message: str
    created: float


class LogManager:
    def __init__(self, max_entries: Optional[int] = None) -> None:
        self._max_entries = max_entries
        self._records: list[LogRecordEntry] = []

    def add_record(self, record: logging.LogRecord) -> None:
        entry = LogRecordEntry(
            logger_name=record.name,
            level=record.levelno,
            level_name=record.levelname,
            message=record.getMessage(),
            created=record.created,
        )
        self._records.append(entry)
        if self._max_entries is not None and len(self._records) > self._max_entries:
            overflow = len(self._records) - self._max_entries
            if overflow > 0:
                del self._records[0:overflow]

    def get_records(self) -> list[LogRecordEntry]:
        return list(self._records)

    def find(self, event: str) -> list[LogRecordEntry]:
        return [record for record in self._records if event in record.message]

    def clear(self) -> None:
        self._records.clear()


class _InMemoryLogHandler(logging.Handler):
    def __init__(self, manager: LogManager) -> None:
        super().__init__()
        self._manager = manager

    def emit(self, record: logging.LogRecord) -> None:
        self._manager.add_record(record)


_log_manager: Optional[LogManager] = None
_log_handler: Optional[_InMemoryLogHandler] = None


def init_log_manager(max_entries: Optional[int] = None) -> LogManager:
    """Capture every record reaching the ``ctxassist`` logger in memory."""
    global _log_manager, _log_handler
    if _log_manager is None:
        _log_manager = LogManager(max_entries=max_entries)
        _log_handler = _InMemoryLogHandler(_log_manager)

    package_logger = logging.getLogger("ctxassist")
    if _log_handler is not None and _log_handler not in package_logger.handlers:
        package_logger.addHandler(_log_handler)
    if package_logger.level == logging.NOTSET:
        package_logger.setLevel(logging.DEBUG)
    return _log_manager


def get_log_manager() -> Optional[LogManager]:
    return _log_manager


def configure_logging(level: str = "warning", log_file: Path | None = None) -> None:
    """Set the package log level and, optionally, mirror records to a file.

    Interactive sessions must not write to the terminal they draw on, so
    stream handlers bound to stdout/stderr are dropped when a file is given.
    """
    package_logger = logging.getLogger("ctxassist")
    package_logger.setLevel(level.upper())
    if log_file is None:
        return

    for handler in list(package_logger.handlers):
        if isinstance(handler, logging.StreamHandler) and getattr(
            handler, "stream", None
        ) in (sys.stdout, sys.stderr):
            package_logger.removeHandler(handler)

    file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(file_handler)
    package_logger.propagate = False

    def _showwarning(
        message: warnings.WarningMessage | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: object | None = None,
        line: str | None = None,
    ) -> None:
        text = warnings.formatwarning(message, category, filename, lineno, line)
        package_logger.warning(text.strip())

    warnings.showwarning = _showwarning


structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.dev.ConsoleRenderer(colors=False),
    ],
)

logger: structlog.BoundLogger = structlog.get_logger("ctxassist")
