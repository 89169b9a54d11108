"""Logging utilities for forkpool.

This module provides standalone structlog logger factories that write
JSON-formatted or text-formatted logs to stderr or to a log file. Each
logger is self-contained and does not modify global structlog configuration,
so a host application loaded into the pool keeps its own logging setup.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TextIO, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

LogFormatType = Literal["json", "text"]


class MasterRotatingFileHandler(RotatingFileHandler):
    """Size-based rotating file handler that only its creating process rotates.

    Forked workers inherit the handler along with the pool logger. If every
    process rotated the shared file on its own, rotated segments would be
    renamed over each other. Workers therefore never roll over; once the
    master has rotated the file away, a worker reopens the path and keeps
    appending to the new file.
    """

    def __init__(self, filename: str | Path, *, max_bytes: int, backup_count: int) -> None:
        """Open the log file in append mode.

        Args:
            filename: Path of the log file.
            max_bytes: Rotate once the file would grow beyond this size.
            backup_count: Number of rotated files to keep.
        """
        super().__init__(filename, maxBytes=max_bytes, backupCount=backup_count)
        self.owner_pid: int = os.getpid()

    def shouldRollover(self, record: logging.LogRecord) -> bool:  # noqa: N802
        if os.getpid() == self.owner_pid:
            return bool(super().shouldRollover(record))
        self._reopen_if_rotated()
        return False

    def _reopen_if_rotated(self) -> None:
        if self.stream is None:  # pyright: ignore[reportUnnecessaryComparison]
            return
        try:
            on_disk = os.stat(self.baseFilename)
        except FileNotFoundError:
            on_disk = None
        opened = os.fstat(self.stream.fileno())
        if on_disk is not None and os.path.samestat(on_disk, opened):
            return

        self.stream.close()
        self.stream = self._open()


def _get_log_level() -> int:
    """Get the log level from environment variables.

    Checks FORKPOOL_DEBUG first (sets DEBUG if present), then
    FORKPOOL_LOG_LEVEL. Defaults to INFO if neither is set.

    Returns:
        The logging level as an integer.
    """
    if os.getenv("FORKPOOL_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(os.getenv("FORKPOOL_LOG_LEVEL", "info").upper(), logging.INFO)


def _log_level_from_string(level: str, *, respect_env: bool = False) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, FORKPOOL_DEBUG overrides to DEBUG level.

    Returns:
        The logging level as an integer.
    """
    if respect_env and os.getenv("FORKPOOL_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def _create_logger(
    log_file_path: str | None = None,
    *,
    stream: TextIO | None = None,
    log_level: int | None = None,
    log_format: LogFormatType = "json",
    max_bytes: int | None = None,
    backup_count: int | None = None,
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger.

    Writes to ``log_file_path`` when given (opened in append mode), otherwise
    to ``stream`` (stderr by default).

    Args:
        log_file_path: Path to the log file.
        stream: Text stream to write to when no file is given.
        log_level: Override log level (uses env vars if not specified).
        log_format: Output format, either "json" or "text".
        max_bytes: Maximum size in bytes before rotation. Must be set with
            backup_count for rotation to be enabled.
        backup_count: Number of rotated log files to keep. Must be set with
            max_bytes for rotation to be enabled.

    Returns:
        A configured FilteringBoundLogger instance.
    """
    effective_level = log_level if log_level is not None else _get_log_level()

    stdlib_logger: logging.Logger | None = None
    raw_logger: object
    if log_file_path:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        if max_bytes is not None and backup_count is not None:
            # Rotation goes through stdlib logging so the handler owns the file.
            # Forked workers share it, but only the master rotates.
            stdlib_logger = logging.getLogger(f"forkpool.{log_path.stem}.{id(log_path)}")
            stdlib_logger.handlers.clear()
            stdlib_logger.propagate = False
            stdlib_logger.setLevel(effective_level)

            handler = MasterRotatingFileHandler(
                log_path,
                max_bytes=max_bytes,
                backup_count=backup_count,
            )
            handler.setLevel(effective_level)
            handler.setFormatter(logging.Formatter("%(message)s"))
            stdlib_logger.addHandler(handler)
            raw_logger = stdlib_logger
        else:
            raw_logger = structlog.WriteLoggerFactory(file=log_path.open("a"))()
    else:
        raw_logger = structlog.WriteLoggerFactory(file=stream or sys.stderr)()

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    wrapper_class = structlog.make_filtering_bound_logger(effective_level)

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            raw_logger,
            processors=processors,
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )


def create_pool_logger(
    *,
    level: str | None = None,
    log_format: LogFormatType = "json",
    log_file: str = "",
    max_bytes: int | None = None,
    backup_count: int | None = None,
    stream: TextIO | None = None,
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create the logger shared by the pool master and its workers.

    The log level is determined by (in order of precedence):
    1. FORKPOOL_DEBUG environment variable (if set, enables DEBUG level)
    2. The `level` parameter (if provided)
    3. FORKPOOL_LOG_LEVEL environment variable
    4. Default: INFO

    Workers inherit this logger through fork, so every entry written by the
    master and the workers lands in the same destination. The logger binds
    ``role="master"``; workers rebind their own context after fork.

    Args:
        level: Optional log level string (debug, info, warning, error).
        log_format: Output format, either "json" or "text".
        log_file: Path to log file (stderr is used if empty).
        max_bytes: Maximum size in bytes before rotation.
        backup_count: Number of rotated log files to keep.
        stream: Stream to write to when no file is configured.

    Returns:
        A FilteringBoundLogger instance configured for pool logging.
    """
    effective_level: int | None = None
    if level is not None:
        effective_level = _log_level_from_string(level, respect_env=True)

    logger = _create_logger(
        log_file or None,
        stream=stream,
        log_level=effective_level,
        log_format=log_format,
        max_bytes=max_bytes,
        backup_count=backup_count,
    )
    return logger.bind(role="master")
