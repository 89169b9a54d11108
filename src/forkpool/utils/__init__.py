"""Shared utilities for forkpool."""

from ._exec import (
    EntrypointResult,
    LoadedCallable,
    load_callable,
    parse_entrypoint,
)
from ._logging import LogFormatType, MasterRotatingFileHandler, create_pool_logger

__all__ = [
    "EntrypointResult",
    "LoadedCallable",
    "LogFormatType",
    "MasterRotatingFileHandler",
    "create_pool_logger",
    "load_callable",
    "parse_entrypoint",
]
