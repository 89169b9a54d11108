"""forkpool configuration.

This module provides the public API for loading and validating worker pool
configuration from Python or TOML files.

Example:
    >>> from pathlib import Path
    >>> from forkpool.config import load_config
    >>> config = load_config(Path("forkpool.conf.py"))
    >>> list(config.groups)
    ['default']
"""

from forkpool.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)

from ._dsl import ConfigDSL, load_python_config
from ._load import SUPPORTED_SUFFIXES, load_config, read_config_file
from ._loader import load_toml_config, read_toml_file, resolve_callbacks
from ._models import (
    CALLBACK_SETTINGS,
    DEFAULT_APP_PATH,
    DEFAULT_GROUP_NAME,
    DEFAULT_WORKER_COUNT,
    LogFormat,
    LoggingConfig,
    LogLevel,
    PoolCallbacks,
    PoolConfig,
    WorkerGroupConfig,
)
from ._validation import (
    ValidationIssue,
    build_config,
    raise_if_validation_errors,
    validate_config,
)

__all__ = [
    "CALLBACK_SETTINGS",
    "DEFAULT_APP_PATH",
    "DEFAULT_GROUP_NAME",
    "DEFAULT_WORKER_COUNT",
    "SUPPORTED_SUFFIXES",
    "ConfigDSL",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "PoolCallbacks",
    "PoolConfig",
    "ValidationIssue",
    "WorkerGroupConfig",
    "build_config",
    "load_config",
    "load_python_config",
    "load_toml_config",
    "raise_if_validation_errors",
    "read_config_file",
    "read_toml_file",
    "resolve_callbacks",
    "validate_config",
]
