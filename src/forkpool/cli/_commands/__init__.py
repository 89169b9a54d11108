"""forkpool CLI commands."""

from ._check import check_config, config_summary, verify_payload
from ._run import load_pool_config, run_pool
from ._shared import (
    ExitCode,
    FormattableData,
    OutputFormat,
    exit_with_error,
    format_json,
    get_error_console,
    print_json,
)

__all__ = [
    "ExitCode",
    "FormattableData",
    "OutputFormat",
    "check_config",
    "config_summary",
    "exit_with_error",
    "format_json",
    "get_error_console",
    "load_pool_config",
    "print_json",
    "run_pool",
    "verify_payload",
]
