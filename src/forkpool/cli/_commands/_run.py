"""Run command: start the worker pool and supervise it until shutdown."""

from pathlib import Path

from rich.console import Console

from forkpool.config import ConfigLoadError, ConfigValidationError, PoolConfig, load_config
from forkpool.exceptions import ApplicationLoadError, PayloadError
from forkpool.pool import Supervisor
from forkpool.utils import create_pool_logger

from ._shared import ExitCode, exit_with_error


def load_pool_config(config_path: Path, *, error_console: Console | None = None) -> PoolConfig:
    """Load a configuration file, exiting with the matching code on failure.

    Args:
        config_path: Path to a ``.py`` or ``.toml`` configuration file.
        error_console: Console for error output.

    Returns:
        The validated PoolConfig.
    """
    try:
        return load_config(config_path)
    except ConfigLoadError as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR, console=error_console)
    except ConfigValidationError as e:
        exit_with_error(str(e), ExitCode.VALIDATION_ERROR, console=error_console)


def run_pool(config_path: Path, *, error_console: Console | None = None) -> None:
    """Start the pool described by a configuration file.

    Returns once every worker has exited after a shutdown signal. Failures
    are logged and mapped onto exit codes: 1 when the configuration, the
    application or the preloaded payload cannot be loaded, 2 when the
    configuration is invalid and 5 for anything else.

    Args:
        config_path: Path to a ``.py`` or ``.toml`` configuration file.
        error_console: Console for error output.
    """
    config = load_pool_config(config_path, error_console=error_console)
    logger = create_pool_logger(
        level=config.logging.level.value,
        log_format=config.logging.format.value,
        log_file=config.logging.file,
        max_bytes=config.logging.max_bytes,
        backup_count=config.logging.backup_count,
    )

    supervisor = Supervisor(config, logger=logger)
    try:
        supervisor.run()
    except (ApplicationLoadError, PayloadError) as e:
        logger.error("master_failed", error=str(e))
        exit_with_error(str(e), ExitCode.LOAD_ERROR, console=error_console)
    except Exception as e:
        # Fork failures and master-side callback errors
        logger.exception("master_failed", error=str(e))
        exit_with_error(str(e), ExitCode.INTERNAL_ERROR, console=error_console)
