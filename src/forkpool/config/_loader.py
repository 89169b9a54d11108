# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""TOML configuration file loading.

A TOML pool configuration looks like::

    payload = "myapp.jobs:run_worker"
    preload_app = true

    [groups.mail]
    workers = 2
    queues = ["mail"]

    [callbacks]
    after_worker_boot = "myapp.pool:record_boot"

    [logging]
    level = "info"

Callbacks are entrypoint strings and are resolved when the file is loaded.
"""

import tomllib
from pathlib import Path
from typing import Any

from forkpool.exceptions import ConfigLoadError, ConfigValidationError
from forkpool.utils import load_callable

from ._models import CALLBACK_SETTINGS


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Read and parse a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed TOML content as dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file cannot be parsed.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file: {e}"
        raise ConfigLoadError(
            msg,
            path=path,
            line=e.lineno,
            column=e.colno,
        ) from e


def resolve_callbacks(
    callbacks: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    *,
    source: str | None = None,
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Resolve callback entrypoint strings into callables.

    Values that are already callable are kept as they are; unknown keys are
    left for validation to reject.

    Args:
        callbacks: Mapping of callback name to entrypoint string or callable.
        source: The config file path, used in error reports.

    Returns:
        A new mapping with every known callback resolved.

    Raises:
        ConfigValidationError: If an entrypoint cannot be resolved.
    """
    resolved: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    for name, value in callbacks.items():
        if name not in CALLBACK_SETTINGS or not isinstance(value, str):
            resolved[name] = value
            continue

        result = load_callable(value)
        if not result.success:
            msg = f"Cannot resolve callback '{name}': {result.error}"
            raise ConfigValidationError(
                msg,
                key=f"callbacks.{name}",
                value=value,
                expected="a 'module:function' entrypoint naming a callable",
                source=source,
            )
        resolved[name] = result.result
    return resolved


def load_toml_config(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Load a TOML pool configuration into a raw configuration dictionary.

    Args:
        path: Path to the TOML configuration file.

    Returns:
        Raw configuration dictionary ready for validation.

    Raises:
        ConfigLoadError: If the file cannot be parsed.
        ConfigValidationError: If a callback entrypoint cannot be resolved.
    """
    data = read_toml_file(path)

    callbacks = data.get("callbacks")
    if isinstance(callbacks, dict):
        data["callbacks"] = resolve_callbacks(callbacks, source=str(path))

    return data
