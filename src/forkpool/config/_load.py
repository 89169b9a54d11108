"""Configuration file dispatch."""

from pathlib import Path
from typing import Any

from forkpool.exceptions import ConfigLoadError

from ._dsl import load_python_config
from ._loader import load_toml_config
from ._models import PoolConfig
from ._validation import build_config

SUPPORTED_SUFFIXES = (".py", ".toml")


def read_config_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Read a configuration file into a raw, unvalidated dictionary.

    Args:
        path: Path to a ``.py`` or ``.toml`` configuration file.

    Returns:
        Raw configuration dictionary.

    Raises:
        ConfigLoadError: If the file is missing, has an unsupported type,
            or cannot be parsed.
        ConfigValidationError: If the file declares something invalid
            while loading (duplicate group, unresolvable callback).
    """
    if not path.is_file():
        msg = f"Config file not found: {path}"
        raise ConfigLoadError(msg, path=path)

    match path.suffix:
        case ".py":
            return load_python_config(path)
        case ".toml":
            return load_toml_config(path)
        case _:
            supported = ", ".join(SUPPORTED_SUFFIXES)
            msg = f"Unsupported config file type '{path.suffix}' (expected one of {supported})"
            raise ConfigLoadError(msg, path=path)


def load_config(path: Path) -> PoolConfig:
    """Load and validate a pool configuration file.

    Args:
        path: Path to a ``.py`` or ``.toml`` configuration file.

    Returns:
        The validated PoolConfig.

    Raises:
        ConfigLoadError: If the file cannot be read or parsed.
        ConfigValidationError: If the configuration is invalid.
    """
    data = read_config_file(path)
    return build_config(data, source=str(path))
