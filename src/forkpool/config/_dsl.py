# pyright: reportExplicitAny=false, reportAny=false
"""Python configuration file support.

A Python pool configuration is an ordinary module executed with a small set
of declaration helpers already in scope::

    worker_group("mail", workers=2, queues=["mail"], sleep_delay=0.5)
    worker_group("reports", queues=["reports"])

    preload_app()
    payload("myapp.jobs:run_worker")

    @after_worker_boot
    def record_boot(worker):
        print(f"booted {worker.name}")

The helpers only record declarations; nothing is validated until the whole
file has run and the collected dictionary is handed to build_config().
"""

import importlib.util
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, final

from forkpool.exceptions import ConfigError, ConfigLoadError, ConfigValidationError

from ._models import CALLBACK_SETTINGS, DEFAULT_GROUP_NAME

CONFIG_MODULE_NAME = "forkpool_config"


@final
class ConfigDSL:
    """Collects declarations made by a Python configuration file.

    Each public method is exposed to the configuration file under its own
    name. Callback declarations are decorators that return the function
    unchanged, so the file can still call its own callbacks.
    """

    __slots__ = ("_callbacks", "_data", "_groups", "_source")

    def __init__(self, source: str | None = None) -> None:
        """Initialize an empty declaration set.

        Args:
            source: The config file path, used in error reports.
        """
        self._source = source
        self._groups: dict[str, dict[str, Any]] = {}
        self._callbacks: dict[str, Callable[..., object]] = {}
        self._data: dict[str, Any] = {}

    def worker_group(self, name: str = DEFAULT_GROUP_NAME, /, **settings: Any) -> None:
        """Declare a worker group.

        Args:
            name: Unique group name.
            **settings: ``workers`` plus any payload options. Options set to
                None are ignored.

        Raises:
            ConfigValidationError: If the group was already declared.
        """
        if name in self._groups:
            msg = f"Worker group '{name}' is declared more than once"
            raise ConfigValidationError(
                msg,
                key=f"groups.{name}",
                value=name,
                expected="unique group names",
                source=self._source,
            )
        group: dict[str, Any] = {"name": name}
        group.update({key: value for key, value in settings.items() if value is not None})
        self._groups[name] = group

    def preload_app(self, enabled: bool = True) -> None:  # noqa: FBT001, FBT002
        """Load the application in the master before forking workers."""
        self._data["preload_app"] = enabled

    def app_path(self, path: str | Path) -> None:
        """Set the application boot file."""
        self._data["app_path"] = path

    def payload[F: Callable[..., object]](self, target: str | F) -> str | F:
        """Set the job worker payload.

        Accepts a ``"module:function"`` entrypoint or a callable. Usable as a
        decorator on a function defined in the configuration file.
        """
        self._data["payload"] = target
        return target

    def log_level(self, level: str) -> None:
        """Set the log level (debug, info, warning, error)."""
        self._data.setdefault("logging", {})["level"] = level

    def log_format(self, log_format: str) -> None:
        """Set the log format (json or text)."""
        self._data.setdefault("logging", {})["format"] = log_format

    def log_file(
        self,
        path: str | Path,
        *,
        max_bytes: int | None = None,
        backup_count: int | None = None,
    ) -> None:
        """Log to a file instead of stderr, optionally rotating it."""
        settings = self._data.setdefault("logging", {})
        settings["file"] = str(path)
        if max_bytes is not None:
            settings["max_bytes"] = max_bytes
        if backup_count is not None:
            settings["backup_count"] = backup_count

    def _callback_decorator(self, name: str) -> Callable[[Callable[..., object]], Callable[..., object]]:
        def register(func: Callable[..., object]) -> Callable[..., object]:
            self._callbacks[name] = func
            return func

        register.__name__ = name
        return register

    def namespace(self) -> dict[str, object]:
        """Return the names injected into the configuration module."""
        names: dict[str, object] = {
            "worker_group": self.worker_group,
            "preload_app": self.preload_app,
            "app_path": self.app_path,
            "payload": self.payload,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "log_file": self.log_file,
        }
        for name in CALLBACK_SETTINGS:
            names[name] = self._callback_decorator(name)
        return names

    def to_dict(self) -> dict[str, Any]:
        """Return the collected declarations as a raw configuration dictionary."""
        data: dict[str, Any] = dict(self._data)
        data["groups"] = {name: dict(group) for name, group in self._groups.items()}
        if self._callbacks:
            data["callbacks"] = dict(self._callbacks)
        return data


def load_python_config(path: Path) -> dict[str, Any]:
    """Execute a Python configuration file and collect its declarations.

    Args:
        path: Path to the Python configuration file.

    Returns:
        Raw configuration dictionary ready for validation.

    Raises:
        ConfigLoadError: If the file cannot be compiled or raises while running.
        ConfigValidationError: If the file declares something twice.
    """
    dsl = ConfigDSL(source=str(path))

    spec = importlib.util.spec_from_file_location(CONFIG_MODULE_NAME, path)
    if spec is None or spec.loader is None:
        msg = f"Could not load configuration from {path}"
        raise ConfigLoadError(msg, path=path)

    module = importlib.util.module_from_spec(spec)
    module.__dict__.update(dsl.namespace())
    sys.modules[CONFIG_MODULE_NAME] = module

    try:
        spec.loader.exec_module(module)
    except SyntaxError as e:
        msg = f"Failed to parse configuration file: {e.msg}"
        raise ConfigLoadError(msg, path=path, line=e.lineno, column=e.offset) from e
    except ConfigError:
        raise
    except Exception as e:
        msg = f"Error while evaluating configuration file: {e}"
        raise ConfigLoadError(msg, path=path) from e

    return dsl.to_dict()
