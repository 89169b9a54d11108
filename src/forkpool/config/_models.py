"""Configuration models for the worker pool.

This module defines the frozen Pydantic models produced by the
configuration loaders:
- LogLevel / LogFormat: Logging enums
- LoggingConfig: Logging section
- WorkerGroupConfig: One named group of identical workers
- PoolCallbacks: Optional lifecycle hooks
- PoolConfig: The complete, validated pool configuration
"""

from collections.abc import Callable
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Self, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

from forkpool.utils import parse_entrypoint

DEFAULT_WORKER_COUNT = 1
DEFAULT_APP_PATH = Path("config/environment.py")
DEFAULT_GROUP_NAME = "default"

# Keys of WorkerGroupConfig that describe the group rather than the payload
GROUP_SETTINGS = frozenset({"name", "workers"})

WorkerCallback: TypeAlias = Callable[..., object]
Payload: TypeAlias = str | Callable[..., object]


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
        max_bytes: Rotate the log file after this many bytes.
        backup_count: Number of rotated log files to keep.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""
    max_bytes: PositiveInt | None = None
    backup_count: PositiveInt | None = None


class WorkerGroupConfig(BaseModel):
    """Configuration for one named group of workers.

    Everything except ``name`` and ``workers`` is handed to the job worker
    payload. The well-known payload options are typed; any other key is
    accepted and passed through untouched.

    Attributes:
        name: Unique group name.
        workers: Number of worker processes to keep running.
        queues: Queue names the workers should pull from.
        min_priority: Lowest job priority the workers run.
        max_priority: Highest job priority the workers run.
        sleep_delay: Seconds a worker sleeps when no job is available.
        read_ahead: Number of jobs read from the queue at a time.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="allow")

    name: str = Field(min_length=1)
    workers: PositiveInt = DEFAULT_WORKER_COUNT
    queues: list[str] | None = None
    min_priority: int | None = None
    max_priority: int | None = None
    sleep_delay: float | None = None
    read_ahead: int | None = None

    def payload_options(self) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Return the options bag for the job worker payload.

        Options left as None are dropped so the payload applies its own
        defaults.
        """
        return self.model_dump(exclude=set(GROUP_SETTINGS), exclude_none=True)


class PoolCallbacks(BaseModel):
    """Optional lifecycle callbacks.

    ``after_preload_app`` takes no arguments. The worker callbacks receive
    the WorkerIdentity of the worker concerned. ``on_worker_boot`` runs
    inside the worker process; the others run in the master.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    after_preload_app: WorkerCallback | None = None
    on_worker_boot: WorkerCallback | None = None
    after_worker_boot: WorkerCallback | None = None
    after_worker_shutdown: WorkerCallback | None = None


CALLBACK_SETTINGS: tuple[str, ...] = tuple(PoolCallbacks.model_fields)


class PoolConfig(BaseModel):
    """Complete worker pool configuration.

    Attributes:
        groups: Worker groups keyed by name, in declaration order.
        payload: Job worker entrypoint ("module:function") or callable.
        preload_app: Load the application in the master before forking.
        app_path: Application boot file, relative to the working directory.
        logging: Logging settings.
        callbacks: Lifecycle callbacks.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    groups: dict[str, WorkerGroupConfig]
    payload: Payload
    preload_app: bool = False
    app_path: Path = DEFAULT_APP_PATH
    logging: LoggingConfig = LoggingConfig()
    callbacks: PoolCallbacks = PoolCallbacks()

    @model_validator(mode="before")
    @classmethod
    def _name_groups(cls, data: Any) -> Any:  # pyright: ignore[reportExplicitAny, reportAny]
        """Fill each group's name from its key when the table omits it."""
        if isinstance(data, dict):
            groups = data.get("groups")  # pyright: ignore[reportUnknownMemberType, reportUnknownVariableType]
            if isinstance(groups, dict):
                named: dict[object, object] = {}
                for key, value in groups.items():  # pyright: ignore[reportUnknownVariableType]
                    if isinstance(value, dict) and "name" not in value:
                        value = {**value, "name": key}  # noqa: PLW2901
                    named[key] = value
                return {**data, "groups": named}
        return data  # pyright: ignore[reportUnknownVariableType]

    @model_validator(mode="after")
    def _check_groups(self) -> Self:
        if not self.groups:
            msg = "At least one worker group must be defined"
            raise ValueError(msg)
        for key, group in self.groups.items():
            if key != group.name:
                msg = f"Group key '{key}' does not match group name '{group.name}'"
                raise ValueError(msg)
        if isinstance(self.payload, str) and parse_entrypoint(self.payload) is None:
            msg = f"Payload must be a 'module:function' entrypoint, got '{self.payload}'"
            raise ValueError(msg)
        return self

    @property
    def worker_total(self) -> int:
        """Return the number of workers across all groups."""
        return sum(group.workers for group in self.groups.values())
