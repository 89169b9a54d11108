"""forkpool exceptions."""

from pathlib import Path
from typing import Any


class ForkpoolError(Exception):
    """Base exception for forkpool errors."""


class ConfigError(ForkpoolError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source


# =============================================================================
# Registry Exceptions
# =============================================================================


class RegistryError(ForkpoolError):
    """Base exception for worker registry errors.

    Registry errors mean the supervisor's own bookkeeping is inconsistent.
    They are never recovered from.
    """


class GroupAlreadyExistsError(RegistryError, ValueError):
    """Raised when a worker group is registered twice.

    Attributes:
        group_name: The name of the group that already exists.
    """

    def __init__(self, message: str, *, group_name: str | None = None) -> None:
        """Initialize with error message and group context.

        Args:
            message: Human-readable error message.
            group_name: The name of the group that already exists.
        """
        super().__init__(message)
        self.group_name: str | None = group_name


class GroupDoesNotExistError(RegistryError, KeyError):
    """Raised when an operation names a group that was never registered.

    Attributes:
        group_name: The name of the group that was not found.
    """

    def __init__(self, message: str, *, group_name: str | None = None) -> None:
        """Initialize with error message and group context.

        Args:
            message: Human-readable error message.
            group_name: The name of the group that was not found.
        """
        super().__init__(message)
        self.group_name: str | None = group_name


class WorkerAlreadyRegisteredError(RegistryError, ValueError):
    """Raised when a pid is added while another group already tracks it.

    Attributes:
        pid: The process ID that is already tracked.
        group_name: The group that tracks it.
    """

    def __init__(
        self,
        message: str,
        *,
        pid: int | None = None,
        group_name: str | None = None,
    ) -> None:
        """Initialize with error message and process context.

        Args:
            message: Human-readable error message.
            pid: The process ID that is already tracked.
            group_name: The group that tracks it.
        """
        super().__init__(message)
        self.pid: int | None = pid
        self.group_name: str | None = group_name


class GroupNotFoundError(RegistryError, KeyError):
    """Raised when no group tracks the given worker pid.

    Attributes:
        pid: The process ID that is not tracked by any group.
    """

    def __init__(self, message: str, *, pid: int | None = None) -> None:
        """Initialize with error message and process context.

        Args:
            message: Human-readable error message.
            pid: The process ID that is not tracked by any group.
        """
        super().__init__(message)
        self.pid: int | None = pid


# =============================================================================
# Pool Exceptions
# =============================================================================


class PoolError(ForkpoolError):
    """Base exception for worker pool errors."""


class ApplicationLoadError(PoolError):
    """Raised when the host application cannot be loaded.

    Attributes:
        path: The application boot file that was expected.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and application context.

        Args:
            message: Human-readable error message.
            path: The application boot file that was expected.
            cause: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.path: Path | None = path
        self.cause: Exception | None = cause


class PayloadError(PoolError):
    """Raised when the job worker payload cannot be resolved.

    Attributes:
        entrypoint: The entrypoint string that failed to resolve.
    """

    def __init__(self, message: str, *, entrypoint: str | None = None) -> None:
        """Initialize with error message and entrypoint context.

        Args:
            message: Human-readable error message.
            entrypoint: The entrypoint string that failed to resolve.
        """
        super().__init__(message)
        self.entrypoint: str | None = entrypoint


class InvalidStateError(PoolError):
    """Raised when the supervisor is driven from an unexpected state.

    Attributes:
        state: The state the supervisor was in.
    """

    def __init__(self, message: str, *, state: str | None = None) -> None:
        """Initialize with error message and state context.

        Args:
            message: Human-readable error message.
            state: The state the supervisor was in.
        """
        super().__init__(message)
        self.state: str | None = state
