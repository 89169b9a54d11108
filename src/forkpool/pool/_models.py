"""Data models for the worker pool.

This module defines the core value types of the supervisor:
- PoolState: Lifecycle states of the master process
- WorkerIdentity: Immutable description of one forked worker
- ExitStatus: Decoded wait status of a reaped worker
"""

import os
import signal
import socket
from dataclasses import dataclass
from enum import StrEnum
from typing import Self


class PoolState(StrEnum):
    """Master process lifecycle states.

    States are only ever entered in declaration order:
    - STARTING: Installing signal handlers, preloading, forking workers
    - RUNNING: Monitoring workers and replacing the ones that exit
    - SHUTTING_DOWN: Shutdown signal forwarded, reaping without restarts
    - TERMINATED: All workers gone and descriptors released
    """

    STARTING = "starting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


def worker_name(pid: int, group: str, *, hostname: str | None = None) -> str:
    """Build the display name of a worker.

    The name is unique on one machine at any point in time because pids are.

    Args:
        pid: Process ID of the worker.
        group: Name of the worker's group.
        hostname: Host identifier. Defaults to this machine's hostname.

    Returns:
        A name of the form ``host:<hostname> pid:<pid> group:<group>``.
    """
    host = hostname if hostname is not None else socket.gethostname()
    return f"host:{host} pid:{pid} group:{group}"


@dataclass(frozen=True, slots=True)
class WorkerIdentity:
    """Immutable identity of a forked worker.

    Passed to the worker lifecycle callbacks.

    Attributes:
        pid: Process ID of the worker.
        name: Display name, also handed to the job worker payload.
        group: Name of the group the worker belongs to.
    """

    pid: int
    name: str
    group: str

    @classmethod
    def for_worker(
        cls,
        pid: int,
        group: str,
        *,
        hostname: str | None = None,
    ) -> Self:
        """Create the identity of a worker from its pid and group."""
        return cls(pid=pid, name=worker_name(pid, group, hostname=hostname), group=group)


def signal_name(signum: int) -> str:
    """Return a symbolic name for a signal number."""
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


@dataclass(frozen=True, slots=True)
class ExitStatus:
    """Decoded status of a reaped child process.

    Attributes:
        pid: Process ID of the child.
        exit_code: Exit code, or None if the child was killed by a signal.
        signal: Name of the signal that killed the child, if any.
        core_dumped: Whether the child dumped core.
    """

    pid: int
    exit_code: int | None = None
    signal: str | None = None
    core_dumped: bool = False

    @classmethod
    def from_wait_status(cls, pid: int, status: int) -> Self:
        """Decode the status returned by ``os.waitpid``.

        Args:
            pid: Process ID returned alongside the status.
            status: Raw wait status.

        Returns:
            The decoded ExitStatus.
        """
        if os.WIFEXITED(status):
            return cls(pid=pid, exit_code=os.WEXITSTATUS(status))
        if os.WIFSIGNALED(status):
            return cls(
                pid=pid,
                signal=signal_name(os.WTERMSIG(status)),
                core_dumped=os.WCOREDUMP(status),
            )
        return cls(pid=pid)

    @property
    def description(self) -> str:
        """Return a human-readable description of how the child ended."""
        if self.exit_code is not None:
            return f"exit status {self.exit_code}"
        if self.signal is not None:
            suffix = " (core dumped)" if self.core_dumped else ""
            return f"terminated by {self.signal}{suffix}"
        return "unknown termination cause"
