"""Registry of worker groups and their live worker processes."""

from dataclasses import dataclass, field
from typing import Any, final

from forkpool.exceptions import (
    GroupAlreadyExistsError,
    GroupDoesNotExistError,
    GroupNotFoundError,
    WorkerAlreadyRegisteredError,
)


@dataclass(slots=True)
class _GroupRecord:
    options: dict[str, Any]  # pyright: ignore[reportExplicitAny]
    pids: list[int] = field(default_factory=list)


@final
class Registry:
    """Keeps track of worker groups and their workers.

    Groups are kept in registration order and pids in insertion order, so
    ``worker_pids()`` is deterministic. The registry is not thread-safe;
    only the supervisor's main loop may touch it.
    """

    __slots__ = ("_groups", "_owners")

    def __init__(self) -> None:
        self._groups: dict[str, _GroupRecord] = {}
        # Reverse index: pid -> name of the group tracking it
        self._owners: dict[int, str] = {}

    def add_group(self, name: str, options: dict[str, Any]) -> None:  # pyright: ignore[reportExplicitAny]
        """Register a new worker group.

        Args:
            name: Unique group name.
            options: Payload options shared by every worker in the group.

        Raises:
            GroupAlreadyExistsError: If the group is already registered.
        """
        if name in self._groups:
            msg = f"Group '{name}' already exists"
            raise GroupAlreadyExistsError(msg, group_name=name)

        self._groups[name] = _GroupRecord(options=options)

    def add_worker(self, group_name: str, pid: int) -> None:
        """Track a worker pid in a group.

        Raises:
            GroupDoesNotExistError: If the group was never registered.
            WorkerAlreadyRegisteredError: If a group already tracks the pid.
        """
        record = self._group_by_name(group_name)
        owner = self._owners.get(pid)
        if owner is not None:
            msg = f"PID {pid} is already tracked by group '{owner}'"
            raise WorkerAlreadyRegisteredError(msg, pid=pid, group_name=owner)
        record.pids.append(pid)
        self._owners[pid] = group_name

    def remove_worker(self, pid: int) -> None:
        """Stop tracking a worker pid.

        Raises:
            GroupNotFoundError: If no group tracks the pid.
        """
        self._groups[self.group(pid)].pids.remove(pid)
        del self._owners[pid]

    def options(self, group_name: str) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Return the payload options of a group.

        Raises:
            GroupDoesNotExistError: If the group was never registered.
        """
        return self._group_by_name(group_name).options

    def worker_pids(self) -> list[int]:
        """Return every tracked pid, by group registration then insertion order."""
        return [pid for record in self._groups.values() for pid in record.pids]

    def group(self, pid: int) -> str:
        """Return the name of the group tracking a pid.

        Raises:
            GroupNotFoundError: If no group tracks the pid.
        """
        name = self._owners.get(pid)
        if name is not None:
            return name

        msg = f"No group found for PID {pid}"
        raise GroupNotFoundError(msg, pid=pid)

    def group_names(self) -> list[str]:
        """Return the registered group names in registration order."""
        return list(self._groups)

    def worker_count(self, group_name: str) -> int:
        """Return the number of tracked workers in a group.

        Raises:
            GroupDoesNotExistError: If the group was never registered.
        """
        return len(self._group_by_name(group_name).pids)

    def has_workers(self) -> bool:
        return bool(self._owners)

    def includes_worker(self, pid: int) -> bool:
        return pid in self._owners

    def _group_by_name(self, name: str) -> _GroupRecord:
        record = self._groups.get(name)
        if record is not None:
            return record

        msg = f"No group with name '{name}' found"
        raise GroupDoesNotExistError(msg, group_name=name)
