"""Liveness channel used by workers to detect that the master has died.

The master creates a pipe before forking and keeps the write end open for
its whole life. Each worker closes its inherited copy of the write end and
watches the read end. Nothing is ever written, so the read end becomes
readable only at EOF, which happens once every write end is closed: the
master has exited, whether cleanly or through SIGKILL.
"""

import contextlib
import os
import select
import threading
from collections.abc import Callable
from typing import final

WATCHER_THREAD_NAME = "forkpool-liveness"


@final
class LivenessChannel:
    """Pipe shared between the master and every worker it forks."""

    __slots__ = ("_read_fd", "_write_fd")

    def __init__(self) -> None:
        self._read_fd, self._write_fd = os.pipe()

    @property
    def read_fd(self) -> int:
        return self._read_fd

    @property
    def write_fd(self) -> int:
        return self._write_fd

    def close_write_end(self) -> None:
        """Close this process's copy of the write end.

        Workers call this right after fork; otherwise their own copy keeps
        the pipe open and EOF is never observed.
        """
        if self._write_fd >= 0:
            with contextlib.suppress(OSError):
                os.close(self._write_fd)
            self._write_fd = -1

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the master is gone or the timeout elapses.

        Args:
            timeout: Maximum seconds to wait. None blocks indefinitely.

        Returns:
            True if the read end reached EOF.
        """
        readable, _, _ = select.select([self._read_fd], [], [], timeout)
        return bool(readable)

    def start_watcher(self, on_master_exit: Callable[[], object]) -> threading.Thread:
        """Start a daemon thread that calls ``on_master_exit`` at EOF.

        Args:
            on_master_exit: Called from the watcher thread once the master is
                gone. Expected to terminate the process.

        Returns:
            The started thread.
        """

        def watch() -> None:
            _ = self.wait()
            _ = on_master_exit()

        thread = threading.Thread(target=watch, name=WATCHER_THREAD_NAME, daemon=True)
        thread.start()
        return thread

    def close(self) -> None:
        """Close both ends. Safe to call more than once."""
        self.close_write_end()
        if self._read_fd >= 0:
            with contextlib.suppress(OSError):
                os.close(self._read_fd)
            self._read_fd = -1
