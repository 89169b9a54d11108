"""Pending-signal queue bridging signal handlers and the master loop.

Python runs signal handlers on the main thread between bytecodes, at a point
the master loop does not control. The handler therefore only appends the
signal name to a bounded deque; the C-level wakeup fd installed with
``signal.set_wakeup_fd`` writes a byte to a self-pipe so a loop blocked in
``select`` wakes up. The loop drains the pipe and pops names in FIFO order.
"""

import contextlib
import os
import select
import signal
from collections import deque
from collections.abc import Callable, Sequence
from types import FrameType
from typing import final

type SignalHandler = Callable[[int, FrameType | None], object] | int | None

SHUTDOWN_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGTERM, signal.SIGINT)

# Only the first shutdown signal matters, so a small bound is plenty
MAX_PENDING_SIGNALS = 32

_DRAIN_CHUNK = 64


@final
class PendingSignals:
    """Single-producer, single-consumer queue of received signal names.

    ``deque.append`` and ``deque.popleft`` are atomic, so the handler and the
    loop never need a lock.
    """

    __slots__ = (
        "_installed",
        "_pending",
        "_previous_handlers",
        "_previous_wakeup_fd",
        "_read_fd",
        "_signals",
        "_write_fd",
    )

    def __init__(
        self,
        signals: Sequence[signal.Signals] = SHUTDOWN_SIGNALS,
        *,
        maxlen: int = MAX_PENDING_SIGNALS,
    ) -> None:
        """Create the queue and its self-pipe.

        Args:
            signals: Signals that are queued once handlers are installed.
            maxlen: Maximum number of pending names kept. Oldest are dropped.
        """
        self._signals = tuple(signals)
        self._pending: deque[str] = deque(maxlen=maxlen)
        self._read_fd, self._write_fd = os.pipe()
        os.set_blocking(self._read_fd, False)
        os.set_blocking(self._write_fd, False)
        self._previous_handlers: dict[signal.Signals, SignalHandler] = {}
        self._previous_wakeup_fd = -1
        self._installed = False

    @property
    def signals(self) -> tuple[signal.Signals, ...]:
        """Return the signals handled by this queue."""
        return self._signals

    def install(self) -> None:
        """Install handlers for the queued signals.

        Must be called from the main thread.
        """
        if self._installed:
            return

        self._previous_wakeup_fd = signal.set_wakeup_fd(
            self._write_fd, warn_on_full_buffer=False
        )
        for signum in self._signals:
            self._previous_handlers[signum] = signal.signal(signum, self._handle)
        self._installed = True

    def uninstall(self) -> None:
        """Restore the handlers and wakeup fd that were active before install()."""
        if not self._installed:
            return

        for signum, handler in self._previous_handlers.items():
            # None means the handler was not installed from Python
            signal.signal(signum, signal.SIG_DFL if handler is None else handler)
        self._previous_handlers.clear()
        signal.set_wakeup_fd(self._previous_wakeup_fd)
        self._installed = False

    def reset_in_child(self) -> None:
        """Give a forked child default signal handling and drop the self-pipe.

        The child shares nothing with the master's queue; the job worker
        payload decides its own signal semantics.
        """
        for signum in self._signals:
            signal.signal(signum, signal.SIG_DFL)
        signal.set_wakeup_fd(-1)
        self._previous_handlers.clear()
        self._pending.clear()
        self._installed = False
        self.close()

    def _handle(self, signum: int, _frame: FrameType | None) -> None:
        self._pending.append(signal.Signals(signum).name)

    def push(self, name: str) -> None:
        """Queue a signal name from regular code and wake the loop."""
        self._pending.append(name)
        with contextlib.suppress(BlockingIOError):
            _ = os.write(self._write_fd, b"\0")

    def pop(self) -> str | None:
        """Return the oldest pending signal name, or None if there is none."""
        try:
            return self._pending.popleft()
        except IndexError:
            return None

    def __len__(self) -> int:
        return len(self._pending)

    def wait(self, timeout: float) -> bool:
        """Block until a signal wakes the loop or the timeout elapses.

        Args:
            timeout: Maximum seconds to wait.

        Returns:
            True if the self-pipe was readable (and has been drained).
        """
        readable, _, _ = select.select([self._read_fd], [], [], timeout)
        if not readable:
            return False
        self._drain()
        return True

    def _drain(self) -> None:
        while True:
            try:
                if not os.read(self._read_fd, _DRAIN_CHUNK):
                    return
            except BlockingIOError:
                return

    def close(self) -> None:
        """Close the self-pipe. Safe to call more than once."""
        for fd in (self._read_fd, self._write_fd):
            if fd >= 0:
                with contextlib.suppress(OSError):
                    os.close(fd)
        self._read_fd = -1
        self._write_fd = -1
