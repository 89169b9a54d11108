"""Master process that forks and supervises the worker pool.

This module provides the Supervisor class. The master forks a fixed number
of workers per group, replaces workers that exit, and on SIGTERM or SIGINT
forwards the signal to every worker and waits for the pool to drain.
"""

import os
import signal
import sys
import threading
import traceback
from functools import partial
from typing import NoReturn, final

from structlog.typing import FilteringBoundLogger

from forkpool.config import PoolConfig
from forkpool.exceptions import InvalidStateError
from forkpool.utils import create_pool_logger

from ._application import load_application
from ._liveness import LivenessChannel
from ._models import ExitStatus, PoolState, WorkerIdentity
from ._registry import Registry
from ._signals import SHUTDOWN_SIGNALS, PendingSignals
from ._worker import resolve_payload, run_payload, worker_options

# Longest the master sleeps before polling for exited workers again
MONITOR_INTERVAL = 1.0


def _flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        if stream is not None:
            stream.flush()


def _exit_orphaned_worker(logger: FilteringBoundLogger) -> None:
    logger.error("master_gone", message="Detected dead master. Shutting down worker.")
    _flush_std_streams()
    os._exit(1)


@final
class Supervisor:
    """Forks worker groups and keeps them running until told to stop.

    A supervisor runs once. ``run()`` blocks the calling (main) thread until
    every worker has exited after a shutdown signal.
    """

    __slots__ = (
        "_config",
        "_hostname",
        "_liveness",
        "_logger",
        "_registry",
        "_signals",
        "_state",
    )

    def __init__(
        self,
        config: PoolConfig,
        *,
        logger: FilteringBoundLogger | None = None,
        hostname: str | None = None,
    ) -> None:
        """Initialize the supervisor.

        Args:
            config: Validated pool configuration.
            logger: Logger for master and worker events. Built from the
                configuration's logging section if None.
            hostname: Host identifier used in worker names. Defaults to this
                machine's hostname.
        """
        self._config = config
        self._logger: FilteringBoundLogger = logger or create_pool_logger(
            level=config.logging.level.value,
            log_format=config.logging.format.value,
            log_file=config.logging.file,
            max_bytes=config.logging.max_bytes,
            backup_count=config.logging.backup_count,
        )
        self._hostname = hostname
        self._registry = Registry()
        self._signals: PendingSignals | None = None
        self._liveness: LivenessChannel | None = None
        self._state = PoolState.STARTING

    @property
    def config(self) -> PoolConfig:
        return self._config

    @property
    def registry(self) -> Registry:
        """Return the registry of groups and live worker pids."""
        return self._registry

    @property
    def state(self) -> PoolState:
        """Return the current lifecycle state."""
        return self._state

    def run(self) -> None:
        """Start the pool and supervise it until shutdown completes.

        Must be called from the main thread, since it installs signal
        handlers.

        Raises:
            InvalidStateError: If the supervisor has already run.
            ApplicationLoadError: If preloading the application fails.
            PayloadError: If the payload cannot be resolved after preloading.
            OSError: If forking a worker fails.
        """
        if self._state is not PoolState.STARTING or self._signals is not None:
            msg = f"Supervisor cannot run from state '{self._state}'"
            raise InvalidStateError(msg, state=self._state.value)

        self._signals = PendingSignals()
        self._liveness = LivenessChannel()
        self._logger.info(
            "master_starting",
            pid=os.getpid(),
            groups=list(self._config.groups),
            workers=self._config.worker_total,
        )

        try:
            self._signals.install()

            if self._config.preload_app:
                self._preload_application()

            self._log_uninheritable_threads()
            self._fork_workers()

            self._state = PoolState.RUNNING
            self._monitor_workers()

            self._logger.info("master_stopped", pid=os.getpid())
        finally:
            self._teardown()

    def shutdown(self, signal_name: str = "SIGTERM") -> None:
        """Request a graceful shutdown as if the master received a signal.

        Safe to call from another thread while ``run()`` is active.

        Args:
            signal_name: Shutdown signal forwarded to the workers.

        Raises:
            ValueError: If the signal is not a shutdown signal.
            InvalidStateError: If the supervisor is not running.
        """
        if signal_name not in {signum.name for signum in SHUTDOWN_SIGNALS}:
            msg = f"'{signal_name}' is not a shutdown signal"
            raise ValueError(msg)
        if self._signals is None or self._state is PoolState.TERMINATED:
            msg = f"Supervisor cannot shut down from state '{self._state}'"
            raise InvalidStateError(msg, state=self._state.value)

        self._signals.push(signal_name)

    def _preload_application(self) -> None:
        self._logger.info("preloading_application", app_path=str(self._config.app_path))
        _ = load_application(self._config.app_path)
        # Fail before forking rather than in every worker
        _ = resolve_payload(self._config.payload)
        self._invoke_callback("after_preload_app")

    def _log_uninheritable_threads(self) -> None:
        """Warn about threads that forked workers will not inherit."""
        frames = sys._current_frames()  # pyright: ignore[reportPrivateUsage]
        current = threading.current_thread()
        for thread in threading.enumerate():
            if thread is current:
                continue

            location = ""
            frame = frames.get(thread.ident) if thread.ident is not None else None
            if frame is not None:
                entry = traceback.extract_stack(frame, limit=1)[-1]
                location = f"{entry.filename}:{entry.lineno} in {entry.name}"

            self._logger.warning(
                "thread_not_inherited",
                thread=thread.name,
                daemon=thread.daemon,
                location=location,
            )

    def _fork_workers(self) -> None:
        for name, group in self._config.groups.items():
            self._registry.add_group(name, group.payload_options())
            for _ in range(group.workers):
                _ = self._fork_worker(name)
            workers = self._registry.worker_count(name)
            self._logger.info("group_started", group=name, workers=workers)

    def _fork_worker(self, group: str) -> WorkerIdentity:
        """Fork one worker for a group and register it.

        Shutdown signals stay blocked across the fork. The child unblocks them
        only once its handlers are back to the defaults, so a signal forwarded
        to a freshly forked worker is never queued on the child's copy of the
        master's pending-signal queue.

        Returns:
            The identity of the new worker.

        Raises:
            OSError: If the fork fails.
        """
        _flush_std_streams()
        signal_mask = signal.pthread_sigmask(signal.SIG_BLOCK, SHUTDOWN_SIGNALS)
        try:
            pid = os.fork()
            if pid == 0:
                self._run_worker(group, signal_mask)
        finally:
            _ = signal.pthread_sigmask(signal.SIG_SETMASK, signal_mask)

        identity = WorkerIdentity.for_worker(pid, group, hostname=self._hostname)
        self._logger.info("worker_started", pid=pid, group=group, worker=identity.name)
        self._registry.add_worker(group, pid)
        self._invoke_callback("after_worker_boot", identity)
        return identity

    def _monitor_workers(self) -> None:
        assert self._signals is not None
        while self._registry.has_workers():
            signal_name = self._signals.pop()
            if signal_name is not None:
                self._shutdown_workers(signal_name)
                continue

            status = self._reap_worker()
            if status is not None:
                self._handle_dead_worker(status)
                continue

            _ = self._signals.wait(MONITOR_INTERVAL)

    def _reap_worker(self) -> ExitStatus | None:
        pid, status = os.waitpid(-1, os.WNOHANG)
        if pid == 0:
            return None
        return ExitStatus.from_wait_status(pid, status)

    def _handle_dead_worker(self, status: ExitStatus) -> None:
        if not self._registry.includes_worker(status.pid):
            self._logger.debug("untracked_child_reaped", pid=status.pid)
            return

        group = self._registry.group(status.pid)
        identity = WorkerIdentity.for_worker(status.pid, group, hostname=self._hostname)
        self._logger.info(
            "worker_exited",
            pid=status.pid,
            group=group,
            exit_code=status.exit_code,
            signal=status.signal,
            status=status.description,
        )
        self._invoke_callback("after_worker_shutdown", identity)
        self._registry.remove_worker(status.pid)

        if self._state is PoolState.RUNNING:
            _ = self._fork_worker(group)

    def _shutdown_workers(self, signal_name: str) -> None:
        if self._state is PoolState.SHUTTING_DOWN:
            self._logger.info("shutdown_already_in_progress", signal=signal_name)
            return

        self._state = PoolState.SHUTTING_DOWN
        self._logger.info(
            "master_shutting_down",
            pid=os.getpid(),
            signal=signal_name,
            groups=self._registry.group_names(),
        )

        signum = signal.Signals[signal_name]
        for pid in self._registry.worker_pids():
            group = self._registry.group(pid)
            self._logger.info("stopping_worker", pid=pid, group=group, signal=signal_name)
            try:
                os.kill(pid, signum)
            except ProcessLookupError:
                self._logger.debug("worker_already_exited", pid=pid, group=group)

    def _invoke_callback(self, name: str, *args: object) -> None:
        callback = getattr(self._config.callbacks, name)  # pyright: ignore[reportAny]
        if callback is None:
            return
        self._logger.debug("invoking_callback", callback=name)
        _ = callback(*args)  # pyright: ignore[reportAny]

    def _run_worker(self, group: str, signal_mask: set[signal.Signals] | None = None) -> NoReturn:
        """Run the worker body in the child and exit without unwinding."""
        exit_code = 1
        try:
            exit_code = self._worker_main(group, signal_mask)
        finally:
            _flush_std_streams()
            os._exit(exit_code)

    def _worker_main(self, group: str, signal_mask: set[signal.Signals] | None = None) -> int:
        """Body of a forked worker.

        Args:
            group: Name of the group the worker belongs to.
            signal_mask: Signal mask the master had before blocking the
                shutdown signals for the fork. None unblocks them.

        Returns:
            The exit status for the worker process.
        """
        assert self._signals is not None
        assert self._liveness is not None

        pid = os.getpid()
        identity = WorkerIdentity.for_worker(pid, group, hostname=self._hostname)
        logger = self._logger.bind(role="worker", pid=pid, group=group)

        self._liveness.close_write_end()
        self._signals.reset_in_child()
        # Pending shutdown signals are delivered here with the default action
        if signal_mask is None:
            _ = signal.pthread_sigmask(signal.SIG_UNBLOCK, SHUTDOWN_SIGNALS)
        else:
            _ = signal.pthread_sigmask(signal.SIG_SETMASK, signal_mask)
        _ = self._liveness.start_watcher(partial(_exit_orphaned_worker, logger))

        try:
            if not self._config.preload_app:
                _ = load_application(self._config.app_path)
            self._invoke_callback("on_worker_boot", identity)

            logger.info("worker_running", worker=identity.name)
            options = worker_options(self._registry.options(group), identity.name)
            result = run_payload(self._config.payload, options)
        except SystemExit as e:
            if e.code is None or isinstance(e.code, int):
                logger.info("worker_exiting", exit_code=e.code or 0)
                return e.code or 0
            logger.error("worker_exiting", message=str(e.code), exit_code=1)
            return 1
        except Exception:
            logger.exception("worker_failed", worker=identity.name)
            return 1

        logger.warning("payload_returned", worker=identity.name, result=repr(result))
        return 1

    def _teardown(self) -> None:
        if self._signals is not None:
            self._signals.uninstall()
            self._signals.close()
        if self._liveness is not None:
            self._liveness.close()
        self._state = PoolState.TERMINATED
