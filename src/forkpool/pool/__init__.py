"""Worker pool package.

This package provides the preforking master process and its building blocks.

Key Components:
    - Supervisor: Master process that forks and supervises worker groups
    - Registry: Worker groups and the pids of their live workers
    - WorkerIdentity: Identity handed to the worker lifecycle callbacks
    - ExitStatus: Decoded wait status of a reaped worker
    - PendingSignals: Bridge between signal handlers and the master loop
    - LivenessChannel: Pipe that lets workers notice a dead master
    - load_application: Host application boot file loader
    - run_payload: Job worker payload invocation

Example:
    >>> from pathlib import Path
    >>> from forkpool.config import load_config
    >>> from forkpool.pool import Supervisor
    >>> supervisor = Supervisor(load_config(Path("forkpool.conf.py")))
    >>> supervisor.run()  # Blocks until shutdown
"""

from ._application import APPLICATION_MODULE_NAME, load_application, resolve_app_path
from ._liveness import LivenessChannel
from ._models import ExitStatus, PoolState, WorkerIdentity, signal_name, worker_name
from ._registry import Registry
from ._signals import MAX_PENDING_SIGNALS, SHUTDOWN_SIGNALS, PendingSignals
from ._supervisor import MONITOR_INTERVAL, Supervisor
from ._worker import resolve_payload, run_payload, worker_options

__all__ = [
    "APPLICATION_MODULE_NAME",
    "MAX_PENDING_SIGNALS",
    "MONITOR_INTERVAL",
    "SHUTDOWN_SIGNALS",
    "ExitStatus",
    "LivenessChannel",
    "PendingSignals",
    "PoolState",
    "Registry",
    "Supervisor",
    "WorkerIdentity",
    "load_application",
    "resolve_app_path",
    "resolve_payload",
    "run_payload",
    "signal_name",
    "worker_name",
    "worker_options",
]
