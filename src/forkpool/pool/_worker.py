"""Job worker payload resolution and invocation."""

from collections.abc import Callable, Mapping
from typing import Any

from forkpool.exceptions import PayloadError
from forkpool.utils import load_callable


def resolve_payload(payload: str | Callable[..., object]) -> Callable[..., object]:
    """Turn a payload declaration into a callable.

    Args:
        payload: A ``"module:function"`` entrypoint or a callable.

    Returns:
        The payload callable.

    Raises:
        PayloadError: If the entrypoint cannot be resolved.
    """
    if callable(payload):
        return payload

    result = load_callable(payload)
    if not result.success or result.result is None:
        msg = f"Could not resolve payload '{payload}': {result.error}"
        raise PayloadError(msg, entrypoint=payload)
    return result.result


def worker_options(group_options: Mapping[str, Any], name: str) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Merge a group's payload options with the worker's name."""
    return {**group_options, "name": name}


def run_payload(
    payload: str | Callable[..., object],
    options: dict[str, Any],  # pyright: ignore[reportExplicitAny]
) -> object:
    """Resolve the payload and call it with the worker options.

    The payload is expected to block for the life of the worker. Whatever
    it returns is handed back so the caller can treat the return as a
    failure.

    Raises:
        PayloadError: If the entrypoint cannot be resolved.
    """
    target = resolve_payload(payload)
    return target(options)
