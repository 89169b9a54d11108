"""Entrypoint resolution for callables referenced by name.

Configuration files name callbacks and the job worker payload with
``"module.path:function_name"`` strings. This module turns those strings
into callables without raising, so callers can decide how a failure maps
onto their own error types.
"""

import importlib
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

type EntrypointErrorType = Literal[
    "invalid_entrypoint",
    "import_error",
    "not_callable",
    "not_found",
]


@dataclass(frozen=True, slots=True)
class EntrypointResult[T]:
    """Result from resolving an entrypoint.

    Attributes:
        success: Whether the entrypoint resolved to a callable.
        result: The resolved callable, or None if resolution failed.
        error: Error message if resolution failed.
        error_type: Type of error that occurred.
    """

    success: bool
    result: T | None = None
    error: str | None = None
    error_type: EntrypointErrorType | None = None


# Type alias for any callable loaded dynamically
type LoadedCallable = Callable[..., object]


def parse_entrypoint(entrypoint: str) -> tuple[str, str] | None:
    """Parse an entrypoint string into module path and function name.

    Args:
        entrypoint: Function reference as "module.path:function_name".

    Returns:
        Tuple of (module_path, function_name) or None if invalid format.
    """
    if ":" not in entrypoint:
        return None
    module_path, function_name = entrypoint.rsplit(":", 1)
    if not module_path or not function_name:
        return None
    return module_path, function_name


def load_callable(entrypoint: str) -> EntrypointResult[LoadedCallable]:
    """Load a callable from an entrypoint string.

    Dotted attribute paths after the colon are followed, so
    ``"pkg.jobs:Worker.run"`` resolves the ``run`` attribute of ``Worker``.

    Args:
        entrypoint: Function reference as "module.path:function_name".

    Returns:
        EntrypointResult with the callable on success, or error details on failure.
    """
    parsed = parse_entrypoint(entrypoint)
    if parsed is None:
        return EntrypointResult(
            success=False,
            error=f"Invalid entrypoint format: {entrypoint}",
            error_type="invalid_entrypoint",
        )

    module_path, function_name = parsed

    try:
        target: object = importlib.import_module(module_path)
    except ImportError as e:
        return EntrypointResult(
            success=False,
            error=f"Failed to import module '{module_path}': {e}",
            error_type="import_error",
        )

    try:
        for attribute in function_name.split("."):
            target = getattr(target, attribute)
    except AttributeError as e:
        return EntrypointResult(
            success=False,
            error=f"Function not found: {module_path}:{function_name} ({e})",
            error_type="not_found",
        )

    if not callable(target):
        return EntrypointResult(
            success=False,
            error=f"Entrypoint '{entrypoint}' is not callable",
            error_type="not_callable",
        )

    return EntrypointResult(success=True, result=target)
