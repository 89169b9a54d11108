# pyright: reportAny=false, reportExplicitAny=false
"""Configuration validation using the Pydantic models.

Raw configuration dictionaries produced by the TOML and Python loaders are
validated into a PoolConfig here. Pydantic errors are flattened into
ValidationIssue records so the CLI can report every problem at once, while
build_config raises ConfigValidationError for the first one.
"""

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import ValidationError
from pydantic_core import ErrorDetails

from forkpool.exceptions import ConfigValidationError

from ._models import PoolConfig


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """Represents a configuration validation issue.

    Attributes:
        key: Dotted path to the configuration key (e.g., "groups.default.workers").
        message: Human-readable description of the issue.
        expected: Description of expected value or type, if available.
        actual: The actual value that caused the issue.
        source: Path of the config file where the issue was found, or None.
        severity: Whether this is an error or warning.
    """

    key: str
    message: str
    expected: str | None
    actual: Any
    source: str | None
    severity: Literal["error", "warning"]


def _pydantic_error_to_issue(
    error: ErrorDetails,
    source: str | None,
) -> ValidationIssue:
    """Convert a Pydantic error dict to a ValidationIssue.

    Args:
        error: A single error dict from ValidationError.errors().
        source: The config file path, or None.

    Returns:
        A ValidationIssue representing the validation error.
    """
    loc = error.get("loc", ())
    key = ".".join(str(part) for part in loc)

    message = str(error.get("msg", "Validation error"))

    ctx = error.get("ctx")
    expected: str | None = None
    if ctx is not None:
        if "expected" in ctx:
            expected = str(ctx["expected"])
        elif "gt" in ctx:
            expected = f"greater than {ctx['gt']}"

    return ValidationIssue(
        key=key,
        message=message,
        expected=expected,
        actual=error.get("input"),
        source=source,
        severity="error",
    )


def validate_config(
    data: dict[str, Any],
    *,
    source: str | None = None,
) -> list[ValidationIssue]:
    """Validate a raw configuration dictionary.

    Args:
        data: The configuration dictionary produced by a loader.
        source: The config file path used to tag issues.

    Returns:
        List of ValidationIssue objects. Empty list indicates valid config.
    """
    try:
        _ = PoolConfig.model_validate(data)
    except ValidationError as e:
        return [_pydantic_error_to_issue(err, source=source) for err in e.errors()]
    else:
        return []


def raise_if_validation_errors(
    issues: list[ValidationIssue],
    source: str | None = None,
) -> None:
    """Raise ConfigValidationError if any validation errors exist.

    Args:
        issues: List of ValidationIssue objects to check.
        source: Optional source string to use in the exception.

    Raises:
        ConfigValidationError: If any issues have severity="error".
    """
    errors = [i for i in issues if i.severity == "error"]
    if errors:
        issue = errors[0]
        key = issue.key or "<root>"
        msg = f"Invalid configuration value for '{key}': {issue.message}"
        raise ConfigValidationError(
            msg,
            key=issue.key,
            value=issue.actual,
            expected=issue.expected or issue.message,
            source=source or issue.source,
        )


def build_config(data: dict[str, Any], *, source: str | None = None) -> PoolConfig:
    """Validate a raw configuration dictionary into a PoolConfig.

    Args:
        data: The configuration dictionary produced by a loader.
        source: The config file path, used in error reports.

    Returns:
        The validated PoolConfig.

    Raises:
        ConfigValidationError: If validation fails.
    """
    try:
        return PoolConfig.model_validate(data)
    except ValidationError as e:
        issues = [_pydantic_error_to_issue(err, source=source) for err in e.errors()]
        raise_if_validation_errors(issues, source)
        raise  # pragma: no cover - pydantic always reports at least one error
