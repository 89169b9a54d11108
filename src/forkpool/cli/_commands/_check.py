# pyright: reportExplicitAny=false
"""Check command: validate a configuration file without starting the pool."""

from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from forkpool.config import CALLBACK_SETTINGS, PoolConfig
from forkpool.exceptions import ApplicationLoadError, PayloadError
from forkpool.pool import load_application, resolve_payload

from ._run import load_pool_config
from ._shared import ExitCode, FormattableData, OutputFormat, exit_with_error, print_json


def _describe_callable(target: object) -> str:
    if isinstance(target, str):
        return target
    module = getattr(target, "__module__", None)
    name = getattr(target, "__qualname__", None) or repr(target)
    return f"{module}:{name}" if module else str(name)


def config_summary(config: PoolConfig) -> FormattableData:
    """Build a serializable summary of a validated configuration."""
    groups: dict[str, Any] = {
        name: {"workers": group.workers, "options": group.payload_options()}
        for name, group in config.groups.items()
    }
    callbacks = [
        name for name in CALLBACK_SETTINGS if getattr(config.callbacks, name) is not None
    ]
    return {
        "payload": _describe_callable(config.payload),
        "preload_app": config.preload_app,
        "app_path": str(config.app_path),
        "workers": config.worker_total,
        "groups": groups,
        "callbacks": callbacks,
        "logging": config.logging.model_dump(mode="json"),
    }


def verify_payload(config: PoolConfig) -> None:
    """Load the application and resolve the payload the way a worker does.

    Raises:
        ApplicationLoadError: If the application boot file fails to load.
        PayloadError: If the payload entrypoint cannot be resolved.
    """
    _ = load_application(config.app_path)
    _ = resolve_payload(config.payload)


def _print_text(summary: FormattableData, console: Console) -> None:
    console.print(f"[bold blue]Worker pool[/bold blue] ({summary['workers']} workers)")
    resolved = " (resolved)" if summary.get("payload_resolved") else ""
    console.print(f"Payload: {escape(summary['payload'])}{resolved}", highlight=False)
    preload = "yes" if summary["preload_app"] else "no"
    console.print(f"Preload app: {preload} ({escape(summary['app_path'])})", highlight=False)
    callbacks = ", ".join(summary["callbacks"]) or "none"
    console.print(f"Callbacks: {callbacks}", highlight=False)
    console.print()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Group", style="cyan")
    table.add_column("Workers", justify="right")
    table.add_column("Options")
    for name, group in summary["groups"].items():
        options = ", ".join(f"{key}={value!r}" for key, value in group["options"].items())
        table.add_row(escape(name), str(group["workers"]), escape(options) or "-")
    console.print(table)


def check_config(
    config_path: Path,
    *,
    output_format: OutputFormat = "text",
    resolve: bool = False,
    console: Console | None = None,
    error_console: Console | None = None,
) -> None:
    """Load, validate and print a configuration file.

    Args:
        config_path: Path to a ``.py`` or ``.toml`` configuration file.
        output_format: "text" for a table, "json" for machine-readable output.
        resolve: Also load the application and resolve the payload. The
            application's boot file runs in this process; nothing is forked.
        console: Console for regular output.
        error_console: Console for error output.
    """
    config = load_pool_config(config_path, error_console=error_console)
    summary = config_summary(config)
    if resolve:
        try:
            verify_payload(config)
        except (ApplicationLoadError, PayloadError) as e:
            exit_with_error(str(e), ExitCode.LOAD_ERROR, console=error_console)
        summary["payload_resolved"] = True
    if console is None:
        console = Console()

    if output_format == "json":
        print_json(summary, console)
        return
    _print_text(summary, console)
