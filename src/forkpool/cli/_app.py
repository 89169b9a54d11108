"""The command-line interface for forkpool."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from ._commands import OutputFormat, check_config, run_pool

HELP = "Preforking supervisor for long-running job workers."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="forkpool",
        help=HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.default
    def run(  # pyright: ignore[reportUnusedFunction]
        config: Annotated[
            Path, Parameter(help="Path to the pool configuration (.py or .toml)")
        ],
    ) -> None:
        """Start the worker pool and supervise it until SIGTERM or SIGINT.

        Args:
            config: Path to the pool configuration (.py or .toml).
        """
        run_pool(config, error_console=error_console)

    @app.command(name="check")
    def check(  # pyright: ignore[reportUnusedFunction]
        config: Annotated[
            Path, Parameter(help="Path to the pool configuration (.py or .toml)")
        ],
        *,
        format: Annotated[  # noqa: A002
            OutputFormat, Parameter(name="--format", help="Output format")
        ] = "text",
        resolve: Annotated[
            bool,
            Parameter(
                name="--resolve",
                help="Load the application and resolve the payload as a worker would",
            ),
        ] = False,
    ) -> None:
        """Validate a configuration file and print the resulting pool.

        Args:
            config: Path to the pool configuration (.py or .toml).
            format: Output format, "text" or "json".
            resolve: Also load the application and resolve the payload.
        """
        check_config(
            config,
            output_format=format,
            resolve=resolve,
            console=console,
            error_console=error_console,
        )

    return app


app = create_app()


def main() -> None:
    """Default entrypoint for the `forkpool` CLI."""
    app = create_app()
    app()


if __name__ == "__main__":
    main()
