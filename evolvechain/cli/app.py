"""Main Typer application: imports and registers all CLI commands.

Entry point: ``evolvechain`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from evolvechain.cli.commands.demo import demo_cmd
from evolvechain.cli.commands.generate import generate_cmd
from evolvechain.cli.commands.history import history_cmd

app = typer.Typer(
    name="evolvechain",
    help="evolvechain: staged evolution generation and metadata publishing.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="generate", help="Generate and publish an evolution chain.")(generate_cmd)
app.command(name="demo", help="Run a complete demo evolution with sample data.")(demo_cmd)
app.command(name="history", help="Walk a locally published chain back to genesis.")(history_cmd)


@app.callback()
def _configure_logging(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to EVOLVECHAIN_LOG_LEVEL).",
    ),
) -> None:
    from evolvechain.config import EvolveConfig

    level = (log_level or EvolveConfig().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.command(name="config", help="Show the effective configuration.")
def config_cmd() -> None:
    """Print the effective configuration with API keys masked."""
    from rich.console import Console
    from rich.table import Table

    from evolvechain.config import EvolveConfig

    settings = EvolveConfig()
    table = Table(title="evolvechain configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in settings.model_dump().items():
        table.add_row(name, str(value))
    Console().print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
