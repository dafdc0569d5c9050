"""``evolvechain history REF``: walk a locally published chain to genesis.

Follows each metadata document's ``previous_stage`` link, verifying every
blob against its content address on the way.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from evolvechain.bridge.publisher import LocalPublisher, PublishError
from evolvechain.config import EvolveConfig

console = Console()


def history_cmd(
    reference: str = typer.Argument(
        ...,
        help="file:// reference of the most evolved stage to start from.",
    ),
    store_dir: Path = typer.Option(
        None,
        "--store",
        help="Path to the local content-addressed store "
        "(defaults to EVOLVECHAIN_LOCAL_STORE_PATH).",
    ),
) -> None:
    """Show every stage linked from REF, genesis first."""
    store_path = store_dir if store_dir is not None else EvolveConfig().local_store_path
    publisher = LocalPublisher.at(store_path)
    try:
        documents = publisher.history(reference)
    except PublishError as exc:
        console.print(f"[bold red]History unavailable:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc

    table = Table(title="Evolution History")
    table.add_column("Name", style="cyan")
    table.add_column("Attributes")
    table.add_column("Previous", style="dim", overflow="fold")

    for doc in documents:
        attrs = ", ".join(
            f"{a['trait_type']}={a['value']}" for a in doc.get("attributes", [])
        )
        table.add_row(doc.get("name", "?"), attrs, doc.get("previous_stage") or "-")

    console.print(table)
    console.print(f"[bold]{len(documents)}[/bold] linked stage(s), chain intact.")
