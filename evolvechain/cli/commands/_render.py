"""Shared Rich rendering for evolution chains."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from evolvechain.models.evolution import EvolutionChain


def chain_table(chain: EvolutionChain) -> Table:
    """Build a table with one row per published stage."""
    table = Table(title="Evolution Chain")
    table.add_column("Stage", justify="right", style="cyan")
    table.add_column("Path")
    table.add_column("Power", justify="right")
    table.add_column("Strength", justify="right")
    table.add_column("Reference", style="green", overflow="fold")

    for stage in chain.stages:
        strength = f"{stage.strength:.2f}" if stage.strength is not None else "-"
        table.add_row(
            str(stage.index),
            stage.attribute("Evolution Path") or "Genesis",
            stage.attribute("Power Level") or "0",
            strength,
            stage.metadata_ref or "",
        )
    return table


def print_chain_summary(console: Console, chain: EvolutionChain) -> None:
    """Print the stage table and a completion panel."""
    console.print(chain_table(chain))
    console.print()

    realised = f"{chain.achieved_stages}/{chain.requested_stages}"
    if chain.is_partial and chain.failure is not None:
        body = "\n".join([
            "[bold yellow]NFT created, evolution incomplete[/bold yellow]",
            "",
            f"[bold]Stages:[/bold]     {realised} realised",
            f"[bold]Stopped at:[/bold] stage {chain.failure.stage_index} "
            f"({chain.failure.phase.value})",
            f"[bold]Reason:[/bold]     {chain.failure.error}",
            f"[bold]Token URI:[/bold]  {chain.token_uri}",
        ])
        border = "yellow"
    else:
        body = "\n".join([
            "[bold green]Evolution chain complete[/bold green]",
            "",
            f"[bold]Stages:[/bold]     {realised} realised",
            f"[bold]Token URI:[/bold]  {chain.token_uri}",
        ])
        border = "green"

    console.print(
        Panel(body, title="[bold]evolvechain[/bold]", border_style=border, padding=(1, 2))
    )
