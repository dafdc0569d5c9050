"""``evolvechain generate IMAGE``: generate and publish an evolution chain.

Runs the pipeline against the configured image backend and publishes to
either the configured storage service or a local content-addressed
store.  Exits non-zero only when no chain could be created at all.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from evolvechain.bridge.publisher import (
    ContentPublisher,
    LocalPublisher,
    NFTStoragePublisher,
)
from evolvechain.bridge.transform import ImageTransformClient
from evolvechain.cli.commands._render import print_chain_summary
from evolvechain.config import EvolveConfig
from evolvechain.core.pipeline import EvolutionPipeline, PipelineError

console = Console()


def generate_cmd(
    image: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Base image for stage 0.",
    ),
    description: str = typer.Option(
        ...,
        "--description",
        "-d",
        help="Base description used in every stage prompt.",
    ),
    stages: int = typer.Option(
        None,
        "--stages",
        "-n",
        min=0,
        help="Number of evolved stages (defaults to EVOLVECHAIN_DEFAULT_STAGE_COUNT).",
    ),
    local: bool = typer.Option(
        False,
        "--local",
        help="Publish into the local store at EVOLVECHAIN_LOCAL_STORE_PATH.",
    ),
    local_store: Path = typer.Option(
        None,
        "--local-store",
        help="Publish into a local content-addressed store instead of the storage service.",
    ),
    manifest: Path = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Write the chain manifest (references, attributes, status) as JSON.",
    ),
) -> None:
    """Generate an evolution chain and publish every stage."""
    settings = EvolveConfig()
    stage_count = settings.default_stage_count if stages is None else stages

    transformer = ImageTransformClient(settings.transform_client_config())
    publisher: ContentPublisher
    if local_store is not None:
        publisher = LocalPublisher.at(local_store)
    elif local:
        publisher = LocalPublisher.at(settings.local_store_path)
    else:
        if not settings.storage_api_key.get_secret_value():
            console.print(
                "[bold red]No storage API key configured.[/bold red] "
                "Set EVOLVECHAIN_STORAGE_API_KEY or use --local / --local-store."
            )
            raise typer.Exit(code=1)
        publisher = NFTStoragePublisher(
            settings.storage_client_config(), gateway=settings.ipfs_gateway
        )

    pipeline = EvolutionPipeline(transformer, publisher, settings.pipeline_config())

    with console.status(f"Generating {stage_count} evolution stage(s)..."):
        try:
            chain = pipeline.generate(image.read_bytes(), description, stage_count)
        except PipelineError as exc:
            console.print(f"[bold red]No NFT could be created:[/bold red] {exc}")
            raise typer.Exit(code=1) from exc

    print_chain_summary(console, chain)

    if manifest is not None:
        manifest.parent.mkdir(parents=True, exist_ok=True)
        manifest.write_text(json.dumps(chain.to_manifest(), indent=2), encoding="utf-8")
        console.print(f"[dim]Manifest written to {manifest}[/dim]")
