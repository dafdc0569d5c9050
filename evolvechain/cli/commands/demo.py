"""``evolvechain demo``: run a complete evolution offline with sample data.

Uses a synthetic transformer in place of the remote image backend and
publishes into a local content-addressed store, so the whole chain can
be inspected with ``evolvechain history``.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from evolvechain.bridge.publisher import LocalPublisher
from evolvechain.bridge.transform import TransformError
from evolvechain.cli.commands._render import print_chain_summary
from evolvechain.core.pipeline import EvolutionPipeline

console = Console()

SAMPLE_IMAGE = b"\xff\xd8\xff\xe0evolvechain-demo-genesis\xff\xd9"


class _DemoTransformer:
    """Synthetic transformer: tags the source bytes with the prompt strength."""

    def __init__(self, fail_at: int | None = None) -> None:
        self._fail_at = fail_at
        self._calls = 0

    def transform(self, source_image: bytes, prompt: str, strength: float) -> bytes:
        self._calls += 1
        if self._fail_at is not None and self._calls >= self._fail_at:
            raise TransformError("Demo backend outage")
        return source_image + f"|evolved@{strength:.2f}".encode("ascii")


def demo_cmd(
    stages: int = typer.Option(
        5,
        "--stages",
        "-n",
        min=0,
        help="Number of evolved stages to generate.",
    ),
    store_dir: str = typer.Option(
        ".evolvechain/demo-store",
        "--store",
        help="Path to the local content-addressed store.",
    ),
    fail_at: int = typer.Option(
        None,
        "--fail-at",
        min=1,
        help="Simulate a backend outage at this stage to show a partial chain.",
    ),
) -> None:
    """Run a complete demo evolution with sample data."""
    console.print()
    console.print(
        Panel(
            "[bold]evolvechain demo[/bold]\n\n"
            "Evolving a sample image with a synthetic backend.\n"
            "Every stage is published to the local store.",
            border_style="cyan",
            padding=(1, 2),
        )
    )

    pipeline = EvolutionPipeline(
        _DemoTransformer(fail_at=fail_at), LocalPublisher.at(Path(store_dir))
    )
    chain = pipeline.generate(SAMPLE_IMAGE, "a curious ape with a golden crown", stages)

    console.print()
    print_chain_summary(console, chain)
    console.print()
    console.print(f"[dim]Inspect with: evolvechain history {chain.stages[-1].metadata_ref} "
                  f"--store {store_dir}[/dim]")
