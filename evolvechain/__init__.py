"""evolvechain: staged evolution generation and metadata pipeline.

Generates a chain of progressively transformed images for an evolving
collectible, publishes each stage's image and metadata to content-addressed
storage, and returns the ordered references a mint call records on-chain.
"""

__version__ = "0.1.0"
__description__ = "Staged evolution generation and metadata publishing pipeline"

from evolvechain.core.pipeline import EvolutionPipeline, PipelineError
from evolvechain.models.evolution import EvolutionChain, EvolutionStage
from evolvechain.cli.app import app as cli

__all__ = [
    "EvolutionPipeline",
    "PipelineError",
    "EvolutionChain",
    "EvolutionStage",
    "cli",
    "__version__",
]
