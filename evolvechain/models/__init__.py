"""evolvechain data models: all Pydantic v2, all frozen (immutable)."""

from evolvechain.models.config import ClientConfig, PipelineConfig, static_key
from evolvechain.models.evolution import (
    ChainStatus,
    EvolutionChain,
    EvolutionStage,
    FailurePhase,
    StageFailure,
)
from evolvechain.models.metadata import MetadataRecord, TraitAttribute
from evolvechain.models.pipeline import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    PipelineState,
    StateTransition,
)

__all__ = [
    # config
    "ClientConfig",
    "PipelineConfig",
    "static_key",
    # metadata
    "MetadataRecord",
    "TraitAttribute",
    # pipeline states
    "PipelineState",
    "StateTransition",
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    # evolution
    "ChainStatus",
    "EvolutionChain",
    "EvolutionStage",
    "FailurePhase",
    "StageFailure",
]
