"""Evolution stage and chain models (immutable once published).

An ``EvolutionChain`` is a singly linked list of published stages: every
stage after genesis points at the metadata reference of the stage before
it.  The linkage is validated when the chain is constructed, so a chain
object that exists is a chain that is consistent.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from evolvechain.models.metadata import TraitAttribute
from evolvechain.models.pipeline import StateTransition


class ChainStatus(str, Enum):
    """Outcome of a generation request that produced at least genesis."""

    COMPLETE = "complete"
    PARTIAL = "partial"


class FailurePhase(str, Enum):
    """Which remote call stopped the chain."""

    GENERATE = "generate"
    PUBLISH = "publish"


class EvolutionStage(BaseModel):
    """One step in an evolution chain, indexed from 0 (genesis) upward."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    image: bytes = Field(repr=False)
    prompt: str | None = None  # None for genesis
    strength: float | None = None  # None for genesis
    attributes: tuple[TraitAttribute, ...] = ()
    metadata_ref: str | None = None  # assigned only after publication
    previous_ref: str | None = None  # None for genesis

    @property
    def is_genesis(self) -> bool:
        return self.index == 0

    def attribute(self, trait_type: str) -> str | None:
        """Return the value of the first attribute named *trait_type*."""
        for attr in self.attributes:
            if attr.trait_type == trait_type:
                return attr.value
        return None


class StageFailure(BaseModel):
    """Why a chain stopped short of the requested stage count."""

    model_config = ConfigDict(frozen=True)

    stage_index: int
    phase: FailurePhase
    error: str


class EvolutionChain(BaseModel):
    """The ordered set of all stages produced for one evolution request.

    A PARTIAL chain is a valid outcome: it is shorter than requested and
    carries the ``failure`` that stopped it.  Callers decide whether a
    short chain is acceptable by comparing ``achieved_stages`` with
    ``requested_stages``.
    """

    model_config = ConfigDict(frozen=True)

    base_description: str
    requested_stages: int = Field(ge=0)
    stages: tuple[EvolutionStage, ...]
    status: ChainStatus = ChainStatus.COMPLETE
    failure: StageFailure | None = None
    transitions: tuple[StateTransition, ...] = ()

    @model_validator(mode="after")
    def _check_linkage(self) -> EvolutionChain:
        if not self.stages:
            raise ValueError("an evolution chain must contain the genesis stage")

        for i, stage in enumerate(self.stages):
            if stage.index != i:
                raise ValueError(f"stage at position {i} has index {stage.index}")
            if stage.metadata_ref is None:
                raise ValueError(f"stage {i} has not been published")

        if self.stages[0].previous_ref is not None:
            raise ValueError("genesis stage must not reference a previous stage")
        for prev, stage in zip(self.stages, self.stages[1:]):
            if stage.previous_ref != prev.metadata_ref:
                raise ValueError(
                    f"stage {stage.index} links to {stage.previous_ref!r}, "
                    f"expected {prev.metadata_ref!r}"
                )

        expected = self.requested_stages + 1
        if self.status == ChainStatus.COMPLETE:
            if len(self.stages) != expected:
                raise ValueError(
                    f"complete chain has {len(self.stages)} stages, expected {expected}"
                )
            if self.failure is not None:
                raise ValueError("complete chain must not carry a failure")
        else:
            if len(self.stages) >= expected:
                raise ValueError("partial chain must be shorter than requested")
            if self.failure is None:
                raise ValueError("partial chain must carry the failure that stopped it")
        return self

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def achieved_stages(self) -> int:
        """Number of evolved stages realised (genesis excluded)."""
        return len(self.stages) - 1

    @property
    def is_partial(self) -> bool:
        return self.status == ChainStatus.PARTIAL

    @property
    def metadata_refs(self) -> list[str]:
        """Ordered metadata references, genesis first, for the mint call."""
        return [s.metadata_ref for s in self.stages if s.metadata_ref is not None]

    @property
    def token_uri(self) -> str:
        """The genesis reference, recorded as the canonical token URI."""
        return self.metadata_refs[0]

    def reference_for_stage(self, current_stage: int) -> str:
        """Return the reference to surface for an on-chain stage index.

        Indices past the last realised stage resolve to the most evolved
        stage available.
        """
        if current_stage < 0:
            raise ValueError(f"stage index must be >= 0, got {current_stage}")
        refs = self.metadata_refs
        return refs[min(current_stage, len(refs) - 1)]

    def to_manifest(self) -> dict[str, Any]:
        """Return a JSON-safe summary of the chain (image bytes excluded)."""
        return {
            "base_description": self.base_description,
            "status": self.status.value,
            "requested_stages": self.requested_stages,
            "achieved_stages": self.achieved_stages,
            "token_uri": self.token_uri,
            "metadata_refs": self.metadata_refs,
            "stages": [
                stage.model_dump(mode="json", exclude={"image"})
                for stage in self.stages
            ],
            "failure": self.failure.model_dump(mode="json") if self.failure else None,
        }
