"""Evolution pipeline: the orchestrator for staged generation.

The EvolutionPipeline wires together the prompt composer, attribute
deriver, image transformer and content publisher.  Generation is an
explicit state machine:

    IDLE -> PUBLISHING_GENESIS -> (GENERATING -> PUBLISHING)* -> DONE
    PUBLISHING_GENESIS -> FAILED_FATAL
    GENERATING | PUBLISHING -> DONE_PARTIAL

Stage 0 is mandatory: if it cannot be published the request fails with
``PipelineError``.  Any later failure stops the chain at the last
published stage and returns it as PARTIAL, because every stage's input
is the image of the stage before it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from evolvechain.bridge.publisher import ContentPublisher, PublishError
from evolvechain.bridge.transform import ImageTransformer, TransformError
from evolvechain.core.attributes import derive_attributes, genesis_attributes
from evolvechain.core.prompts import compose_prompt
from evolvechain.core.state_machine import PipelineStateMachine
from evolvechain.models.config import PipelineConfig
from evolvechain.models.evolution import (
    ChainStatus,
    EvolutionChain,
    EvolutionStage,
    FailurePhase,
    StageFailure,
)
from evolvechain.models.metadata import MetadataRecord
from evolvechain.models.pipeline import PipelineState

logger = logging.getLogger(__name__)

T = TypeVar("T")

EVOLVED_DESCRIPTION = (
    "{description} - Now evolved to stage {stage} through ApeChain interactions!"
)


class PipelineError(RuntimeError):
    """Raised when genesis could not be published; nothing usable exists."""


class EvolutionPipeline:
    """Generates and publishes an evolution chain for one base image.

    The pipeline holds no per-request state, so one instance may serve
    concurrent requests.

    Parameters
    ----------
    transformer:
        Backend producing each evolved image from the previous one.
    publisher:
        Backend storing each stage and returning its metadata reference.
    config:
        Naming, retry and strength-range policy.  Uses defaults if not
        provided.
    """

    def __init__(
        self,
        transformer: ImageTransformer,
        publisher: ContentPublisher,
        config: PipelineConfig | None = None,
    ) -> None:
        self._transformer = transformer
        self._publisher = publisher
        self.config = config or PipelineConfig()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(
        self, base_image: bytes, description: str, stage_count: int
    ) -> EvolutionChain:
        """Publish genesis plus *stage_count* evolved stages.

        Returns a COMPLETE chain of ``stage_count + 1`` stages, or a
        PARTIAL chain that stops before the first stage that failed.

        Raises
        ------
        PipelineError
            If stage 0 could not be published.
        ValueError
            If *stage_count* is negative.
        """
        if stage_count < 0:
            raise ValueError(f"stage_count must be >= 0, got {stage_count}")

        machine = PipelineStateMachine()
        logger.info(
            "Generating evolution chain: %d stage(s) for %r",
            stage_count,
            description[:60],
        )

        # Genesis
        machine.transition(PipelineState.PUBLISHING_GENESIS, stage_index=0)
        genesis_record = MetadataRecord(
            name=self._stage_name(0),
            description=description,
            attributes=genesis_attributes(),
            asset_name="image.jpeg",
        )
        try:
            genesis_ref = self._attempt(
                lambda: self._publisher.publish(base_image, genesis_record)
            )
        except PublishError as exc:
            machine.transition(
                PipelineState.FAILED_FATAL, stage_index=0, reason=str(exc)
            )
            logger.error("Genesis publish failed, no chain created: %s", exc)
            raise PipelineError(f"Could not publish stage 0: {exc}") from exc

        stages: list[EvolutionStage] = [
            EvolutionStage(
                index=0,
                image=base_image,
                attributes=genesis_record.attributes,
                metadata_ref=genesis_ref,
            )
        ]

        # Evolved stages, each from the previous stage's image
        failure: StageFailure | None = None
        for stage in range(1, stage_count + 1):
            previous = stages[-1]
            machine.transition(PipelineState.GENERATING, stage_index=stage)
            composed = compose_prompt(description, stage)
            strength = self.config.clamp_strength(composed.strength)
            try:
                image = self._attempt(
                    lambda: self._transformer.transform(
                        previous.image, composed.prompt, strength
                    )
                )
            except TransformError as exc:
                failure = StageFailure(
                    stage_index=stage, phase=FailurePhase.GENERATE, error=str(exc)
                )
                break

            machine.transition(PipelineState.PUBLISHING, stage_index=stage)
            record = MetadataRecord(
                name=self._stage_name(stage),
                description=EVOLVED_DESCRIPTION.format(
                    description=description, stage=stage
                ),
                attributes=derive_attributes(stage),
                previous_ref=previous.metadata_ref,
                asset_name=f"evolution_stage_{stage}.jpeg",
            )
            try:
                ref = self._attempt(lambda: self._publisher.publish(image, record))
            except PublishError as exc:
                failure = StageFailure(
                    stage_index=stage, phase=FailurePhase.PUBLISH, error=str(exc)
                )
                break

            stages.append(
                EvolutionStage(
                    index=stage,
                    image=image,
                    prompt=composed.prompt,
                    strength=strength,
                    attributes=record.attributes,
                    metadata_ref=ref,
                    previous_ref=previous.metadata_ref,
                )
            )
            logger.info("Stage %d/%d published: %s", stage, stage_count, ref)

        if failure is None:
            machine.transition(PipelineState.DONE, stage_index=len(stages) - 1)
            status = ChainStatus.COMPLETE
        else:
            machine.transition(
                PipelineState.DONE_PARTIAL,
                stage_index=failure.stage_index,
                reason=failure.error,
            )
            status = ChainStatus.PARTIAL
            logger.warning(
                "Evolution stopped at stage %d (%s failed): %s. "
                "Returning %d/%d stages.",
                failure.stage_index,
                failure.phase.value,
                failure.error,
                len(stages) - 1,
                stage_count,
            )

        return EvolutionChain(
            base_description=description,
            requested_stages=stage_count,
            stages=tuple(stages),
            status=status,
            failure=failure,
            transitions=machine.history,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _stage_name(self, stage: int) -> str:
        return f"{self.config.name_prefix} - Stage {stage}"

    def _attempt(self, call: Callable[[], T]) -> T:
        """Run a remote call up to ``config.max_attempts`` times.

        Only ``TransformError`` and ``PublishError`` are retried; the last
        one propagates.
        """
        attempts = self.config.max_attempts
        for attempt in range(1, attempts + 1):
            try:
                return call()
            except (TransformError, PublishError) as exc:
                if attempt == attempts:
                    raise
                logger.warning(
                    "Remote call failed (attempt %d/%d): %s", attempt, attempts, exc
                )
        raise AssertionError("unreachable")  # pragma: no cover
