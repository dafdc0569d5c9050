"""Pipeline state machine models: explicit, enumerable generation states."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class PipelineState(str, Enum):
    """States an evolution request moves through while it is generated."""

    IDLE = "idle"
    PUBLISHING_GENESIS = "publishing_genesis"
    GENERATING = "generating"
    PUBLISHING = "publishing"
    DONE = "done"
    DONE_PARTIAL = "done_partial"
    FAILED_FATAL = "failed_fatal"


# Valid state transitions, enforced structurally by PipelineStateMachine.
# Terminal states (DONE, DONE_PARTIAL, FAILED_FATAL) have no outgoing transitions.
VALID_TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
    PipelineState.IDLE: {PipelineState.PUBLISHING_GENESIS},
    PipelineState.PUBLISHING_GENESIS: {
        PipelineState.GENERATING,
        PipelineState.DONE,
        PipelineState.FAILED_FATAL,
    },
    PipelineState.GENERATING: {PipelineState.PUBLISHING, PipelineState.DONE_PARTIAL},
    PipelineState.PUBLISHING: {
        PipelineState.GENERATING,
        PipelineState.DONE,
        PipelineState.DONE_PARTIAL,
    },
    PipelineState.DONE: set(),  # terminal
    PipelineState.DONE_PARTIAL: set(),  # terminal
    PipelineState.FAILED_FATAL: set(),  # terminal
}

TERMINAL_STATES: frozenset[PipelineState] = frozenset(
    state for state, targets in VALID_TRANSITIONS.items() if not targets
)


class StateTransition(BaseModel):
    """Records a single state transition for the generation audit trail."""

    model_config = ConfigDict(frozen=True)

    from_state: PipelineState
    to_state: PipelineState
    stage_index: int | None = None
    reason: str | None = None  # populated when entering a failure state
