"""Deterministic generation state machine.

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- No transitions out of terminal states
- Every transition recorded, in order, for the chain's audit trail
"""

from __future__ import annotations

import logging

from evolvechain.models.pipeline import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    PipelineState,
    StateTransition,
)

logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class PipelineStateMachine:
    """Tracks one generation request through its states.

    A machine is created per request and discarded with it; it is not
    shared between concurrent requests.
    """

    def __init__(self) -> None:
        self._state = PipelineState.IDLE
        self._history: list[StateTransition] = []

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def history(self) -> tuple[StateTransition, ...]:
        return tuple(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def transition(
        self,
        target_state: PipelineState,
        *,
        stage_index: int | None = None,
        reason: str | None = None,
    ) -> StateTransition:
        """Move to *target_state*, recording the transition.

        Raises ``InvalidTransitionError`` if the move is not allowed from
        the current state.
        """
        current = self._state
        allowed = VALID_TRANSITIONS.get(current, set())
        if target_state not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition from {current.value} to {target_state.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )

        record = StateTransition(
            from_state=current,
            to_state=target_state,
            stage_index=stage_index,
            reason=reason,
        )
        self._history.append(record)
        self._state = target_state
        logger.debug(
            "Pipeline state %s -> %s (stage=%s)",
            current.value,
            target_state.value,
            stage_index,
        )
        return record

    def get_available_transitions(self) -> set[PipelineState]:
        """Return the set of valid target states from the current state."""
        return set(VALID_TRANSITIONS.get(self._state, set()))
