"""Prompt composition for evolved stages."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from evolvechain.core.attributes import clamped_lookup

# Ordered by increasing intensity; stages past the end reuse the last phrase.
INTENSITY_PHRASES: tuple[str, ...] = (
    "slightly enhanced, beginning to change",
    "moderately evolved, gaining new features",
    "significantly transformed, with new colors and details",
    "dramatically evolved, with complex structures and details",
    "ultimate legendary form with cosmic powers",
)

STYLE_SUFFIX = "detailed, high quality, on ApeChain blockchain"

BASE_STRENGTH = 0.3
STRENGTH_PER_STAGE = 0.1


class ComposedPrompt(BaseModel):
    """Generation parameters for one evolved stage."""

    model_config = ConfigDict(frozen=True)

    prompt: str
    strength: float


def compose_prompt(base_description: str, stage: int) -> ComposedPrompt:
    """Combine a description and stage index into a prompt and strength.

    The strength is not clamped here; the caller fits it to the backend's
    range.  It is rounded to drop float noise (``0.3 + 3 * 0.1``).
    """
    if stage < 1:
        raise ValueError(f"evolved stages start at 1, got {stage}")
    phrase = clamped_lookup(INTENSITY_PHRASES, stage - 1)
    return ComposedPrompt(
        prompt=f"{base_description}, {phrase}, {STYLE_SUFFIX}",
        strength=round(BASE_STRENGTH + stage * STRENGTH_PER_STAGE, 6),
    )
