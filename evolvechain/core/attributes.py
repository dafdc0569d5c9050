"""Stage attribute derivation: pure, deterministic trait tables.

Each named table is a fixed ordered tuple.  Lookups past the end of a
table clamp to its last entry, so a chain never runs out of labels no
matter how many stages it evolves through.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from evolvechain.models.metadata import TraitAttribute

T = TypeVar("T")

EVOLUTION_PATHS: tuple[str, ...] = (
    "Nascent",
    "Emergent",
    "Ascendant",
    "Transcendent",
    "Legendary",
)

AURAS: tuple[str, ...] = (
    "Faint Blue",
    "Glowing Green",
    "Radiant Gold",
    "Cosmic Purple",
    "Divine White",
)

SPECIAL_ABILITIES: tuple[str, ...] = (
    "Chain Vision",
    "Transaction Boost",
    "Block Perception",
    "Gas Optimization",
    "Consensus Alignment",
)

POWER_PER_STAGE = 20
AURA_MIN_STAGE = 2
ABILITY_MIN_STAGE = 3


def clamped_lookup(table: Sequence[T], index: int) -> T:
    """Return ``table[min(index, len(table) - 1)]``.

    Raises ``ValueError`` for an empty table or a negative index.
    """
    if not table:
        raise ValueError("cannot look up a value in an empty table")
    if index < 0:
        raise ValueError(f"table index must be >= 0, got {index}")
    return table[min(index, len(table) - 1)]


def genesis_attributes() -> tuple[TraitAttribute, ...]:
    """Attributes of the unmodified stage 0."""
    return (
        TraitAttribute(trait_type="Evolution Stage", value="0"),
        TraitAttribute(trait_type="Interactions", value="0"),
    )


def derive_attributes(stage: int) -> tuple[TraitAttribute, ...]:
    """Map an evolved stage index (>= 1) to its ordered trait values."""
    if stage < 1:
        raise ValueError(f"evolved stages start at 1, got {stage}")

    slot = stage - 1
    attributes = [
        TraitAttribute(trait_type="Evolution Stage", value=str(stage)),
        TraitAttribute(trait_type="Evolution Path", value=clamped_lookup(EVOLUTION_PATHS, slot)),
        TraitAttribute(trait_type="Power Level", value=str(stage * POWER_PER_STAGE)),
    ]
    if stage >= AURA_MIN_STAGE:
        attributes.append(
            TraitAttribute(trait_type="Aura", value=clamped_lookup(AURAS, slot))
        )
    if stage >= ABILITY_MIN_STAGE:
        attributes.append(
            TraitAttribute(
                trait_type="Special Ability",
                value=clamped_lookup(SPECIAL_ABILITIES, slot),
            )
        )
    return tuple(attributes)
