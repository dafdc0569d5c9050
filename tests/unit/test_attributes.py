"""Tests for stage attribute derivation: trait tables and clamping."""

from __future__ import annotations

import pytest

from evolvechain.core.attributes import (
    AURAS,
    EVOLUTION_PATHS,
    SPECIAL_ABILITIES,
    clamped_lookup,
    derive_attributes,
    genesis_attributes,
)


def _as_pairs(attrs) -> list[tuple[str, str]]:
    return [(a.trait_type, a.value) for a in attrs]


class TestClampedLookup:
    def test_in_range(self):
        assert clamped_lookup(("a", "b", "c"), 1) == "b"

    def test_clamps_past_end(self):
        assert clamped_lookup(("a", "b", "c"), 3) == "c"
        assert clamped_lookup(("a", "b", "c"), 1000) == "c"

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError):
            clamped_lookup(("a",), -1)

    def test_empty_table_rejected(self):
        with pytest.raises(ValueError):
            clamped_lookup((), 0)


class TestDeriveAttributes:
    def test_stage_one(self):
        assert _as_pairs(derive_attributes(1)) == [
            ("Evolution Stage", "1"),
            ("Evolution Path", "Nascent"),
            ("Power Level", "20"),
        ]

    def test_stage_two_adds_aura_only(self):
        pairs = dict(_as_pairs(derive_attributes(2)))
        assert pairs["Aura"] == "Glowing Green"
        assert "Special Ability" not in pairs

    def test_stage_three_adds_ability(self):
        assert _as_pairs(derive_attributes(3)) == [
            ("Evolution Stage", "3"),
            ("Evolution Path", "Ascendant"),
            ("Power Level", "60"),
            ("Aura", "Radiant Gold"),
            ("Special Ability", "Block Perception"),
        ]

    def test_stage_seven_clamps_to_last_entries(self):
        pairs = dict(_as_pairs(derive_attributes(7)))
        assert pairs["Evolution Path"] == "Legendary"
        assert pairs["Aura"] == AURAS[-1] == "Divine White"
        assert pairs["Special Ability"] == SPECIAL_ABILITIES[-1]
        assert pairs["Power Level"] == "140"

    @pytest.mark.parametrize("stage", range(1, 13))
    def test_trait_presence_rules(self, stage: int):
        names = [a.trait_type for a in derive_attributes(stage)]
        assert names[:3] == ["Evolution Stage", "Evolution Path", "Power Level"]
        assert ("Aura" in names) == (stage >= 2)
        assert ("Special Ability" in names) == (stage >= 3)

    def test_path_never_runs_out(self):
        assert derive_attributes(100)[1].value == EVOLUTION_PATHS[-1]

    def test_deterministic(self):
        assert derive_attributes(4) == derive_attributes(4)

    def test_stage_zero_rejected(self):
        with pytest.raises(ValueError):
            derive_attributes(0)


class TestGenesisAttributes:
    def test_genesis_traits(self):
        assert _as_pairs(genesis_attributes()) == [
            ("Evolution Stage", "0"),
            ("Interactions", "0"),
        ]
