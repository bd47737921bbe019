"""Tests for mapping entity IDs to generation folders."""

import pytest

from dexgrab.common.partition import (
    DEFAULT_BUCKET,
    GENERATION_BOUNDARIES,
    bucket,
)


class TestBucketBoundaries:
    """Boundaries are inclusive upper bounds."""

    @pytest.mark.parametrize(
        ("entity_id", "expected"),
        [
            (1, "Gen_1_Kanto"),
            (151, "Gen_1_Kanto"),
            (152, "Gen_2_Johto"),
            (251, "Gen_2_Johto"),
            (252, "Gen_3_Hoenn"),
            (386, "Gen_3_Hoenn"),
            (493, "Gen_4_Sinnoh"),
            (649, "Gen_5_Unova"),
            (721, "Gen_6_Kalos"),
            (809, "Gen_7_Alola"),
            (905, "Gen_8_Galar"),
            (906, "Gen_9_Paldea"),
            (1025, "Gen_9_Paldea"),
        ],
    )
    def test_bucket_at_thresholds(self, entity_id: int, expected: str) -> None:
        """Each threshold ID stays in its own bucket; the next ID moves on."""
        assert bucket(entity_id) == expected

    def test_ids_past_last_boundary_use_default(self) -> None:
        """IDs above every boundary fall into the last generation."""
        assert bucket(5000) == DEFAULT_BUCKET


class TestBucketDeterminism:
    def test_repeated_calls_agree(self) -> None:
        """bucket() is pure: the same ID always maps to the same label."""
        for entity_id in range(1, 1026):
            assert bucket(entity_id) == bucket(entity_id)

    def test_boundary_table_is_increasing(self) -> None:
        """The boundary table must be sorted for first-match lookup."""
        uppers = [upper for upper, _ in GENERATION_BOUNDARIES]
        assert uppers == sorted(uppers)
        assert len(set(uppers)) == len(uppers)

    def test_buckets_are_monotone_over_range(self) -> None:
        """Walking IDs upward never returns to an earlier bucket."""
        order = [label for _, label in GENERATION_BOUNDARIES] + [DEFAULT_BUCKET]
        positions = [order.index(bucket(i)) for i in range(1, 1026)]
        assert positions == sorted(positions)
