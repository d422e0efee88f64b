"""Tests for the epoch registry."""

import pytest

from dlprewards.deployer.reward_engine.services.epoch_registry import EpochRegistry
from dlprewards.deployer.utils.error_handling import (
    InvalidEpoch,
    InvalidParameters,
    StateError,
    Underflow,
    UnknownParticipant,
)


@pytest.fixture
def epochs(registry):
    return EpochRegistry(registry)


class TestSavePerformances:
    def test_saves_ratings_and_total(self, epochs):
        """Should store each rating and keep the epoch total in sync."""
        epochs.save_performances(1, [(1, 100), (2, 300)])

        epoch = epochs.get_epoch(1)
        assert epoch.get_rating(1).performance_rating == 100
        assert epoch.total_performance_rating == 400

    def test_replacing_rating_adjusts_total_by_difference(self, epochs):
        """Re-submitting a rating should replace it, not add to it."""
        epochs.save_performances(1, [(1, 100), (2, 300)])
        epochs.save_performance(1, 2, 50)

        assert epochs.get_epoch(1).total_performance_rating == 150

    def test_duplicate_ids_rejected_without_writes(self, epochs):
        """A batch with duplicate ids should fail and write nothing."""
        with pytest.raises(InvalidParameters):
            epochs.save_performances(1, [(1, 100), (2, 5), (1, 200)])

        assert epochs.get_epoch(1).total_performance_rating == 0

    def test_unknown_participant_rejected(self, epochs):
        """Ratings for unregistered participants should be rejected."""
        with pytest.raises(UnknownParticipant):
            epochs.save_performances(1, [(1, 100), (99, 5)])
        assert epochs.get_epoch(1).ratings == {}

    def test_finalized_epoch_rejects_ratings(self, epochs):
        """Finalized epochs should never accept new ratings."""
        epochs.finalize_epoch(1, block_number=500)

        with pytest.raises(InvalidEpoch):
            epochs.save_performance(1, 1, 10)


class TestAdjustStake:
    def test_returns_new_effective_stake(self, epochs):
        """Adjustment should apply on top of the registry stake."""
        assert epochs.adjust_stake(1, 1, -20_000) == 30_000
        assert epochs.adjust_stake(1, 1, 5_000) == 35_000
        assert epochs.effective_stake(1, 1) == 35_000

    def test_underflow_is_rejected_not_clamped(self, epochs):
        """Driving effective stake below zero should fail and change nothing."""
        with pytest.raises(Underflow):
            epochs.adjust_stake(1, 5, -10_001)

        assert epochs.effective_stake(1, 5) == 10_000

    def test_exact_zero_is_allowed(self, epochs):
        """Effective stake may reach exactly zero."""
        assert epochs.adjust_stake(1, 5, -10_000) == 0

    def test_finalized_epoch_rejects_adjustment(self, epochs):
        """Adjustments on finalized epochs should fail with InvalidEpoch."""
        epochs.finalize_epoch(1, block_number=500)

        with pytest.raises(InvalidEpoch):
            epochs.adjust_stake(1, 1, 100)


class TestBonusAndFinalization:
    def test_add_and_override_bonus(self, epochs):
        """Bonus should accumulate and can be overridden."""
        epochs.add_bonus(2, 3, 40)
        assert epochs.add_bonus(2, 3, 10) == 50
        assert epochs.override_bonus(2, 3, 5) == 50
        assert epochs.bonus_participants(2) == [3]

    def test_rollover_respects_cap(self, epochs):
        """Rollover should never push the bonus above the cap."""
        epochs.add_bonus(2, 1, 80)

        accepted = epochs.rollover_bonus(2, 1, amount=50, cap=100)

        assert accepted == 20
        assert epochs.get_epoch(2).get_rating(1).bonus_amount == 100

    def test_rollover_into_finalized_epoch_is_refused(self, epochs):
        """A finalized target epoch should accept no rollover."""
        epochs.finalize_epoch(2, block_number=10)
        assert epochs.rollover_bonus(2, 1, amount=50, cap=100) == 0

    def test_finalize_records_block(self, epochs):
        """Finalization should freeze the epoch at the given block."""
        epoch = epochs.finalize_epoch(3, block_number=1_234)

        assert epoch.is_finalized
        assert epoch.finalized_block == 1_234
        assert epochs.is_finalized(3)

    def test_finalize_twice_fails(self, epochs):
        """An epoch can only be finalized once."""
        epochs.finalize_epoch(3, block_number=1)
        with pytest.raises(StateError):
            epochs.finalize_epoch(3, block_number=2)

    def test_reads_do_not_create_epochs(self, epochs):
        """Reading an unknown epoch should not register it."""
        epochs.get_epoch(42)
        assert not epochs.is_finalized(42)
        assert epochs.bonus_participants(42) == []

    def test_get_epoch_returns_copy(self, epochs):
        """Mutating a returned epoch should not affect stored state."""
        epochs.save_performance(1, 1, 10)
        epoch = epochs.get_epoch(1)
        epoch.ratings[1].performance_rating = 999

        assert epochs.get_epoch(1).get_rating(1).performance_rating == 10
