"""Tests for entitlement calculation."""

import dataclasses

import pytest

from dlprewards.deployer.reward_engine.models.ranking import EpochRanking, RankedParticipant, RatingPercentages
from dlprewards.deployer.reward_engine.services.entitlement_calculation_service import EntitlementCalculationService
from dlprewards.deployer.reward_engine.services.epoch_registry import EpochRegistry


@pytest.fixture
def epochs(registry):
    return EpochRegistry(registry)


@pytest.fixture
def service(epochs):
    return EntitlementCalculationService(epochs)


def _ranking(*shares):
    return EpochRanking(
        epoch_id=1,
        percentages=RatingPercentages(30_000, 70_000),
        entries=[
            RankedParticipant(participant_id=pid, rank=rank, score=share, share_percentage=share)
            for rank, (pid, share) in enumerate(shares, start=1)
        ],
    )


class TestCalculate:
    def test_pool_split_by_share(self, service, reward_config):
        """Ranked reward amounts should follow shares and sum to the pool."""
        records = service.calculate(_ranking((4, 60_000), (2, 40_000)), reward_config)

        assert [(r.participant_id, r.reward_amount, r.rank) for r in records] == [(4, 600, 1), (2, 400, 2)]
        assert sum(r.total_entitlement for r in records) == 1_000

    def test_rounding_dust_goes_to_first_ranked(self, service, reward_config):
        """Indivisible pool units should go to rank 1."""
        records = service.calculate(_ranking((4, 33_334), (2, 33_333), (1, 33_333)), reward_config)

        assert [r.reward_amount for r in records] == [334, 333, 333]

    def test_reward_percentage_scales_pool(self, service, reward_config):
        """Only reward_percentage of the epoch amount should be distributed."""
        config = dataclasses.replace(reward_config, reward_percentage=50_000)

        records = service.calculate(_ranking((4, 100_000)), config)

        assert records[0].total_entitlement == 500

    def test_bonus_added_and_bonus_only_included(self, service, epochs, reward_config):
        """Bonuses should add to entitlements, including for unranked participants."""
        epochs.add_bonus(1, 4, 10)
        epochs.add_bonus(1, 3, 25)

        records = {r.participant_id: r for r in service.calculate(_ranking((4, 60_000), (2, 40_000)), reward_config)}

        assert records[4].total_entitlement == 610
        assert records[4].reward_amount == 600
        assert records[3].total_entitlement == 25
        assert records[3].reward_amount == 0
        assert records[3].rank is None

    def test_empty_ranking(self, service, reward_config):
        """No ranked participants and no bonuses should give no entitlements."""
        assert service.calculate(_ranking(), reward_config) == []
