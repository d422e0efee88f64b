"""Tests for epoch distribution statistics."""

import numpy as np

from dlprewards.deployer.reward_engine.models.participant_reward import (
    DistributedReward,
    EpochParticipantReward,
)
from dlprewards.deployer.reward_engine.models.ranking import (
    EpochRanking,
    RankedParticipant,
    RatingPercentages,
)
from dlprewards.deployer.reward_engine.utils.epoch_statistics import share_vector, summarize_epoch


def _tranche(number, amount, converted, rolled_over=0):
    return DistributedReward(
        tranche_number=number,
        amount=amount,
        block_number=100 * number,
        token_reward_amount=converted,
        spare_token=0,
        spare_settlement=0,
        used_settlement_amount=amount,
        rolled_over_amount=rolled_over,
    )


def test_share_vector():
    """Shares should be returned as fractions of 1.0 in rank order."""
    ranking = EpochRanking(
        epoch_id=1,
        percentages=RatingPercentages(30_000, 70_000),
        entries=[
            RankedParticipant(participant_id=4, rank=1, score=10, share_percentage=75_000),
            RankedParticipant(participant_id=2, rank=2, score=5, share_percentage=25_000),
        ],
    )

    shares = share_vector(ranking)

    assert np.allclose(shares, [0.75, 0.25])
    assert np.isclose(shares.sum(), 1.0)


def test_summarize_epoch_totals():
    """Summary should aggregate entitlements, releases and conversions."""
    complete = EpochParticipantReward(epoch_id=1, participant_id=1, total_entitlement=200)
    complete.append_tranche(_tranche(1, 100, 98))
    complete.append_tranche(_tranche(2, 100, 97, rolled_over=3))

    partial = EpochParticipantReward(epoch_id=1, participant_id=2, total_entitlement=400, total_penalty_withheld=20)
    partial.append_tranche(_tranche(1, 200, 180))

    summary = summarize_epoch([complete, partial], number_of_tranches=2)

    assert summary["participants"] == 2
    assert summary["total_entitlement"] == 600
    assert summary["total_distributed"] == 400
    assert summary["total_converted"] == 375
    assert summary["total_penalty_withheld"] == 20
    assert summary["total_rolled_over"] == 3
    assert summary["completed_participants"] == 1
    assert summary["mean_tranche_progress"] == 0.75
    assert abs(summary["distributed_ratio"] - 400 / 600) < 1e-9


def test_summarize_large_amounts_are_exact():
    """18-decimal amounts should not be truncated."""
    big = 10 ** 27 + 1
    record = EpochParticipantReward(epoch_id=1, participant_id=1, total_entitlement=big)

    summary = summarize_epoch([record, record], number_of_tranches=90)

    assert summary["total_entitlement"] == 2 * big


def test_summarize_empty_epoch():
    """An epoch without records should summarize to zeros."""
    summary = summarize_epoch([], number_of_tranches=4)

    assert summary["participants"] == 0
    assert summary["distributed_ratio"] == 0.0
