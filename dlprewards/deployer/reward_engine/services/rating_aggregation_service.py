"""Combines stake and performance into a weighted participant score."""

from typing import List

from dlprewards.deployer.utils.config import MULTIPLIER_BASE, PERCENTAGE_DENOMINATOR, SCORE_PRECISION
from ..interfaces.rating_aggregator import RatingAggregator
from ..models.ranking import ParticipantScore, RatingPercentages
from ..models.reward_config import RewardConfig
from ..utils.fixed_point import mul_div
from .epoch_registry import EpochRegistry


def stake_multiplier(effective_stake: int, reward_config: RewardConfig) -> int:
    """
    Look up the multiplier for a stake on the breakpoint curve.

    The bucket index is ``effective_stake // stake_bucket_size``; buckets past
    the end of the table use the last entry.
    """
    table = reward_config.multiplier_table
    bucket = max(effective_stake, 0) // reward_config.stake_bucket_size
    return table[min(bucket, len(table) - 1)]


class RatingAggregationService(RatingAggregator):
    """Default implementation of rating aggregation."""

    def __init__(self, epoch_registry: EpochRegistry):
        self.epoch_registry = epoch_registry

    def score_participants(
        self,
        epoch_id: int,
        participant_ids: List[int],
        percentages: RatingPercentages,
        reward_config: RewardConfig
    ) -> List[ParticipantScore]:
        """
        Score = (stake% × stake_factor + performance% × normalized_performance) / 100%

        stake_factor is the curve multiplier scaled to SCORE_PRECISION and
        normalized_performance is the participant's fraction of the epoch's
        total performance, also scaled to SCORE_PRECISION.
        """
        epoch = self.epoch_registry.get_epoch(epoch_id)
        total_performance = epoch.total_performance_rating
        registry = self.epoch_registry.participant_registry

        scores = []
        for participant_id in participant_ids:
            rating = epoch.get_rating(participant_id)
            effective_stake = registry.stake_of(participant_id) + rating.stake_adjustment

            stake_factor = mul_div(stake_multiplier(effective_stake, reward_config), SCORE_PRECISION, MULTIPLIER_BASE)
            if total_performance > 0:
                normalized_performance = mul_div(rating.performance_rating, SCORE_PRECISION, total_performance)
            else:
                normalized_performance = 0

            score = (
                percentages.stake_percentage * stake_factor
                + percentages.performance_percentage * normalized_performance
            ) // PERCENTAGE_DENOMINATOR

            scores.append(ParticipantScore(
                participant_id=participant_id,
                effective_stake=effective_stake,
                stake_factor=stake_factor,
                normalized_performance=normalized_performance,
                score=score,
            ))

        return scores
