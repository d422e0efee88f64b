"""Turns a ranking into per-participant epoch entitlements."""

from typing import Dict, List

import bittensor as bt

from ..models.participant_reward import EpochParticipantReward
from ..models.ranking import EpochRanking
from ..models.reward_config import RewardConfig
from ..utils.fixed_point import percentage_of, split_proportionally
from .epoch_registry import EpochRegistry


class EntitlementCalculationService:
    """Splits the epoch reward pool by share and adds each participant's bonus."""

    def __init__(self, epoch_registry: EpochRegistry):
        self.epoch_registry = epoch_registry

    def reward_pool(self, reward_config: RewardConfig) -> int:
        return percentage_of(reward_config.epoch_reward_amount, reward_config.reward_percentage)

    def calculate(self, ranking: EpochRanking, reward_config: RewardConfig) -> List[EpochParticipantReward]:
        """
        Compute entitlements for every ranked or bonus-holding participant.

        The pool is divided by share percentage with the rounding remainder on
        the first-ranked entry, so ranked reward amounts sum to the pool.
        Participants outside the ranking who hold a bonus are included with a
        zero reward amount.

        Returns:
            Records ordered by rank, then bonus-only participants by id
        """
        epoch = self.epoch_registry.get_epoch(ranking.epoch_id)
        pool = self.reward_pool(reward_config)
        amounts = split_proportionally(pool, [entry.share_percentage for entry in ranking.entries])

        entitlements: Dict[int, EpochParticipantReward] = {}
        for entry, amount in zip(ranking.entries, amounts):
            bonus = epoch.get_rating(entry.participant_id).bonus_amount
            entitlements[entry.participant_id] = EpochParticipantReward(
                epoch_id=ranking.epoch_id,
                participant_id=entry.participant_id,
                total_entitlement=amount + bonus,
                reward_amount=amount,
                rank=entry.rank,
                share_percentage=entry.share_percentage,
            )

        for participant_id in self.epoch_registry.bonus_participants(ranking.epoch_id):
            if participant_id in entitlements:
                continue
            entitlements[participant_id] = EpochParticipantReward(
                epoch_id=ranking.epoch_id,
                participant_id=participant_id,
                total_entitlement=epoch.get_rating(participant_id).bonus_amount,
            )

        bt.logging.info(
            f"Epoch {ranking.epoch_id}: pool {pool} split across {len(ranking)} ranked participants, "
            f"{len(entitlements) - len(ranking)} bonus-only"
        )
        return list(entitlements.values())
