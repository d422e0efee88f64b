"""Abstract interface for rating aggregation strategies."""

from abc import ABC, abstractmethod
from typing import List

from ..models.ranking import ParticipantScore, RatingPercentages
from ..models.reward_config import RewardConfig


class RatingAggregator(ABC):
    """Abstract interface for rating aggregation strategies."""

    @abstractmethod
    def score_participants(
        self,
        epoch_id: int,
        participant_ids: List[int],
        percentages: RatingPercentages,
        reward_config: RewardConfig
    ) -> List[ParticipantScore]:
        """Compute a weighted score for each participant.

        Args:
            epoch_id: Epoch whose ratings are used
            participant_ids: Participants to score (order preserved)
            percentages: Stake and performance weights
            reward_config: Snapshot providing the multiplier table and bucket size
        """
        pass
