"""Data models for the reward distribution engine."""

from .epoch import Epoch, EpochParticipantRating
from .schedule import PendingTranche, RewardScheduleConfig, TrancheState
from .participant_reward import DistributedReward, EpochParticipantReward
from .ranking import RatingPercentages, ParticipantScore, RankedParticipant, EpochRanking
from .distribution_result import DistributionOutcome, DistributionReport
from .reward_config import RewardConfig

__all__ = [
    "Epoch",
    "EpochParticipantRating",
    "RewardScheduleConfig",
    "TrancheState",
    "PendingTranche",
    "DistributedReward",
    "EpochParticipantReward",
    "RatingPercentages",
    "ParticipantScore",
    "RankedParticipant",
    "EpochRanking",
    "DistributionOutcome",
    "DistributionReport",
    "RewardConfig",
]
