"""Deterministic top-K ranking with renormalized reward shares."""

from typing import Iterable, List, Optional

import bittensor as bt

from dlprewards.deployer.utils.config import PERCENTAGE_DENOMINATOR
from dlprewards.deployer.utils.error_handling import (
    InvalidPercentageSum,
    UnknownParticipant,
    log_and_raise_validation_error,
)
from ..interfaces.participant_registry import ParticipantRegistry
from ..interfaces.rating_aggregator import RatingAggregator
from ..models.ranking import EpochRanking, RankedParticipant, RatingPercentages
from ..models.reward_config import RewardConfig
from ..utils.fixed_point import is_valid_percentage, split_proportionally
from .config_registry import ConfigRegistry


class TopKSelectionService:
    """
    Ranks candidates by score and renormalizes shares over the selected set.

    Read-only: nothing here mutates engine state, so rankings can be computed
    while distributions are running.
    """

    def __init__(
        self,
        aggregator: RatingAggregator,
        participant_registry: ParticipantRegistry,
        config_registry: ConfigRegistry
    ):
        self.aggregator = aggregator
        self.participant_registry = participant_registry
        self.config_registry = config_registry

    def select_top(
        self,
        epoch_id: int,
        k: int,
        candidate_ids: Optional[Iterable[int]] = None,
        percentages: Optional[RatingPercentages] = None,
        reward_config: Optional[RewardConfig] = None
    ) -> EpochRanking:
        """
        Select the top ``k`` candidates of an epoch.

        Args:
            epoch_id: Epoch whose ratings are used
            k: Number of entries requested
            candidate_ids: Explicit candidate subset (None = every registered participant)
            percentages: Caller-supplied stake/performance weights (None = configured)
            reward_config: Config snapshot (None = current version)

        Returns:
            EpochRanking with ``min(k, len(candidates))`` entries whose shares sum
            to exactly PERCENTAGE_DENOMINATOR

        Raises:
            InvalidPercentageSum: If a supplied percentage is out of range
            UnknownParticipant: If a candidate is not registered
        """
        reward_config = reward_config or self.config_registry.current()

        if percentages is not None:
            self._validate_percentages(epoch_id, percentages)
        else:
            percentages = RatingPercentages(
                stake_percentage=reward_config.stake_weight_percentage,
                performance_percentage=reward_config.performance_weight_percentage,
            )

        candidates = self._resolve_candidates(epoch_id, candidate_ids)
        ranking = EpochRanking(epoch_id=epoch_id, percentages=percentages)
        if k <= 0 or not candidates:
            return ranking

        scores = self.aggregator.score_participants(epoch_id, candidates, percentages, reward_config)
        selected = sorted(scores, key=lambda s: (-s.score, s.participant_id))[:k]

        shares = split_proportionally(PERCENTAGE_DENOMINATOR, [s.score for s in selected])

        ranking.entries = [
            RankedParticipant(
                participant_id=s.participant_id,
                rank=position,
                score=s.score,
                share_percentage=share,
                effective_stake=s.effective_stake,
                normalized_performance=s.normalized_performance,
            )
            for position, (s, share) in enumerate(zip(selected, shares), start=1)
        ]

        bt.logging.debug(
            f"Epoch {epoch_id}: top {len(ranking)} of {len(candidates)} candidates "
            f"-> {ranking.participant_ids}"
        )
        return ranking

    def select_top_default(
        self,
        epoch_id: int,
        k: int,
        candidate_ids: Optional[Iterable[int]] = None
    ) -> EpochRanking:
        """Select the top ``k`` using the configured rating weights."""
        return self.select_top(epoch_id, k, candidate_ids=candidate_ids)

    def _resolve_candidates(self, epoch_id: int, candidate_ids: Optional[Iterable[int]]) -> List[int]:
        registry = self.participant_registry
        if candidate_ids is None:
            return sorted(set(registry.participant_ids()))

        candidates = sorted(set(candidate_ids))
        for participant_id in candidates:
            if not registry.exists(participant_id):
                log_and_raise_validation_error(
                    UnknownParticipant, f"Participant {participant_id} is not registered",
                    epoch_id=epoch_id, participant_id=participant_id
                )
        return candidates

    @staticmethod
    def _validate_percentages(epoch_id: int, percentages: RatingPercentages) -> None:
        for name, value in (
            ("stake_percentage", percentages.stake_percentage),
            ("performance_percentage", percentages.performance_percentage),
        ):
            if not is_valid_percentage(value):
                log_and_raise_validation_error(
                    InvalidPercentageSum,
                    f"{name} must be within [0, {PERCENTAGE_DENOMINATOR}], got {value}",
                    epoch_id=epoch_id,
                )
