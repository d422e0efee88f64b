"""Epoch and per-participant rating records."""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class EpochParticipantRating:
    """Oracle and administrator inputs for one participant in one epoch."""
    participant_id: int
    performance_rating: int = 0
    stake_adjustment: int = 0  # signed delta on the registry stake
    bonus_amount: int = 0


@dataclass
class Epoch:
    """
    A rating period identified by a monotonically increasing id.

    Created implicitly when first referenced. Once ``is_finalized`` is set it
    never goes back, and ratings can no longer change.
    """
    epoch_id: int
    total_performance_rating: int = 0
    is_finalized: bool = False
    finalized_block: Optional[int] = None
    ratings: Dict[int, EpochParticipantRating] = field(default_factory=dict)

    def get_rating(self, participant_id: int) -> EpochParticipantRating:
        """Get the rating for a participant, or an all-zero rating."""
        return self.ratings.get(participant_id) or EpochParticipantRating(participant_id=participant_id)

    def rating_for_update(self, participant_id: int) -> EpochParticipantRating:
        """Get the stored rating for a participant, creating it if missing."""
        if participant_id not in self.ratings:
            self.ratings[participant_id] = EpochParticipantRating(participant_id=participant_id)
        return self.ratings[participant_id]
