"""Data models for epoch rankings."""

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RatingPercentages:
    """Stake and performance weights, fixed-point over PERCENTAGE_DENOMINATOR."""
    stake_percentage: int
    performance_percentage: int


@dataclass(frozen=True)
class ParticipantScore:
    """Weighted score of one participant and the components it was built from."""
    participant_id: int
    effective_stake: int
    stake_factor: int
    normalized_performance: int
    score: int


@dataclass(frozen=True)
class RankedParticipant:
    """One entry of a top-K ranking."""
    participant_id: int
    rank: int  # 1-based
    score: int
    share_percentage: int
    effective_stake: int = 0
    normalized_performance: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)


@dataclass
class EpochRanking:
    """Top-K selection for an epoch; shares sum to PERCENTAGE_DENOMINATOR when non-empty."""
    epoch_id: int
    percentages: RatingPercentages
    entries: List[RankedParticipant] = field(default_factory=list)

    @property
    def participant_ids(self) -> List[int]:
        return [entry.participant_id for entry in self.entries]

    def get_entry(self, participant_id: int) -> Optional[RankedParticipant]:
        """Get the entry for a participant, if ranked."""
        return next((e for e in self.entries if e.participant_id == participant_id), None)

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "epoch_id": self.epoch_id,
            "percentages": asdict(self.percentages),
            "entries": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EpochRanking':
        """Create from dictionary."""
        return cls(
            epoch_id=data["epoch_id"],
            percentages=RatingPercentages(**data["percentages"]),
            entries=[RankedParticipant(**entry) for entry in data.get("entries", [])],
        )
