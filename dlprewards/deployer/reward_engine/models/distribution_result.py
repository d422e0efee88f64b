"""Data models for batch distribution results."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .participant_reward import DistributedReward


@dataclass
class DistributionOutcome:
    """Result of processing one (epoch, participant) unit in a batch."""
    epoch_id: int
    participant_id: int
    success: bool
    record: Optional[DistributedReward] = None
    error_kind: str = ""
    error_message: str = ""
    recipient: Optional[str] = None

    @classmethod
    def create_error_outcome(cls, epoch_id: int, participant_id: int, error: Exception) -> 'DistributionOutcome':
        """Create a failed outcome from an engine error."""
        return cls(
            epoch_id=epoch_id,
            participant_id=participant_id,
            success=False,
            error_kind=getattr(error, "kind", type(error).__name__),
            error_message=str(error),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "epoch_id": self.epoch_id,
            "participant_id": self.participant_id,
            "success": self.success,
            "record": self.record.to_dict() if self.record else None,
            "error_kind": self.error_kind,
            "error_message": self.error_message,
            "recipient": self.recipient,
        }


class DistributionReport:
    """Per-participant outcomes of one ``distribute_rewards`` call."""

    def __init__(self, epoch_id: int):
        self.epoch_id = epoch_id
        self.outcomes: Dict[int, DistributionOutcome] = {}

    def add_outcome(self, outcome: DistributionOutcome):
        """Add the outcome for a participant."""
        self.outcomes[outcome.participant_id] = outcome

    def get_outcome(self, participant_id: int) -> Optional[DistributionOutcome]:
        """Get the outcome for a specific participant."""
        return self.outcomes.get(participant_id)

    @property
    def succeeded(self) -> List[int]:
        return [pid for pid, o in self.outcomes.items() if o.success]

    @property
    def failed(self) -> List[int]:
        return [pid for pid, o in self.outcomes.items() if not o.success]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "epoch_id": self.epoch_id,
            "outcomes": [o.to_dict() for o in self.outcomes.values()],
        }
