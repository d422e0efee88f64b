"""Data models for tranche payouts."""

from dataclasses import dataclass, asdict, field, replace
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class DistributedReward:
    """One executed tranche. Append-only: never modified once written."""
    tranche_number: int  # 1-based
    amount: int  # gross settlement-asset amount released
    block_number: int
    token_reward_amount: int  # reward asset credited to the participant
    spare_token: int  # reward asset left over by the conversion
    spare_settlement: int  # settlement asset left over by the conversion
    used_settlement_amount: int  # settlement asset consumed by the conversion
    penalty_amount: int = 0  # withheld from this tranche
    rolled_over_amount: int = 0  # unused settlement asset added as next-epoch bonus
    retained_amount: int = 0  # unused settlement asset above the rollover cap

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DistributedReward':
        """Create from dictionary."""
        return cls(**data)


@dataclass
class EpochParticipantReward:
    """
    Reward state of one participant in one epoch.

    ``distributed_rewards`` is a tuple that is replaced as a whole when a
    tranche is appended, so a copy taken by a reader always holds complete
    records only.
    """
    epoch_id: int
    participant_id: int
    total_entitlement: int
    reward_amount: int = 0  # ranking share of the epoch budget, bonus excluded
    rank: Optional[int] = None
    share_percentage: int = 0
    distributed_amount: int = 0
    tranches_released: int = 0
    distributed_rewards: Tuple[DistributedReward, ...] = field(default_factory=tuple)
    penalty_amount: int = 0  # total to withhold over the schedule
    distributed_penalty_amount: int = 0  # withheld, awaiting withdrawal
    total_penalty_withheld: int = 0  # lifetime total, never decreases

    def append_tranche(self, record: DistributedReward) -> None:
        """Append a tranche record and advance the counters."""
        self.distributed_rewards = self.distributed_rewards + (record,)
        self.distributed_amount += record.amount
        self.tranches_released += 1

    def snapshot(self) -> 'EpochParticipantReward':
        """Detached copy for readers."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "epoch_id": self.epoch_id,
            "participant_id": self.participant_id,
            "total_entitlement": self.total_entitlement,
            "reward_amount": self.reward_amount,
            "rank": self.rank,
            "share_percentage": self.share_percentage,
            "distributed_amount": self.distributed_amount,
            "tranches_released": self.tranches_released,
            "distributed_rewards": [r.to_dict() for r in self.distributed_rewards],
            "penalty_amount": self.penalty_amount,
            "distributed_penalty_amount": self.distributed_penalty_amount,
            "total_penalty_withheld": self.total_penalty_withheld,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EpochParticipantReward':
        """Create from dictionary."""
        return cls(
            epoch_id=data["epoch_id"],
            participant_id=data["participant_id"],
            total_entitlement=data["total_entitlement"],
            reward_amount=data.get("reward_amount", 0),
            rank=data.get("rank"),
            share_percentage=data.get("share_percentage", 0),
            distributed_amount=data.get("distributed_amount", 0),
            tranches_released=data.get("tranches_released", 0),
            distributed_rewards=tuple(
                DistributedReward.from_dict(r) for r in data.get("distributed_rewards", [])
            ),
            penalty_amount=data.get("penalty_amount", 0),
            distributed_penalty_amount=data.get("distributed_penalty_amount", 0),
            total_penalty_withheld=data.get("total_penalty_withheld", 0),
        )
