"""Data model for per-epoch tranche schedules."""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict


class TrancheState(str, Enum):
    UNINITIALIZED = "uninitialized"
    PENDING = "pending"
    ELIGIBLE = "eligible"
    COMPLETE = "complete"


@dataclass(frozen=True)
class RewardScheduleConfig:
    """Tranche schedule bound to an epoch at reward initialization."""
    epoch_id: int
    distribution_interval: int
    number_of_tranches: int
    remediation_window: int
    config_version: int

    def tranche_gross_amount(self, total_entitlement: int, tranche_index: int) -> int:
        """
        Gross amount of tranche ``tranche_index`` (0-based).

        Every tranche is ``total // N`` except the final one, which also takes
        the integer-division remainder.
        """
        base = total_entitlement // self.number_of_tranches
        if tranche_index == self.number_of_tranches - 1:
            return total_entitlement - base * (self.number_of_tranches - 1)
        return base

    def eligible_block(self, finalized_block: int, tranche_index: int) -> int:
        """First block at which tranche ``tranche_index`` may be released."""
        return finalized_block + self.remediation_window + tranche_index * self.distribution_interval

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)


@dataclass(frozen=True)
class PendingTranche:
    """The next tranche of a participant, ready for release."""
    tranche_index: int  # 0-based
    gross_amount: int
    eligible_block: int
    is_final: bool

    @property
    def tranche_number(self) -> int:
        return self.tranche_index + 1
