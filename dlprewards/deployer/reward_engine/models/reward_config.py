"""Versioned configuration snapshot for epoch rewards."""

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Tuple

from dlprewards.deployer.utils import config
from dlprewards.deployer.utils.error_handling import log_and_raise_config_error
from ..utils.fixed_point import is_valid_percentage


@dataclass(frozen=True)
class RewardConfig:
    """
    Immutable set of every recognized reward option.

    A new instance (with a higher version) is produced for each administrative
    update; epochs bind the instance current at schedule initialization, so
    later updates never alter in-flight schedules.
    """
    version: int = 1
    number_of_blocks_between_tranches: int = config.NUMBER_OF_BLOCKS_BETWEEN_TRANCHES
    number_of_tranches: int = config.NUMBER_OF_TRANCHES
    remediation_window: int = config.REMEDIATION_WINDOW
    reward_percentage: int = config.REWARD_PERCENTAGE
    maximum_slippage_percentage: int = config.MAXIMUM_SLIPPAGE_PERCENTAGE
    stake_weight_percentage: int = config.STAKE_WEIGHT_PERCENTAGE
    performance_weight_percentage: int = config.PERFORMANCE_WEIGHT_PERCENTAGE
    multiplier_table: Tuple[int, ...] = field(default=config.STAKE_MULTIPLIER_TABLE)
    stake_bucket_size: int = config.STAKE_BUCKET_SIZE
    number_of_top_participants: int = config.NUMBER_OF_TOP_PARTICIPANTS
    epoch_reward_amount: int = config.EPOCH_REWARD_AMOUNT
    settlement_asset: str = config.SETTLEMENT_ASSET
    reward_asset: str = config.REWARD_ASSET

    def __post_init__(self):
        """Validation after initialization."""
        # Lists are accepted for convenience but stored as a tuple
        object.__setattr__(self, "multiplier_table", tuple(self.multiplier_table))

        for key in (
            "reward_percentage",
            "maximum_slippage_percentage",
            "stake_weight_percentage",
            "performance_weight_percentage",
        ):
            value = getattr(self, key)
            if not is_valid_percentage(value):
                log_and_raise_config_error(f"{key} must be an integer percentage in range", key, value)

        for key in (
            "number_of_blocks_between_tranches",
            "remediation_window",
            "number_of_top_participants",
            "epoch_reward_amount",
        ):
            if getattr(self, key) < 0:
                log_and_raise_config_error(f"{key} must be non-negative", key, getattr(self, key))

        if self.number_of_tranches <= 0:
            log_and_raise_config_error("number_of_tranches must be positive", "number_of_tranches", self.number_of_tranches)

        if self.stake_bucket_size <= 0:
            log_and_raise_config_error("stake_bucket_size must be positive", "stake_bucket_size", self.stake_bucket_size)

        table = self.multiplier_table
        if not table:
            log_and_raise_config_error("multiplier_table cannot be empty", "multiplier_table", table)
        if any(later < earlier for earlier, later in zip(table, table[1:])):
            log_and_raise_config_error("multiplier_table must be non-decreasing", "multiplier_table", table)

        if not self.settlement_asset or not self.reward_asset:
            log_and_raise_config_error("asset names cannot be empty", "settlement_asset", self.settlement_asset)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["multiplier_table"] = list(self.multiplier_table)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RewardConfig':
        """Create from dictionary."""
        return cls(**data)
