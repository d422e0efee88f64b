"""Utility functions for reward engine."""

from .fixed_point import (
    mul_div,
    percentage_of,
    is_valid_percentage,
    split_proportionally
)
from .reward_snapshot import (
    save_reward_snapshot,
    load_reward_snapshot
)
from .epoch_statistics import (
    share_vector,
    summarize_epoch
)

__all__ = [
    "mul_div",
    "percentage_of",
    "is_valid_percentage",
    "split_proportionally",
    "save_reward_snapshot",
    "load_reward_snapshot",
    "share_vector",
    "summarize_epoch",
]
