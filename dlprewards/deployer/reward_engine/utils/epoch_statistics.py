"""Vectorized summaries of an epoch's distribution progress."""

from typing import Dict, List, Sequence

import numpy as np

from dlprewards.deployer.utils.config import PERCENTAGE_DENOMINATOR
from ..models.participant_reward import EpochParticipantReward
from ..models.ranking import EpochRanking


def share_vector(ranking: EpochRanking) -> np.ndarray:
    """Ranked shares as fractions of 1.0, in rank order."""
    shares = np.array([e.share_percentage for e in ranking.entries], dtype=np.float64)
    return shares / PERCENTAGE_DENOMINATOR


def summarize_epoch(records: Sequence[EpochParticipantReward], number_of_tranches: int) -> Dict[str, float]:
    """
    Aggregate totals over every participant record of an epoch.

    Amounts are summed as Python ints (object arrays) so large balances are
    never truncated; ratios are floats.
    """
    if not records:
        return {
            "participants": 0,
            "total_entitlement": 0,
            "total_distributed": 0,
            "total_converted": 0,
            "total_penalty_withheld": 0,
            "total_rolled_over": 0,
            "distributed_ratio": 0.0,
            "mean_tranche_progress": 0.0,
            "completed_participants": 0,
        }

    entitlements = np.array([r.total_entitlement for r in records], dtype=object)
    distributed = np.array([r.distributed_amount for r in records], dtype=object)
    released = np.array([r.tranches_released for r in records], dtype=np.int64)
    converted = _tranche_totals(records, "token_reward_amount")
    rolled_over = _tranche_totals(records, "rolled_over_amount")
    withheld = np.array([r.total_penalty_withheld for r in records], dtype=object)

    total_entitlement = int(entitlements.sum())
    total_distributed = int(distributed.sum())

    return {
        "participants": len(records),
        "total_entitlement": total_entitlement,
        "total_distributed": total_distributed,
        "total_converted": int(converted.sum()),
        "total_penalty_withheld": int(withheld.sum()),
        "total_rolled_over": int(rolled_over.sum()),
        "distributed_ratio": float(total_distributed / total_entitlement) if total_entitlement else 0.0,
        "mean_tranche_progress": float(np.mean(released / number_of_tranches)),
        "completed_participants": int(np.count_nonzero(released >= number_of_tranches)),
    }


def _tranche_totals(records: Sequence[EpochParticipantReward], field_name: str) -> np.ndarray:
    totals: List[int] = [sum(getattr(t, field_name) for t in r.distributed_rewards) for r in records]
    return np.array(totals, dtype=object)
