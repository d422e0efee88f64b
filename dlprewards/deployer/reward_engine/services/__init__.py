"""Core services for the reward distribution engine."""

from .access_control import AccessControl, ADMIN_ROLE, ORACLE_ROLE, REWARD_DEPLOYER_ROLE
from .config_registry import ConfigRegistry
from .epoch_registry import EpochRegistry
from .rating_aggregation_service import RatingAggregationService, stake_multiplier
from .top_k_selection_service import TopKSelectionService
from .reward_arena import RewardArena
from .tranche_scheduler import TrancheScheduler
from .entitlement_calculation_service import EntitlementCalculationService
from .penalty_ledger import PenaltyLedger
from .distribution_service import DistributionService

__all__ = [
    "AccessControl",
    "ADMIN_ROLE",
    "ORACLE_ROLE",
    "REWARD_DEPLOYER_ROLE",
    "ConfigRegistry",
    "EpochRegistry",
    "RatingAggregationService",
    "stake_multiplier",
    "TopKSelectionService",
    "RewardArena",
    "TrancheScheduler",
    "EntitlementCalculationService",
    "PenaltyLedger",
    "DistributionService",
]
