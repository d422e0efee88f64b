"""Reward deployment orchestrator - wires ratings, ranking, schedules and distribution."""

import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import bittensor as bt

from dlprewards.utils.logging import log_reward_event, setup_events_logger
from dlprewards.deployer.utils.config import ENABLE_REWARD_SNAPSHOTS, EVENTS_LOG_DIR, EVENTS_RETENTION_SIZE
from dlprewards.deployer.utils.error_handling import (
    EpochNotFinalized,
    log_and_raise_state_error,
    safe_operation,
)
from .interfaces.chain_clock import ChainClock
from .interfaces.participant_registry import ParticipantRegistry
from .interfaces.swap_venue import PriceSource, SwapVenue
from .interfaces.treasury import Treasury
from .models.distribution_result import DistributionReport
from .models.epoch import Epoch
from .models.participant_reward import EpochParticipantReward
from .models.ranking import EpochRanking, RatingPercentages
from .models.reward_config import RewardConfig
from .models.schedule import RewardScheduleConfig, TrancheState
from .services.access_control import ADMIN_ROLE, ORACLE_ROLE, REWARD_DEPLOYER_ROLE, AccessControl
from .services.config_registry import ConfigRegistry
from .services.distribution_service import DistributionService
from .services.entitlement_calculation_service import EntitlementCalculationService
from .services.epoch_registry import EpochRegistry
from .services.penalty_ledger import PenaltyLedger
from .services.rating_aggregation_service import RatingAggregationService
from .services.reward_arena import RewardArena
from .services.top_k_selection_service import TopKSelectionService
from .services.tranche_scheduler import TrancheScheduler
from .utils.epoch_statistics import share_vector, summarize_epoch
from .utils.reward_snapshot import save_reward_snapshot


class RewardOrchestrator:
    """
    Coordinates the complete reward deployment workflow.

    finalize epoch → rank → compute entitlements → bind schedule → distribute tranches

    Every state-changing entry point takes the caller's identity first and is
    checked against ``access_control``. All services share one engine lock.
    """

    def __init__(
        self,
        participant_registry: ParticipantRegistry,
        treasury: Treasury,
        swap_venue: SwapVenue,
        clock: ChainClock,
        access_control: AccessControl,
        price_source: Optional[PriceSource] = None,
        config_registry: Optional[ConfigRegistry] = None,
        enable_snapshots: bool = ENABLE_REWARD_SNAPSHOTS,
        snapshot_root: Optional[Path] = None,
        events_log_dir: Optional[str] = EVENTS_LOG_DIR
    ):
        self.access_control = access_control
        self.clock = clock
        self.config_registry = config_registry or ConfigRegistry()
        self.lock = threading.RLock()

        self.epoch_registry = EpochRegistry(participant_registry, lock=self.lock)
        self.arena = RewardArena(lock=self.lock)
        self.aggregator = RatingAggregationService(self.epoch_registry)
        self.selector = TopKSelectionService(self.aggregator, participant_registry, self.config_registry)
        self.entitlements = EntitlementCalculationService(self.epoch_registry)
        self.scheduler = TrancheScheduler(self.epoch_registry, self.arena)
        self.penalty_ledger = PenaltyLedger(self.arena, treasury, self.config_registry)
        self.distributor = DistributionService(
            epoch_registry=self.epoch_registry,
            scheduler=self.scheduler,
            penalty_ledger=self.penalty_ledger,
            config_registry=self.config_registry,
            participant_registry=participant_registry,
            treasury=treasury,
            swap_venue=swap_venue,
            clock=clock,
            price_source=price_source,
        )

        self.enable_snapshots = enable_snapshots
        self.snapshot_root = snapshot_root
        self.events_logger = setup_events_logger(events_log_dir, EVENTS_RETENTION_SIZE) if events_log_dir else None
        self._rankings: Dict[int, EpochRanking] = {}

    # ───────────────────────── configuration ─────────────────────────

    def update_config(self, caller: str, **changes) -> RewardConfig:
        """Create a new config version; only epochs initialized afterwards use it."""
        self.access_control.require(ADMIN_ROLE, caller)
        return self.config_registry.update(**changes)

    # ───────────────────────── epoch inputs ─────────────────────────

    def save_epoch_performances(self, caller: str, epoch_id: int, performances: Iterable[Tuple[int, int]]) -> None:
        self.access_control.require(ORACLE_ROLE, caller)
        self.epoch_registry.save_performances(epoch_id, performances)

    def adjust_stake(self, caller: str, epoch_id: int, participant_id: int, delta: int) -> int:
        self.access_control.require(ADMIN_ROLE, caller)
        return self.epoch_registry.adjust_stake(epoch_id, participant_id, delta)

    def add_epoch_bonus(self, caller: str, epoch_id: int, participant_id: int, amount: int) -> int:
        self.access_control.require(ADMIN_ROLE, caller)
        return self.epoch_registry.add_bonus(epoch_id, participant_id, amount)

    def override_epoch_bonus(self, caller: str, epoch_id: int, participant_id: int, amount: int) -> int:
        self.access_control.require(ADMIN_ROLE, caller)
        return self.epoch_registry.override_bonus(epoch_id, participant_id, amount)

    def finalize_epoch(self, caller: str, epoch_id: int) -> Epoch:
        """Freeze an epoch's ratings at the current block."""
        self.access_control.require(ADMIN_ROLE, caller)
        return self.epoch_registry.finalize_epoch(epoch_id, self.clock.current_block())

    # ───────────────────────── ranking & initialization ─────────────────────────

    def rank_epoch(
        self,
        epoch_id: int,
        k: Optional[int] = None,
        candidate_ids: Optional[Iterable[int]] = None,
        percentages: Optional[RatingPercentages] = None
    ) -> EpochRanking:
        """Read-only top-K preview using the current config."""
        if k is None:
            k = self.config_registry.current().number_of_top_participants
        return self.selector.select_top(epoch_id, k, candidate_ids=candidate_ids, percentages=percentages)

    def initialize_epoch_rewards(self, caller: str, epoch_id: int) -> EpochRanking:
        """
        Rank a finalized epoch and bind its tranche schedule.

        The current config version is bound to the epoch; later config updates
        do not affect it.

        Raises:
            EpochNotFinalized: If the epoch has not been finalized
            AlreadyInitialized: If the epoch rewards were already initialized
        """
        self.access_control.require(ADMIN_ROLE, caller)
        if not self.epoch_registry.is_finalized(epoch_id):
            log_and_raise_state_error(EpochNotFinalized, f"Epoch {epoch_id} is not finalized", epoch_id=epoch_id)

        config = self.config_registry.current()
        with self.lock:
            ranking = self.selector.select_top(epoch_id, config.number_of_top_participants, reward_config=config)
            records = self.entitlements.calculate(ranking, config)

            self.scheduler.initialize(
                epoch_id,
                distribution_interval=config.number_of_blocks_between_tranches,
                number_of_tranches=config.number_of_tranches,
                remediation_window=config.remediation_window,
                config_version=config.version,
            )
            for record in records:
                self.scheduler.register_entitlement(
                    epoch_id,
                    record.participant_id,
                    record.total_entitlement,
                    reward_amount=record.reward_amount,
                    rank=record.rank,
                    share_percentage=record.share_percentage,
                )
            self._rankings[epoch_id] = ranking

        shares = share_vector(ranking)
        bt.logging.info(
            f"🎯 Epoch {epoch_id} rewards initialized: {len(records)} entitlements, "
            f"top share {shares.max() if shares.size else 0:.4f}, config v{config.version}"
        )
        self._save_snapshot(epoch_id)
        return ranking

    # ───────────────────────── distribution ─────────────────────────

    def distribute_rewards(
        self,
        caller: str,
        epoch_id: int,
        participant_ids: Optional[Iterable[int]] = None
    ) -> DistributionReport:
        """
        Release the next eligible tranche for each participant.

        ``participant_ids`` defaults to every participant with an entitlement
        in the epoch.
        """
        self.access_control.require(REWARD_DEPLOYER_ROLE, caller)
        if participant_ids is None:
            participant_ids = [r.participant_id for r in self.arena.epoch_records(epoch_id)]

        report = self.distributor.distribute_rewards(epoch_id, participant_ids)

        for outcome in report.outcomes.values():
            if outcome.record is not None:
                self._log_event("tranche_distributed", outcome.to_dict())

        summary = self.epoch_summary(epoch_id)
        bt.logging.info(
            f"✅ Epoch {epoch_id}: {summary['total_distributed']}/{summary['total_entitlement']} distributed "
            f"({summary['distributed_ratio']:.2%}), {summary['completed_participants']}/{summary['participants']} complete"
        )
        self._save_snapshot(epoch_id)
        return report

    # ───────────────────────── penalties ─────────────────────────

    def set_penalty(self, caller: str, epoch_id: int, participant_id: int, amount: int) -> int:
        self.access_control.require(ADMIN_ROLE, caller)
        return self.penalty_ledger.set_penalty(epoch_id, participant_id, amount)

    def withdraw_epoch_dlp_penalty_amount(self, caller: str, epoch_id: int, participant_id: int, recipient: str) -> int:
        self.access_control.require(ADMIN_ROLE, caller)
        amount = self.penalty_ledger.withdraw_epoch_dlp_penalty_amount(epoch_id, participant_id, recipient)
        self._log_event("penalty_withdrawn", {
            "epoch_id": epoch_id,
            "participant_id": participant_id,
            "recipient": recipient,
            "amount": amount,
        })
        return amount

    # ───────────────────────── read views ─────────────────────────

    def get_epoch(self, epoch_id: int) -> Epoch:
        return self.epoch_registry.get_epoch(epoch_id)

    def get_ranking(self, epoch_id: int) -> Optional[EpochRanking]:
        """Ranking bound at initialization (None before)."""
        with self.lock:
            return self._rankings.get(epoch_id)

    def get_schedule(self, epoch_id: int) -> Optional[RewardScheduleConfig]:
        return self.arena.get_schedule(epoch_id)

    def get_participant_reward(self, epoch_id: int, participant_id: int) -> Optional[EpochParticipantReward]:
        return self.arena.get_record(epoch_id, participant_id)

    def get_epoch_rewards(self, epoch_id: int) -> List[EpochParticipantReward]:
        return self.arena.epoch_records(epoch_id)

    def tranche_state(self, epoch_id: int, participant_id: int) -> TrancheState:
        return self.scheduler.state(epoch_id, participant_id, self.clock.current_block())

    def epoch_summary(self, epoch_id: int) -> Dict:
        schedule = self.arena.get_schedule(epoch_id)
        number_of_tranches = schedule.number_of_tranches if schedule else 1
        return summarize_epoch(self.arena.epoch_records(epoch_id), number_of_tranches)

    # ───────────────────────── helpers ─────────────────────────

    def _log_event(self, name: str, payload: Dict) -> None:
        if self.events_logger is not None:
            log_reward_event(self.events_logger, name, payload)

    @safe_operation("save reward snapshot", default_return="")
    def _save_snapshot(self, epoch_id: int) -> str:
        if not self.enable_snapshots:
            return ""

        ranking = self.get_ranking(epoch_id)
        schedule = self.arena.get_schedule(epoch_id)
        snapshot_data = {
            "epoch_id": epoch_id,
            "created_at": datetime.now().isoformat(),
            "config_version": schedule.config_version if schedule else None,
            "schedule": schedule.to_dict() if schedule else None,
            "ranking": ranking.to_dict() if ranking else {"entries": []},
            "summary": self.epoch_summary(epoch_id),
            "rewards": [r.to_dict() for r in self.arena.epoch_records(epoch_id)],
        }
        return save_reward_snapshot(epoch_id, snapshot_data, root=self.snapshot_root)
