"""Per-epoch tranche schedules and per-participant release state."""

from typing import Optional

import bittensor as bt

from dlprewards.deployer.utils.error_handling import (
    AlreadyComplete,
    AlreadyInitialized,
    EpochNotFinalized,
    InvalidParameters,
    NotInitialized,
    NotYetEligible,
    log_and_raise_state_error,
    log_and_raise_validation_error,
)
from ..models.participant_reward import DistributedReward, EpochParticipantReward
from ..models.schedule import PendingTranche, RewardScheduleConfig, TrancheState
from .epoch_registry import EpochRegistry
from .reward_arena import RewardArena


class TrancheScheduler:
    """
    Splits each entitlement into N tranches released at fixed block intervals.

    Tranche ``i`` becomes eligible at
    ``finalized_block + remediation_window + i * distribution_interval``.
    Releases are strictly sequential: the next tranche is always
    ``tranches_released``.
    """

    def __init__(self, epoch_registry: EpochRegistry, arena: RewardArena):
        self.epoch_registry = epoch_registry
        self.arena = arena

    def initialize(
        self,
        epoch_id: int,
        distribution_interval: int,
        number_of_tranches: int,
        remediation_window: int,
        config_version: int = 1
    ) -> RewardScheduleConfig:
        """
        Bind a schedule to an epoch. Immutable once set.

        Raises:
            InvalidParameters: If ``number_of_tranches`` is zero or any argument is negative
            AlreadyInitialized: If the epoch already has a schedule
        """
        if number_of_tranches <= 0:
            log_and_raise_validation_error(
                InvalidParameters, f"number_of_tranches must be positive, got {number_of_tranches}",
                epoch_id=epoch_id
            )
        if distribution_interval < 0 or remediation_window < 0:
            log_and_raise_validation_error(
                InvalidParameters,
                f"Schedule arguments must be non-negative (interval={distribution_interval}, "
                f"window={remediation_window})",
                epoch_id=epoch_id
            )

        with self.arena.lock:
            if self.arena.get_schedule(epoch_id) is not None:
                log_and_raise_state_error(
                    AlreadyInitialized, f"Epoch {epoch_id} rewards already initialized", epoch_id=epoch_id
                )
            schedule = RewardScheduleConfig(
                epoch_id=epoch_id,
                distribution_interval=distribution_interval,
                number_of_tranches=number_of_tranches,
                remediation_window=remediation_window,
                config_version=config_version,
            )
            self.arena.put_schedule(schedule)

        bt.logging.info(
            f"Epoch {epoch_id} schedule: {number_of_tranches} tranches every {distribution_interval} blocks "
            f"after a {remediation_window}-block window (config v{config_version})"
        )
        return schedule

    def register_entitlement(
        self,
        epoch_id: int,
        participant_id: int,
        total_entitlement: int,
        reward_amount: int = 0,
        rank: Optional[int] = None,
        share_percentage: int = 0
    ) -> EpochParticipantReward:
        """Create the reward record a participant's tranches are released from."""
        if total_entitlement < 0:
            log_and_raise_validation_error(
                InvalidParameters, f"Entitlement must be non-negative, got {total_entitlement}",
                epoch_id=epoch_id, participant_id=participant_id
            )
        with self.arena.lock:
            self.require_schedule(epoch_id)
            if self.arena.record_for_update(epoch_id, participant_id) is not None:
                log_and_raise_state_error(
                    AlreadyInitialized, f"Participant {participant_id} already has an entitlement",
                    epoch_id=epoch_id, participant_id=participant_id
                )
            record = EpochParticipantReward(
                epoch_id=epoch_id,
                participant_id=participant_id,
                total_entitlement=total_entitlement,
                reward_amount=reward_amount,
                rank=rank,
                share_percentage=share_percentage,
            )
            self.arena.put_record(record)
            return record.snapshot()

    def require_schedule(self, epoch_id: int) -> RewardScheduleConfig:
        schedule = self.arena.get_schedule(epoch_id)
        if schedule is None:
            log_and_raise_state_error(
                NotInitialized, f"Epoch {epoch_id} rewards are not initialized", epoch_id=epoch_id
            )
        return schedule

    def state(self, epoch_id: int, participant_id: int, current_block: int) -> TrancheState:
        """Release state of a participant at ``current_block``."""
        with self.arena.lock:
            schedule = self.arena.get_schedule(epoch_id)
            record = self.arena.record_for_update(epoch_id, participant_id)
            if schedule is None or record is None:
                return TrancheState.UNINITIALIZED
            if record.tranches_released >= schedule.number_of_tranches:
                return TrancheState.COMPLETE

            epoch = self.epoch_registry.get_epoch(epoch_id)
            if not epoch.is_finalized:
                return TrancheState.PENDING
            eligible_at = schedule.eligible_block(epoch.finalized_block, record.tranches_released)
            return TrancheState.ELIGIBLE if current_block >= eligible_at else TrancheState.PENDING

    def next_tranche(self, epoch_id: int, participant_id: int, current_block: int) -> PendingTranche:
        """
        The tranche a participant may release at ``current_block``.

        Raises:
            EpochNotFinalized: If the epoch has not been finalized
            NotInitialized: If the epoch or participant has no schedule
            AlreadyComplete: If every tranche has been released
            NotYetEligible: If the next tranche's block has not been reached
        """
        with self.arena.lock:
            epoch = self.epoch_registry.get_epoch(epoch_id)
            if not epoch.is_finalized:
                log_and_raise_state_error(
                    EpochNotFinalized, f"Epoch {epoch_id} is not finalized", epoch_id=epoch_id
                )
            schedule = self.require_schedule(epoch_id)

            record = self.arena.record_for_update(epoch_id, participant_id)
            if record is None:
                log_and_raise_state_error(
                    NotInitialized, f"Participant {participant_id} has no entitlement in epoch {epoch_id}",
                    epoch_id=epoch_id, participant_id=participant_id
                )

            index = record.tranches_released
            if index >= schedule.number_of_tranches:
                log_and_raise_state_error(
                    AlreadyComplete, f"All {schedule.number_of_tranches} tranches released",
                    epoch_id=epoch_id, participant_id=participant_id
                )

            eligible_at = schedule.eligible_block(epoch.finalized_block, index)
            if current_block < eligible_at:
                log_and_raise_state_error(
                    NotYetEligible, f"Tranche {index + 1} eligible at block {eligible_at}, current {current_block}",
                    epoch_id=epoch_id, participant_id=participant_id
                )

            return PendingTranche(
                tranche_index=index,
                gross_amount=schedule.tranche_gross_amount(record.total_entitlement, index),
                eligible_block=eligible_at,
                is_final=index == schedule.number_of_tranches - 1,
            )

    def record_release(self, epoch_id: int, participant_id: int, distributed: DistributedReward) -> EpochParticipantReward:
        """
        Append a released tranche. Callers must hold the arena lock.

        Raises:
            NotYetEligible: If ``distributed`` is not the next tranche in sequence
        """
        record = self.arena.record_for_update(epoch_id, participant_id)
        if record is None or distributed.tranche_number != record.tranches_released + 1:
            log_and_raise_state_error(
                NotYetEligible, f"Tranche {distributed.tranche_number} released out of sequence",
                epoch_id=epoch_id, participant_id=participant_id
            )
        record.append_tranche(distributed)
        return record
