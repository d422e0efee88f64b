"""Withheld penalty balances and their controlled withdrawal."""

import bittensor as bt

from dlprewards.deployer.utils.error_handling import (
    AlreadyComplete,
    InvalidParameters,
    NotInitialized,
    NothingToWithdraw,
    TreasuryTransferFailed,
    log_and_raise_external_failure,
    log_and_raise_state_error,
    log_and_raise_validation_error,
)
from ..interfaces.treasury import Treasury
from ..models.participant_reward import EpochParticipantReward
from ..models.schedule import PendingTranche, RewardScheduleConfig
from .config_registry import ConfigRegistry
from .reward_arena import RewardArena


class PenaltyLedger:
    """
    Owns the penalty fields of each EpochParticipantReward.

    Withheld amounts stay in the treasury until an administrator withdraws
    them to a recipient.
    """

    def __init__(self, arena: RewardArena, treasury: Treasury, config_registry: ConfigRegistry):
        self.arena = arena
        self.treasury = treasury
        self.config_registry = config_registry

    def set_penalty(self, epoch_id: int, participant_id: int, amount: int) -> int:
        """
        Set the total penalty to withhold over a participant's schedule.

        Returns:
            The previous penalty total

        Raises:
            NotInitialized: If the participant has no entitlement in the epoch
            AlreadyComplete: If every tranche has already been released
            InvalidParameters: If ``amount`` is below what was already withheld or above
                that plus the still undistributed entitlement
        """
        with self.arena.lock:
            record = self._require_record(epoch_id, participant_id)
            schedule = self.arena.get_schedule(epoch_id)
            if record.tranches_released >= schedule.number_of_tranches:
                log_and_raise_state_error(
                    AlreadyComplete, "Cannot change the penalty of a completed schedule",
                    epoch_id=epoch_id, participant_id=participant_id
                )
            # Only undistributed tranches can still be withheld from
            ceiling = record.total_penalty_withheld + record.total_entitlement - record.distributed_amount
            if not record.total_penalty_withheld <= amount <= ceiling:
                log_and_raise_validation_error(
                    InvalidParameters,
                    f"Penalty {amount} must be within [{record.total_penalty_withheld}, {ceiling}]",
                    epoch_id=epoch_id, participant_id=participant_id
                )
            previous, record.penalty_amount = record.penalty_amount, amount

        bt.logging.info(f"Epoch {epoch_id}: penalty of participant {participant_id} set to {amount} (was {previous})")
        return previous

    @staticmethod
    def tranche_penalty(
        record: EpochParticipantReward,
        schedule: RewardScheduleConfig,
        tranche: PendingTranche
    ) -> int:
        """
        Portion of the outstanding penalty withheld from ``tranche``.

        The outstanding penalty is spread evenly over the remaining tranches and
        the final tranche takes the rest, never more than the tranche gross.
        """
        outstanding = max(record.penalty_amount - record.total_penalty_withheld, 0)
        if tranche.is_final:
            portion = outstanding
        else:
            portion = outstanding // (schedule.number_of_tranches - tranche.tranche_index)
        return min(portion, tranche.gross_amount)

    def withhold(self, epoch_id: int, participant_id: int, amount: int) -> None:
        """Add to a participant's withheld balance. Callers must hold the arena lock."""
        if amount <= 0:
            return
        record = self._require_record(epoch_id, participant_id)
        record.distributed_penalty_amount += amount
        record.total_penalty_withheld += amount

    def withheld_balance(self, epoch_id: int, participant_id: int) -> int:
        record = self.arena.get_record(epoch_id, participant_id)
        return record.distributed_penalty_amount if record else 0

    def withdraw_epoch_dlp_penalty_amount(self, epoch_id: int, participant_id: int, recipient: str) -> int:
        """
        Transfer the whole withheld balance to ``recipient``.

        The balance is zeroed before the transfer and restored if the
        transfer fails.

        Returns:
            The amount transferred

        Raises:
            NotInitialized: If the participant has no entitlement in the epoch
            NothingToWithdraw: If the withheld balance is zero
            TreasuryTransferFailed: If the treasury rejects the transfer
        """
        with self.arena.lock:
            record = self._require_record(epoch_id, participant_id)
            amount = record.distributed_penalty_amount
            if amount == 0:
                log_and_raise_state_error(
                    NothingToWithdraw, "No withheld penalty to withdraw",
                    epoch_id=epoch_id, participant_id=participant_id
                )
            record.distributed_penalty_amount = 0
            asset = self.config_registry.get(self.arena.get_schedule(epoch_id).config_version).settlement_asset

        try:
            self.treasury.transfer(recipient, asset, amount)
        except Exception as e:
            with self.arena.lock:
                record.distributed_penalty_amount += amount
            log_and_raise_external_failure(
                TreasuryTransferFailed, e, f"penalty transfer of {amount} {asset} to {recipient}",
                epoch_id=epoch_id, participant_id=participant_id
            )

        bt.logging.info(
            f"Epoch {epoch_id}: withdrew penalty {amount} {asset} of participant {participant_id} to {recipient}"
        )
        return amount

    def _require_record(self, epoch_id: int, participant_id: int) -> EpochParticipantReward:
        record = self.arena.record_for_update(epoch_id, participant_id)
        if record is None:
            log_and_raise_state_error(
                NotInitialized, f"Participant {participant_id} has no entitlement in epoch {epoch_id}",
                epoch_id=epoch_id, participant_id=participant_id
            )
        return record
