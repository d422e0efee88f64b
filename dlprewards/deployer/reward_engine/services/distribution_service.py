"""Tranche release: penalty withholding, slippage-bounded conversion and crediting."""

from typing import Iterable, List, Optional, Set, Tuple

import bittensor as bt

from dlprewards.deployer.utils.config import PERCENTAGE_DENOMINATOR
from dlprewards.deployer.utils.error_handling import (
    EpochNotFinalized,
    ExternalFailure,
    NotYetEligible,
    RewardEngineError,
    SlippageExceeded,
    TreasuryTransferFailed,
    log_and_raise_external_failure,
    log_and_raise_state_error,
)
from ..interfaces.chain_clock import ChainClock
from ..interfaces.participant_registry import ParticipantRegistry
from ..interfaces.swap_venue import PriceSource, SwapResult, SwapVenue
from ..interfaces.treasury import Treasury
from ..models.distribution_result import DistributionOutcome, DistributionReport
from ..models.participant_reward import DistributedReward
from ..models.reward_config import RewardConfig
from ..utils.fixed_point import mul_div
from .config_registry import ConfigRegistry
from .epoch_registry import EpochRegistry
from .penalty_ledger import PenaltyLedger
from .tranche_scheduler import TrancheScheduler


class DistributionService:
    """
    Releases the next eligible tranche of each requested participant.

    Each participant is an independent unit: a failure is recorded in the
    report and never affects the others. State is committed before the
    treasury is credited, and a participant whose conversion is still in
    flight cannot be distributed again until it settles.
    """

    def __init__(
        self,
        epoch_registry: EpochRegistry,
        scheduler: TrancheScheduler,
        penalty_ledger: PenaltyLedger,
        config_registry: ConfigRegistry,
        participant_registry: ParticipantRegistry,
        treasury: Treasury,
        swap_venue: SwapVenue,
        clock: ChainClock,
        price_source: Optional[PriceSource] = None
    ):
        self.epoch_registry = epoch_registry
        self.scheduler = scheduler
        self.arena = scheduler.arena
        self.penalty_ledger = penalty_ledger
        self.config_registry = config_registry
        self.participant_registry = participant_registry
        self.treasury = treasury
        self.swap_venue = swap_venue
        self.clock = clock
        self.price_source = price_source or swap_venue
        self._in_flight: Set[Tuple[int, int]] = set()

    def distribute_rewards(self, epoch_id: int, participant_ids: Iterable[int]) -> DistributionReport:
        """
        Release one tranche per participant where eligible.

        Raises:
            EpochNotFinalized: If the epoch has not been finalized
            NotInitialized: If the epoch has no schedule

        Returns:
            DistributionReport with one outcome per distinct participant id
        """
        if not self.epoch_registry.is_finalized(epoch_id):
            log_and_raise_state_error(EpochNotFinalized, f"Epoch {epoch_id} is not finalized", epoch_id=epoch_id)
        schedule = self.scheduler.require_schedule(epoch_id)
        reward_config = self.config_registry.get(schedule.config_version)

        report = DistributionReport(epoch_id)
        for participant_id in _unique(participant_ids):
            try:
                outcome = self._distribute_one(epoch_id, participant_id, reward_config)
            except RewardEngineError as e:
                outcome = DistributionOutcome.create_error_outcome(epoch_id, participant_id, e)
            report.add_outcome(outcome)

        bt.logging.info(
            f"Epoch {epoch_id} distribution: {len(report.succeeded)} released, {len(report.failed)} skipped or failed"
        )
        return report

    def _distribute_one(self, epoch_id: int, participant_id: int, reward_config: RewardConfig) -> DistributionOutcome:
        unit = (epoch_id, participant_id)
        current_block = self._lookup("block number lookup", epoch_id, participant_id, self.clock.current_block)
        reward_asset = self._lookup(
            "reward asset lookup", epoch_id, participant_id, self.participant_registry.reward_asset_of, participant_id
        ) or reward_config.reward_asset
        recipient = self._resolve_recipient(epoch_id, participant_id)

        with self.arena.lock:
            if unit in self._in_flight:
                log_and_raise_state_error(
                    NotYetEligible, "A tranche release is already in progress",
                    epoch_id=epoch_id, participant_id=participant_id
                )
            tranche = self.scheduler.next_tranche(epoch_id, participant_id, current_block)
            record = self.arena.record_for_update(epoch_id, participant_id)
            penalty = self.penalty_ledger.tranche_penalty(record, self.arena.get_schedule(epoch_id), tranche)
            net_amount = tranche.gross_amount - penalty
            self._in_flight.add(unit)

        try:
            if net_amount > 0:
                swap = self._convert(epoch_id, participant_id, net_amount, reward_asset, reward_config)
            else:
                swap = SwapResult(amount_out=0, used_in=0)

            with self.arena.lock:
                used = swap.used_in if swap.used_in is not None else net_amount - swap.spare_in
                unused = max(net_amount - used - swap.spare_in, 0)
                rolled_over = 0
                if unused:
                    rolled_over = self.epoch_registry.rollover_bonus(
                        epoch_id + 1, participant_id, unused, cap=record.reward_amount
                    )

                distributed = DistributedReward(
                    tranche_number=tranche.tranche_number,
                    amount=tranche.gross_amount,
                    block_number=current_block,
                    token_reward_amount=swap.amount_out,
                    spare_token=swap.spare_out,
                    spare_settlement=swap.spare_in,
                    used_settlement_amount=used,
                    penalty_amount=penalty,
                    rolled_over_amount=rolled_over,
                    retained_amount=unused - rolled_over,
                )
                self.scheduler.record_release(epoch_id, participant_id, distributed)
                self.penalty_ledger.withhold(epoch_id, participant_id, penalty)
        finally:
            with self.arena.lock:
                self._in_flight.discard(unit)

        bt.logging.info(
            f"Epoch {epoch_id} participant {participant_id}: tranche {distributed.tranche_number} "
            f"gross {distributed.amount}, penalty {penalty}, converted {distributed.token_reward_amount} {reward_asset}"
        )

        try:
            self._credit(participant_id, recipient, distributed, reward_asset, reward_config.settlement_asset)
        except TreasuryTransferFailed as e:
            # Committed tranche stays recorded.
            outcome = DistributionOutcome.create_error_outcome(epoch_id, participant_id, e)
            outcome.record = distributed
            outcome.recipient = recipient
            return outcome

        return DistributionOutcome(
            epoch_id=epoch_id, participant_id=participant_id, success=True, record=distributed, recipient=recipient
        )

    def _convert(
        self,
        epoch_id: int,
        participant_id: int,
        amount_in: int,
        reward_asset: str,
        reward_config: RewardConfig
    ) -> SwapResult:
        """Convert ``amount_in`` with output bounded by the slippage tolerance."""
        settlement_asset = reward_config.settlement_asset
        operation = f"conversion of {amount_in} {settlement_asset} to {reward_asset}"
        try:
            expected = self.price_source.quote(settlement_asset, reward_asset, amount_in)
        except Exception as e:
            log_and_raise_external_failure(
                SlippageExceeded, e, f"quote for {operation}", epoch_id=epoch_id, participant_id=participant_id
            )

        min_out = mul_div(expected, PERCENTAGE_DENOMINATOR - reward_config.maximum_slippage_percentage, PERCENTAGE_DENOMINATOR)
        try:
            result = self.swap_venue.convert(settlement_asset, reward_asset, amount_in, min_out)
        except Exception as e:
            log_and_raise_external_failure(
                SlippageExceeded, e, operation, epoch_id=epoch_id, participant_id=participant_id
            )

        if result.amount_out < min_out:
            bt.logging.error(
                f"{operation} returned {result.amount_out}, below minimum {min_out} "
                f"(expected {expected}, tolerance {reward_config.maximum_slippage_percentage}/{PERCENTAGE_DENOMINATOR})"
            )
            raise SlippageExceeded(
                f"Realized output {result.amount_out} below minimum {min_out}",
                epoch_id=epoch_id, participant_id=participant_id
            )
        return result

    def _lookup(self, operation: str, epoch_id: int, participant_id: int, call, *args):
        """Call a registry or clock method, reporting its failure against this unit."""
        try:
            return call(*args)
        except Exception as e:
            log_and_raise_external_failure(
                ExternalFailure, e, operation, epoch_id=epoch_id, participant_id=participant_id
            )

    def _resolve_recipient(self, epoch_id: int, participant_id: int) -> str:
        """Treasury address of the participant, falling back to its owner."""
        registry = self.participant_registry
        recipient = self._lookup("treasury address lookup", epoch_id, participant_id, registry.treasury_of, participant_id)
        if not recipient:
            recipient = self._lookup("owner address lookup", epoch_id, participant_id, registry.owner_of, participant_id)
        if not recipient:
            log_and_raise_external_failure(
                ExternalFailure, LookupError(f"participant {participant_id} has no payout address"),
                "payout address lookup", epoch_id=epoch_id, participant_id=participant_id
            )
        return recipient

    def _credit(
        self,
        participant_id: int,
        recipient: str,
        distributed: DistributedReward,
        reward_asset: str,
        settlement_asset: str
    ) -> None:
        credits = [
            (reward_asset, distributed.token_reward_amount),
            (reward_asset, distributed.spare_token),
            (settlement_asset, distributed.spare_settlement),
        ]
        for asset, amount in credits:
            if amount <= 0:
                continue
            try:
                self.treasury.credit(participant_id, recipient, asset, amount)
            except Exception as e:
                log_and_raise_external_failure(
                    TreasuryTransferFailed, e, f"credit of {amount} {asset} to {recipient}", participant_id=participant_id
                )


def _unique(participant_ids: Iterable[int]) -> List[int]:
    seen = set()
    ordered = []
    for participant_id in participant_ids:
        if participant_id not in seen:
            seen.add(participant_id)
            ordered.append(participant_id)
    return ordered
