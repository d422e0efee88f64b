"""Epoch lifecycle and per-participant rating inputs."""

import copy
import threading
from typing import Dict, Iterable, List, Optional, Tuple

import bittensor as bt

from dlprewards.deployer.utils.error_handling import (
    InvalidEpoch,
    InvalidParameters,
    UnknownParticipant,
    Underflow,
    log_and_raise_state_error,
    log_and_raise_validation_error,
)
from ..interfaces.participant_registry import ParticipantRegistry
from ..models.epoch import Epoch


class EpochRegistry:
    """
    Stores epochs and the oracle/administrator inputs attached to them.

    Epochs are created implicitly by the first write that references them.
    Reads never create epochs and always return detached copies.
    """

    def __init__(self, participant_registry: ParticipantRegistry, lock: Optional[threading.RLock] = None):
        self.participant_registry = participant_registry
        self._epochs: Dict[int, Epoch] = {}
        self._lock = lock or threading.RLock()

    # ───────────────────────── reads ─────────────────────────

    def get_epoch(self, epoch_id: int) -> Epoch:
        """Detached copy of an epoch (an empty epoch if never referenced)."""
        with self._lock:
            epoch = self._epochs.get(epoch_id)
            return copy.deepcopy(epoch) if epoch else Epoch(epoch_id=epoch_id)

    def is_finalized(self, epoch_id: int) -> bool:
        with self._lock:
            epoch = self._epochs.get(epoch_id)
            return bool(epoch and epoch.is_finalized)

    def effective_stake(self, epoch_id: int, participant_id: int) -> int:
        """Registry stake plus the epoch's signed adjustment."""
        with self._lock:
            adjustment = self.get_epoch(epoch_id).get_rating(participant_id).stake_adjustment
        return self.participant_registry.stake_of(participant_id) + adjustment

    def bonus_participants(self, epoch_id: int) -> List[int]:
        """Participants with a non-zero bonus in the epoch, ascending."""
        epoch = self.get_epoch(epoch_id)
        return sorted(pid for pid, rating in epoch.ratings.items() if rating.bonus_amount > 0)

    # ───────────────────────── oracle inputs ─────────────────────────

    def save_performance(self, epoch_id: int, participant_id: int, performance_rating: int) -> None:
        """Record (or replace) a participant's performance rating."""
        self.save_performances(epoch_id, [(participant_id, performance_rating)])

    def save_performances(self, epoch_id: int, performances: Iterable[Tuple[int, int]]) -> None:
        """
        Record performance ratings for several participants at once.

        The whole batch is validated before anything is written. Replacing an
        existing rating adjusts the epoch total by the difference.

        Raises:
            InvalidEpoch: If the epoch is already finalized
            InvalidParameters: On duplicate participant ids or negative ratings
            UnknownParticipant: If a participant is not registered
        """
        performances = list(performances)
        with self._lock:
            self._require_open(epoch_id)

            seen = set()
            for participant_id, rating in performances:
                if participant_id in seen:
                    log_and_raise_validation_error(
                        InvalidParameters, f"Duplicate participant {participant_id} in performance batch",
                        epoch_id=epoch_id, participant_id=participant_id
                    )
                seen.add(participant_id)
                self._require_participant(epoch_id, participant_id)
                if rating < 0:
                    log_and_raise_validation_error(
                        InvalidParameters, f"Performance rating must be non-negative, got {rating}",
                        epoch_id=epoch_id, participant_id=participant_id
                    )

            epoch = self._epoch_for_update(epoch_id)
            for participant_id, rating in performances:
                entry = epoch.rating_for_update(participant_id)
                epoch.total_performance_rating += rating - entry.performance_rating
                entry.performance_rating = rating

        bt.logging.debug(f"Epoch {epoch_id}: saved {len(performances)} performance ratings")

    # ───────────────────────── administrator inputs ─────────────────────────

    def adjust_stake(self, epoch_id: int, participant_id: int, delta: int) -> int:
        """
        Apply a signed stake adjustment for ranking purposes.

        Returns:
            The new effective stake

        Raises:
            InvalidEpoch: If the epoch is already finalized
            Underflow: If the effective stake would become negative
        """
        with self._lock:
            self._require_open(epoch_id)
            self._require_participant(epoch_id, participant_id)

            current_adjustment = self.get_epoch(epoch_id).get_rating(participant_id).stake_adjustment
            base_stake = self.participant_registry.stake_of(participant_id)
            new_effective = base_stake + current_adjustment + delta
            if new_effective < 0:
                bt.logging.error(
                    f"Stake adjustment {delta} would underflow participant {participant_id} "
                    f"(effective stake {base_stake + current_adjustment})"
                )
                raise Underflow(
                    f"Effective stake would become {new_effective}",
                    epoch_id=epoch_id, participant_id=participant_id
                )

            self._epoch_for_update(epoch_id).rating_for_update(participant_id).stake_adjustment += delta
            return new_effective

    def add_bonus(self, epoch_id: int, participant_id: int, amount: int) -> int:
        """Add to a participant's epoch bonus; returns the new bonus."""
        with self._lock:
            self._require_open(epoch_id)
            self._require_participant(epoch_id, participant_id)
            if amount < 0:
                log_and_raise_validation_error(
                    InvalidParameters, f"Bonus amount must be non-negative, got {amount}",
                    epoch_id=epoch_id, participant_id=participant_id
                )
            entry = self._epoch_for_update(epoch_id).rating_for_update(participant_id)
            entry.bonus_amount += amount
            return entry.bonus_amount

    def override_bonus(self, epoch_id: int, participant_id: int, amount: int) -> int:
        """Replace a participant's epoch bonus; returns the previous bonus."""
        with self._lock:
            self._require_open(epoch_id)
            self._require_participant(epoch_id, participant_id)
            if amount < 0:
                log_and_raise_validation_error(
                    InvalidParameters, f"Bonus amount must be non-negative, got {amount}",
                    epoch_id=epoch_id, participant_id=participant_id
                )
            entry = self._epoch_for_update(epoch_id).rating_for_update(participant_id)
            previous, entry.bonus_amount = entry.bonus_amount, amount
            return previous

    def rollover_bonus(self, epoch_id: int, participant_id: int, amount: int, cap: int) -> int:
        """
        Add up to ``amount`` to an open epoch's bonus without exceeding ``cap``.

        Returns:
            The amount actually added (0 if the epoch is already finalized)
        """
        with self._lock:
            epoch = self._epochs.get(epoch_id)
            if epoch and epoch.is_finalized:
                bt.logging.warning(f"Epoch {epoch_id} already finalized; rollover for participant {participant_id} retained")
                return 0

            entry = self._epoch_for_update(epoch_id).rating_for_update(participant_id)
            accepted = max(min(amount, cap - entry.bonus_amount), 0)
            entry.bonus_amount += accepted
            return accepted

    def finalize_epoch(self, epoch_id: int, block_number: int) -> Epoch:
        """Freeze an epoch's ratings at ``block_number``."""
        with self._lock:
            self._require_open(epoch_id)
            epoch = self._epoch_for_update(epoch_id)
            epoch.is_finalized = True
            epoch.finalized_block = block_number
            bt.logging.info(
                f"Epoch {epoch_id} finalized at block {block_number} "
                f"({len(epoch.ratings)} participants, total performance {epoch.total_performance_rating})"
            )
            return copy.deepcopy(epoch)

    # ───────────────────────── helpers ─────────────────────────

    def _epoch_for_update(self, epoch_id: int) -> Epoch:
        if epoch_id not in self._epochs:
            self._epochs[epoch_id] = Epoch(epoch_id=epoch_id)
        return self._epochs[epoch_id]

    def _require_open(self, epoch_id: int) -> None:
        if epoch_id < 0:
            log_and_raise_state_error(InvalidEpoch, f"Invalid epoch id {epoch_id}", epoch_id=epoch_id)
        epoch = self._epochs.get(epoch_id)
        if epoch and epoch.is_finalized:
            log_and_raise_state_error(InvalidEpoch, f"Epoch {epoch_id} is already finalized", epoch_id=epoch_id)

    def _require_participant(self, epoch_id: int, participant_id: int) -> None:
        if not self.participant_registry.exists(participant_id):
            log_and_raise_validation_error(
                UnknownParticipant, f"Participant {participant_id} is not registered",
                epoch_id=epoch_id, participant_id=participant_id
            )
