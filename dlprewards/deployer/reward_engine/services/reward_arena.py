"""Indexed store of per-(epoch, participant) reward state."""

import threading
from typing import Dict, List, Optional, Tuple

from ..models.participant_reward import EpochParticipantReward
from ..models.schedule import RewardScheduleConfig


class RewardArena:
    """
    Owns every EpochParticipantReward and every epoch schedule.

    Writers fetch live records with ``record_for_update`` while holding the
    shared engine lock; readers get detached snapshots.
    """

    def __init__(self, lock: Optional[threading.RLock] = None):
        self.lock = lock or threading.RLock()
        self._records: Dict[Tuple[int, int], EpochParticipantReward] = {}
        self._schedules: Dict[int, RewardScheduleConfig] = {}

    # schedules

    def get_schedule(self, epoch_id: int) -> Optional[RewardScheduleConfig]:
        with self.lock:
            return self._schedules.get(epoch_id)

    def put_schedule(self, schedule: RewardScheduleConfig) -> None:
        with self.lock:
            self._schedules[schedule.epoch_id] = schedule

    # records

    def record_for_update(self, epoch_id: int, participant_id: int) -> Optional[EpochParticipantReward]:
        """Live record; callers must hold ``lock``."""
        return self._records.get((epoch_id, participant_id))

    def put_record(self, record: EpochParticipantReward) -> None:
        with self.lock:
            self._records[(record.epoch_id, record.participant_id)] = record

    def get_record(self, epoch_id: int, participant_id: int) -> Optional[EpochParticipantReward]:
        with self.lock:
            record = self._records.get((epoch_id, participant_id))
            return record.snapshot() if record else None

    def epoch_records(self, epoch_id: int) -> List[EpochParticipantReward]:
        """Snapshots of every record in an epoch, ordered by participant id."""
        with self.lock:
            return [
                record.snapshot()
                for (eid, _), record in sorted(self._records.items())
                if eid == epoch_id
            ]
