"""Abstract interface for the external participant registry."""

from abc import ABC, abstractmethod
from typing import List, Optional


class ParticipantRegistry(ABC):
    """Supplies participant existence, addresses and base stake."""

    @abstractmethod
    def exists(self, participant_id: int) -> bool:
        pass

    @abstractmethod
    def owner_of(self, participant_id: int) -> str:
        """Owner address; receives payouts when no treasury address is set."""
        pass

    @abstractmethod
    def treasury_of(self, participant_id: int) -> str:
        """Treasury address tranche payouts are credited to."""
        pass

    @abstractmethod
    def stake_of(self, participant_id: int) -> int:
        """Base stake used for ranking, before epoch adjustments."""
        pass

    @abstractmethod
    def participant_ids(self) -> List[int]:
        """All known participant ids (the default Top-K candidate set)."""
        pass

    def reward_asset_of(self, participant_id: int) -> Optional[str]:
        """Asset the participant is paid in; None means the configured reward asset."""
        return None
