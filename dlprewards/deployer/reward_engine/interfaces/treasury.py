"""Abstract interface for the custody treasury."""

from abc import ABC, abstractmethod


class Treasury(ABC):
    """Holds balances and executes transfers on instruction."""

    @abstractmethod
    def credit(self, participant_id: int, recipient: str, asset: str, amount: int) -> None:
        """Credit ``amount`` of ``asset`` to ``recipient``, the participant's payout address."""
        pass

    @abstractmethod
    def transfer(self, recipient: str, asset: str, amount: int) -> None:
        """Transfer ``amount`` of ``asset`` to an arbitrary recipient address."""
        pass
