"""Abstract interface for the current block height."""

from abc import ABC, abstractmethod


class ChainClock(ABC):

    @abstractmethod
    def current_block(self) -> int:
        pass
