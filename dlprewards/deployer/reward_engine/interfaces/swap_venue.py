"""Abstract interfaces for asset conversion and price quotes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SwapResult:
    """
    Realized conversion.

    ``used_in`` is the input asset actually consumed; ``spare_in`` and
    ``spare_out`` are leftovers of each asset returned by the venue.
    """
    amount_out: int
    spare_in: int = 0
    spare_out: int = 0
    used_in: Optional[int] = None  # None: everything not returned as spare_in


class PriceSource(ABC):
    """Source of expected conversion output."""

    @abstractmethod
    def quote(self, asset_in: str, asset_out: str, amount_in: int) -> int:
        """Expected ``asset_out`` amount for ``amount_in`` of ``asset_in``."""
        pass


class SwapVenue(PriceSource):
    """
    Executes conversions between two assets.

    ``convert`` must raise (leaving balances untouched) when the realized
    output would be below ``min_amount_out``.
    """

    @abstractmethod
    def convert(
        self,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        min_amount_out: int
    ) -> SwapResult:
        pass
