"""Clients for external services used by the reward deployer."""

from .price_feed import HttpPriceSource, fetch_usd_prices

__all__ = [
    "HttpPriceSource",
    "fetch_usd_prices",
]
