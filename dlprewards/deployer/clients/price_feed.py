"""Reference prices for slippage bounds, independent of the swap venue."""

from decimal import Decimal, ROUND_DOWN, localcontext
from typing import Dict, Iterable, Optional

import requests
import bittensor as bt
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from dlprewards.deployer.reward_engine.interfaces.swap_venue import PriceSource
from dlprewards.deployer.utils.config import PRICE_FEED_API_KEY, PRICE_FEED_IDS, PRICE_FEED_URL

QUOTE_GUARD_DIGITS = 40


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((requests.exceptions.RequestException, KeyError))
)
def fetch_usd_prices(url: str, price_ids: Iterable[str], api_key: Optional[str] = None) -> Dict[str, Decimal]:
    """
    Get current USD prices from a CoinGecko-style ``simple/price`` endpoint.

    Returns:
        Mapping of price id to USD price

    Raises:
        requests.exceptions.RequestException: If the API request fails after all retries
        KeyError: If a requested id is missing from the response
        ValueError: If a price is not a positive number
    """
    price_ids = list(price_ids)
    headers = {"x-cg-demo-api-key": api_key} if api_key else {}
    response = requests.get(
        url,
        params={"ids": ",".join(price_ids), "vs_currencies": "usd"},
        headers=headers,
        timeout=10
    )
    response.raise_for_status()

    data = response.json()

    prices = {}
    for price_id in price_ids:
        if price_id not in data:
            raise KeyError(f"{price_id} not found in price feed response")
        if 'usd' not in data[price_id]:
            raise KeyError(f"USD price not found for {price_id}")

        usd_price = data[price_id]['usd']
        if not isinstance(usd_price, (int, float)) or isinstance(usd_price, bool) or usd_price <= 0:
            raise ValueError(f"Invalid price value for {price_id}: {usd_price}")
        prices[price_id] = Decimal(str(usd_price))

    return prices


class HttpPriceSource(PriceSource):
    """
    PriceSource backed by an HTTP price feed.

    Both assets must share the same smallest-unit decimals; the expected output
    is ``amount_in * usd(asset_in) / usd(asset_out)`` rounded down.
    """

    def __init__(
        self,
        url: str = PRICE_FEED_URL,
        asset_ids: Optional[Dict[str, str]] = None,
        api_key: Optional[str] = PRICE_FEED_API_KEY
    ):
        self.url = url
        self.asset_ids = dict(asset_ids or PRICE_FEED_IDS)
        self.api_key = api_key

    def quote(self, asset_in: str, asset_out: str, amount_in: int) -> int:
        try:
            id_in, id_out = self.asset_ids[asset_in], self.asset_ids[asset_out]
        except KeyError as e:
            raise ValueError(f"No price feed id configured for asset {e.args[0]}") from e

        prices = fetch_usd_prices(self.url, [id_in, id_out], self.api_key)
        with localcontext() as ctx:
            # Exact product, truncated quotient: never above the true value
            ctx.prec = len(str(amount_in)) + QUOTE_GUARD_DIGITS
            ctx.rounding = ROUND_DOWN
            expected = (Decimal(amount_in) * prices[id_in] / prices[id_out]).to_integral_value()

        bt.logging.debug(
            f"Reference quote {amount_in} {asset_in} -> {expected} {asset_out} "
            f"(usd {prices[id_in]} / {prices[id_out]})"
        )
        return int(expected)
