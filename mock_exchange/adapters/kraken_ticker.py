# mock_exchange/adapters/kraken_ticker.py
"""
Kraken public ticker adapter

Fetches the last traded price of a pair from Kraken's public Ticker
endpoint. The reply is decoded once into typed models; anything that does
not fit them is reported as a MalformedTickerResponse.
"""

import logging
from typing import Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from .base_adapter import (
    BasePriceSource,
    MalformedTickerResponse,
    PriceQuote,
    PriceSourceUnavailable,
    UpstreamError,
)

logger = logging.getLogger(__name__)

DEFAULT_TICKER_URL = "https://api.kraken.com/0/public/Ticker"


class TickerInfo(BaseModel):
    """Ticker entry for one pair; ``c`` is [last trade price, lot volume]"""
    model_config = ConfigDict(extra="ignore")

    c: List[str]

    def last_price(self) -> float:
        return float(self.c[0])


class TickerResponse(BaseModel):
    """Kraken envelope: a non-empty ``error`` list marks the error variant"""
    model_config = ConfigDict(extra="ignore")

    error: List[str] = []
    result: Dict[str, TickerInfo] = {}

    @property
    def is_error(self) -> bool:
        return bool(self.error)


class KrakenTickerSource(BasePriceSource):
    """
    Price source backed by Kraken's public ticker

    Example:
        source = KrakenTickerSource()
        await source.connect()
        quote = await source.get_price("XBTUSD")
    """

    def __init__(self, ticker_url: str = DEFAULT_TICKER_URL, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize Kraken ticker source

        Args:
            ticker_url: Ticker endpoint URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used to stub the network
        """
        self.ticker_url = ticker_url
        self.timeout = timeout
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def close(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None

    async def get_price(self, pair: str) -> PriceQuote:
        await self.connect()

        try:
            response = await self.client.get(self.ticker_url, params={"pair": pair})
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise PriceSourceUnavailable(pair, str(e) or type(e).__name__) from e

        try:
            ticker = TickerResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise MalformedTickerResponse(pair, f"{e.error_count()} schema error(s)") from e

        if ticker.is_error:
            raise UpstreamError(pair, ", ".join(ticker.error))
        if not ticker.result:
            raise UpstreamError(pair, "no ticker result")

        # Kraken keys the result by its own pair name (XXBTZUSD for XBTUSD)
        info = next(iter(ticker.result.values()))
        try:
            price = info.last_price()
        except (IndexError, ValueError) as e:
            raise MalformedTickerResponse(pair, f"unparsable price {info.c!r}") from e

        logger.debug("ticker quote", extra={"pair": pair, "price": price})
        return PriceQuote(pair=pair, price=price)
