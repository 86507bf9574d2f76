# mock_exchange/adapters/base_adapter.py
"""
Base price source interface for the mock exchange
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone


class PriceSourceError(Exception):
    """Base class for price source failures"""

    def __init__(self, pair: str, reason: str):
        super().__init__(f"{pair}: {reason}")
        self.pair = pair
        self.reason = reason


class PriceSourceUnavailable(PriceSourceError):
    """Transport level failure (network, timeout, HTTP status)"""


class UpstreamError(PriceSourceError):
    """Upstream answered with an error payload, or had no quote for the pair"""


class MalformedTickerResponse(PriceSourceError):
    """Upstream answer did not match the expected ticker schema"""


@dataclass
class PriceQuote:
    """Current price for a trading pair"""
    pair: str
    price: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class BasePriceSource(ABC):
    """
    Abstract base class for price sources

    A price source resolves a trading pair to its current market price.
    Implementations raise a PriceSourceError subclass on any failure and
    never return partial quotes.
    """

    async def connect(self) -> None:
        """
        Acquire any resources the source needs
        """

    async def close(self) -> None:
        """
        Release resources acquired by connect
        """

    @abstractmethod
    async def get_price(self, pair: str) -> PriceQuote:
        """
        Get the current price for a trading pair

        Args:
            pair: Trading symbol, e.g. XBTUSD

        Returns:
            PriceQuote for the pair

        Raises:
            PriceSourceError: price could not be obtained
        """
        pass
