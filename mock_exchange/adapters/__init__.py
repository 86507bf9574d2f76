from .base_adapter import (
    BasePriceSource,
    MalformedTickerResponse,
    PriceQuote,
    PriceSourceError,
    PriceSourceUnavailable,
    UpstreamError,
)
from .kraken_ticker import KrakenTickerSource, TickerInfo, TickerResponse
from .static_prices import StaticPriceSource

__all__ = [
    "BasePriceSource",
    "KrakenTickerSource",
    "MalformedTickerResponse",
    "PriceQuote",
    "PriceSourceError",
    "PriceSourceUnavailable",
    "StaticPriceSource",
    "TickerInfo",
    "TickerResponse",
    "UpstreamError",
]
