"""
Mock exchange core: order store, settlement and price sources
"""

from .adapters import (
    BasePriceSource,
    KrakenTickerSource,
    PriceQuote,
    PriceSourceError,
    StaticPriceSource,
)
from .config import AccountConfig, Settings, get_settings
from .errors import (
    BadRequest,
    ConfigError,
    ExchangeError,
    MissingAsset,
    OrderNotFound,
)
from .monitoring import MetricsCollector
from .orders import (
    NewOrder,
    Order,
    OrderLifecycleController,
    OrderStatus,
    OrderStore,
    PlacedOrder,
    SettlementWorker,
    uniform_delay,
)

__version__ = "1.0.0"

__all__ = [
    "AccountConfig",
    "BadRequest",
    "BasePriceSource",
    "ConfigError",
    "ExchangeError",
    "KrakenTickerSource",
    "MetricsCollector",
    "MissingAsset",
    "NewOrder",
    "Order",
    "OrderLifecycleController",
    "OrderNotFound",
    "OrderStatus",
    "OrderStore",
    "PlacedOrder",
    "PriceQuote",
    "PriceSourceError",
    "SettlementWorker",
    "Settings",
    "StaticPriceSource",
    "get_settings",
    "uniform_delay",
]
