# mock_exchange/orders/settlement.py
"""
Settlement worker

Fills one open order: waits a randomized delay that stands in for exchange
latency, asks the price source for the pair's current price and closes the
order at that price. Price source failures abandon the order, which then
stays open for the life of the process. Nothing is retried.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

from ..adapters.base_adapter import BasePriceSource, PriceSourceError
from ..monitoring.metrics import MetricsCollector
from .order_store import Order, OrderStore

logger = logging.getLogger(__name__)

FEE_RATE = 0.1
SETTLE_DELAY_MIN = 1
SETTLE_DELAY_MAX = 5

DelayProvider = Callable[[], float]
SleepFunc = Callable[[float], Awaitable[None]]


def uniform_delay(low: int = SETTLE_DELAY_MIN, high: int = SETTLE_DELAY_MAX) -> DelayProvider:
    """
    Build a delay provider drawing whole seconds uniformly from [low, high]

    Args:
        low: Shortest delay in seconds
        high: Longest delay in seconds

    Returns:
        Callable returning a fresh delay on every call
    """
    if low > high:
        raise ValueError(f"invalid delay range [{low}, {high}]")
    rng = random.SystemRandom()
    return lambda: float(rng.randint(low, high))


class SettlementWorker:
    """
    Closes orders against live prices

    One ``settle`` coroutine runs per order. Workers share the store and the
    price source but no other state, so settlements of different orders are
    independent of each other.
    """

    def __init__(self,
                 store: OrderStore,
                 price_source: BasePriceSource,
                 delay_provider: Optional[DelayProvider] = None,
                 fee_rate: float = FEE_RATE,
                 sleep: SleepFunc = asyncio.sleep,
                 metrics: Optional[MetricsCollector] = None):
        """
        Initialize settlement worker

        Args:
            store: Order store holding the orders to settle
            price_source: Source of current market prices
            delay_provider: Returns the simulated latency for each order
            fee_rate: Fee charged as a fraction of volume
            sleep: Coroutine used to wait out the delay
            metrics: Optional metrics collector
        """
        self.store = store
        self.price_source = price_source
        self.delay_provider = delay_provider or uniform_delay()
        self.fee_rate = fee_rate
        self.sleep = sleep
        self.metrics = metrics

    async def settle(self, order_id: str) -> bool:
        """
        Settle one order

        Args:
            order_id: Id of an open order

        Returns:
            True if the order was closed, False if settlement was abandoned
        """
        try:
            closed = await self._settle(order_id)
        except Exception:
            logger.exception("settlement failed", extra={"order_id": order_id})
            closed = False

        if self.metrics:
            self.metrics.record_settlement(closed)
        return closed

    async def _settle(self, order_id: str) -> bool:
        delay = self.delay_provider()
        logger.info("completing order", extra={"order_id": order_id, "delay": delay})
        if self.metrics:
            self.metrics.record_settlement_scheduled(delay)
        await self.sleep(delay)

        order = self.store.get(order_id)
        try:
            quote = await self.price_source.get_price(order.pair)
        except PriceSourceError as e:
            logger.warning("settlement abandoned", extra={
                "order_id": order_id,
                "pair": order.pair,
                "reason": e.reason,
                "error_type": type(e).__name__,
            })
            return False

        price = quote.price
        fee = order.volume * self.fee_rate
        cost = order.volume * price

        def fill(record: Order) -> None:
            record.close(price=price, fee=fee, cost=cost)

        self.store.update(order_id, fill)
        logger.info("order closed", extra={
            "order_id": order_id,
            "price": price,
            "fee": fee,
            "cost": cost,
        })
        return True
