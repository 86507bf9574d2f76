# mock_exchange/orders/lifecycle.py
"""
Order lifecycle controller

Places orders into the store and starts their settlement in the
background. Placement returns as soon as the order is stored; queries are
non-blocking snapshot reads and never wait for settlement.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Set

from ..monitoring.metrics import MetricsCollector
from .order_store import Order, OrderStatus, OrderStore
from .settlement import SettlementWorker

logger = logging.getLogger(__name__)


@dataclass
class NewOrder:
    """Caller supplied order fields"""
    order_type: str
    side: str
    pair: str
    volume: float


@dataclass
class PlacedOrder:
    """Result of placing an order"""
    id: str
    description: str


class OrderLifecycleController:
    """
    Coordinates order creation with asynchronous settlement

    Every settlement task is tracked until it finishes, so callers can
    ``drain`` them (tests, graceful shutdown) or ``shutdown`` to cancel
    whatever is still in flight.
    """

    def __init__(self, store: OrderStore, worker: SettlementWorker,
                 metrics: Optional[MetricsCollector] = None):
        self.store = store
        self.worker = worker
        self.metrics = metrics
        self._tasks: Set[asyncio.Task] = set()

    async def place_order(self, new_order: NewOrder) -> PlacedOrder:
        """
        Store a new open order and schedule its settlement

        Args:
            new_order: Order fields from the request

        Returns:
            PlacedOrder with the fresh id and a readable description
        """
        order = Order(
            id=str(uuid.uuid4()),
            order_type=new_order.order_type,
            side=new_order.side,
            pair=new_order.pair,
            volume=new_order.volume,
        )
        self.store.insert(order)
        logger.info("new order", extra={"order_id": order.id, "descr": order.description})

        task = asyncio.create_task(self.worker.settle(order.id), name=f"settle-{order.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        if self.metrics:
            self.metrics.record_order_placed()
        return PlacedOrder(id=order.id, description=order.description)

    def query_order(self, order_id: str) -> Order:
        """
        Snapshot of an order's current state

        Raises:
            OrderNotFound: id was never issued
        """
        return self.store.get(order_id)

    @property
    def pending_settlements(self) -> int:
        return len(self._tasks)

    def open_orders(self) -> int:
        return self.store.count_by_status(OrderStatus.OPEN)

    async def drain(self) -> None:
        """Wait until every settlement scheduled so far has finished"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel settlements still in flight; their orders stay open"""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("cancelled pending settlements", extra={"count": len(tasks)})
