# mock_exchange/orders/order_store.py
"""
In-memory order store

Holds every order placed since process start and mediates all reads and
writes to them. Locking is per record: a short store-level lock protects the
id map, and each record carries its own lock so that readers and the
settlement worker of one order never contend with other orders.
"""

import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Optional

from ..errors import DuplicateOrderError, InvalidOrderTransition, OrderNotFound


class OrderStatus(Enum):
    """Order status enumeration"""
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class Order:
    """Order record"""
    id: str
    order_type: str
    side: str
    pair: str
    volume: float
    status: OrderStatus = OrderStatus.OPEN
    price: float = 0.0
    fee: float = 0.0
    cost: float = 0.0

    @property
    def description(self) -> str:
        return f"{self.side} {self.volume:f} {self.pair} @ market"

    @property
    def is_open(self) -> bool:
        return self.status is OrderStatus.OPEN

    def close(self, price: float, fee: float, cost: float) -> None:
        """
        Fill the order and move it to its terminal state

        Args:
            price: Fill price
            fee: Fee charged
            cost: Total cost (volume * price)

        Raises:
            InvalidOrderTransition: order is already closed
        """
        if not self.is_open:
            raise InvalidOrderTransition(f"order {self.id} is already {self.status.value}")
        self.price = price
        self.fee = fee
        self.cost = cost
        self.status = OrderStatus.CLOSED


class _Slot:
    """A stored record and the lock guarding it"""

    __slots__ = ("order", "lock")

    def __init__(self, order: Order):
        self.order = order
        self.lock = threading.Lock()


class OrderStore:
    """
    Concurrency-safe order store

    Records are never removed. ``get`` always hands out a copy, and
    ``update`` publishes a fully mutated copy in one step, so a reader never
    sees a record that is half way through a transition.
    """

    def __init__(self):
        self._slots: Dict[str, _Slot] = {}
        self._lock = threading.Lock()

    def insert(self, order: Order) -> None:
        """
        Add a new order

        Args:
            order: Order to store; its id must not be present yet

        Raises:
            DuplicateOrderError: id already stored
        """
        with self._lock:
            if order.id in self._slots:
                raise DuplicateOrderError(order.id)
            self._slots[order.id] = _Slot(replace(order))

    def get(self, order_id: str) -> Order:
        """
        Point-in-time snapshot of an order

        Args:
            order_id: Order identifier

        Returns:
            Copy of the stored record

        Raises:
            OrderNotFound: id was never stored
        """
        slot = self._slot(order_id)
        with slot.lock:
            return replace(slot.order)

    def update(self, order_id: str, mutator: Callable[[Order], None]) -> Order:
        """
        Apply a mutation to one order atomically

        The mutator runs against a private copy. If it raises, nothing is
        published and the exception propagates.

        Args:
            order_id: Order identifier
            mutator: Callable that modifies the order in place

        Returns:
            Snapshot of the updated record
        """
        slot = self._slot(order_id)
        with slot.lock:
            draft = replace(slot.order)
            mutator(draft)
            slot.order = draft
            return replace(draft)

    def count_by_status(self, status: OrderStatus) -> int:
        with self._lock:
            slots = list(self._slots.values())
        count = 0
        for slot in slots:
            with slot.lock:
                if slot.order.status is status:
                    count += 1
        return count

    def _slot(self, order_id: Optional[str]) -> _Slot:
        with self._lock:
            slot = self._slots.get(order_id) if order_id else None
        if slot is None:
            raise OrderNotFound(order_id or "")
        return slot

    def __contains__(self, order_id: object) -> bool:
        with self._lock:
            return order_id in self._slots

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)
