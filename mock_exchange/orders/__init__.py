from .lifecycle import NewOrder, OrderLifecycleController, PlacedOrder
from .order_store import Order, OrderStatus, OrderStore
from .settlement import FEE_RATE, SettlementWorker, uniform_delay

__all__ = [
    "FEE_RATE",
    "NewOrder",
    "Order",
    "OrderLifecycleController",
    "OrderStatus",
    "OrderStore",
    "PlacedOrder",
    "SettlementWorker",
    "uniform_delay",
]
