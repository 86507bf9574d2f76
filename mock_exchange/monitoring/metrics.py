# mock_exchange/monitoring/metrics.py
"""
Prometheus metrics collection for the mock exchange

Tracks order placement and settlement outcomes.
"""

from typing import Dict, List

DELAY_BUCKETS = [1.0, 2.0, 3.0, 4.0, 5.0]


class MetricsCollector:
    """
    Prometheus-style metrics collector

    Counts placed, settled and abandoned orders, tracks how many orders are
    still open and records the simulated settlement delay of each order.
    """

    def __init__(self):
        self.counters: Dict[str, float] = {
            "orders_placed_total": 0.0,
            "orders_settled_total": 0.0,
            "orders_abandoned_total": 0.0,
        }
        self.orders_open = 0
        self.delay_counts: List[int] = [0] * len(DELAY_BUCKETS)
        self.delay_sum = 0.0
        self.delay_count = 0

    def record_order_placed(self):
        self.counters["orders_placed_total"] += 1

    def record_settlement_scheduled(self, delay: float):
        self.delay_sum += delay
        self.delay_count += 1
        for i, bucket in enumerate(DELAY_BUCKETS):
            if delay <= bucket:
                self.delay_counts[i] += 1

    def record_settlement(self, closed: bool):
        """Record the outcome of one settlement"""
        if closed:
            self.counters["orders_settled_total"] += 1
        else:
            self.counters["orders_abandoned_total"] += 1

    def set_open_orders(self, count: int):
        self.orders_open = count

    def get_prometheus_format(self) -> str:
        """Export metrics in Prometheus format"""
        lines = [
            "# HELP orders_placed_total Total number of orders placed",
            "# TYPE orders_placed_total counter",
            f"orders_placed_total {self.counters['orders_placed_total']}",
            "# HELP orders_settled_total Total number of orders closed by settlement",
            "# TYPE orders_settled_total counter",
            f"orders_settled_total {self.counters['orders_settled_total']}",
            "# HELP orders_abandoned_total Total number of settlements abandoned",
            "# TYPE orders_abandoned_total counter",
            f"orders_abandoned_total {self.counters['orders_abandoned_total']}",
            "# HELP orders_open Number of orders still open",
            "# TYPE orders_open gauge",
            f"orders_open {self.orders_open}",
            "# HELP settlement_delay_seconds Simulated exchange latency per order",
            "# TYPE settlement_delay_seconds histogram",
        ]
        for bucket, count in zip(DELAY_BUCKETS, self.delay_counts):
            lines.append(f"settlement_delay_seconds_bucket{{le=\"{bucket}\"}} {count}")
        lines.append(f"settlement_delay_seconds_bucket{{le=\"+Inf\"}} {self.delay_count}")
        lines.append(f"settlement_delay_seconds_sum {self.delay_sum}")
        lines.append(f"settlement_delay_seconds_count {self.delay_count}")
        return "\n".join(lines) + "\n"
