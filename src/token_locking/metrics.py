"""
Prometheus instrumentation for the locking contract.

Each ``LockingMetrics`` owns its own ``CollectorRegistry`` so several
contracts in one process do not register the same metric names twice.
Helpers are safe to call from the withdrawal path.
"""

from __future__ import annotations

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest


class LockingMetrics:
    """Counters and gauges describing one custody relationship."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self.withdrawals = Counter(
            "locking_withdrawals_total",
            "Total number of successful withdrawals",
            registry=self.registry,
        )
        self.released = Counter(
            "locking_released_amount_total",
            "Total amount released to the beneficiary",
            registry=self.registry,
        )
        self.rejections = Counter(
            "locking_rejected_operations_total",
            "Rejected arm and withdraw calls",
            ["operation", "reason"],
            registry=self.registry,
        )
        self.custody_balance = Gauge(
            "locking_custody_balance",
            "Custody balance observed after the last state change",
            registry=self.registry,
        )
        self.withdrawn_amount = Gauge(
            "locking_withdrawn_amount",
            "Cumulative amount withdrawn by the beneficiary",
            registry=self.registry,
        )
        self.total_deposit = Gauge(
            "locking_total_deposit",
            "Deposit snapshotted when the schedule was armed",
            registry=self.registry,
        )

    def record_armed(self, total_deposit: int) -> None:
        self.total_deposit.set(total_deposit)
        self.custody_balance.set(total_deposit)
        self.withdrawn_amount.set(0)

    def record_withdrawal(self, released: int, withdrawn_total: int, custody_balance: int) -> None:
        """Count a committed withdrawal; zero releases only refresh the gauges."""
        if released > 0:
            self.withdrawals.inc()
            self.released.inc(released)
        self.withdrawn_amount.set(withdrawn_total)
        self.custody_balance.set(custody_balance)

    def record_rejection(self, operation: str, reason: str) -> None:
        self.rejections.labels(operation=operation, reason=reason).inc()

    def sample(self, name: str, labels: Optional[dict] = None) -> float:
        """Read a sample value from this registry (0.0 when never recorded)."""
        value = self.registry.get_sample_value(name, labels or {})
        return value if value is not None else 0.0

    def export(self) -> bytes:
        """Text exposition of this registry."""
        return generate_latest(self.registry)
