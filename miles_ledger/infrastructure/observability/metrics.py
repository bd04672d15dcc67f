"""Prometheus metrics for transaction volume, schedules and settlements"""

from prometheus_client import Counter, Histogram

# Inventory metrics
transaction_counter = Counter(
    "miles_transactions_total",
    "Miles transactions recorded",
    ["type"],  # purchase | sale | bonus | transfer_in | transfer_out | use | expire
)

transaction_quantity_counter = Counter(
    "miles_transaction_quantity_total",
    "Absolute miles moved by transactions",
    ["type"],
)

# Schedule metrics
schedule_counter = Counter(
    "miles_schedules_total",
    "Installment schedules created",
    ["kind"],  # payable | receivable
)

installment_count_histogram = Histogram(
    "miles_schedule_installments",
    "Installments per schedule",
    ["kind"],
    buckets=[1, 2, 3, 4, 6, 10, 12, 18, 24, 60],
)

settlement_counter = Counter(
    "miles_installments_settled_total",
    "Installments marked as paid or received",
    ["kind"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transaction(transaction_type: str, quantity: int) -> None:
    """Record volume of a persisted transaction"""
    transaction_counter.labels(type=transaction_type).inc()
    transaction_quantity_counter.labels(type=transaction_type).inc(abs(quantity))


def record_schedule(kind: str, installment_count: int) -> None:
    """Record a persisted installment schedule"""
    schedule_counter.labels(kind=kind).inc()
    installment_count_histogram.labels(kind=kind).observe(installment_count)
