"""Prometheus metrics for payment flow, reminders, and imports"""

from prometheus_client import Counter, Histogram

# Payment metrics
payment_counter = Counter(
    "woyu_payment_total",
    "Payments submitted against payment items",
    ["outcome"],  # applied | rejected
)

payment_amount_histogram = Histogram(
    "woyu_payment_amount",
    "Amount of applied payments (NT$)",
    buckets=[100, 500, 1_000, 5_000, 10_000, 50_000, 100_000, 500_000],
)

reconciliation_counter = Counter(
    "woyu_reconciliation_total",
    "Payment item reconciliations",
)

# Reminder metrics
reminder_counter = Counter(
    "woyu_reminder_notifications_total",
    "Reminder notifications generated",
    ["type"],  # payment_due | payment_overdue
)

reminder_failures_counter = Counter(
    "woyu_reminder_cycle_failures_total",
    "Reminder cycles that raised",
)

# Import metrics
import_rows_counter = Counter(
    "woyu_batch_import_rows_total",
    "Batch import rows processed",
    ["outcome"],  # success | failed
)

budget_conversion_counter = Counter(
    "woyu_budget_conversion_total",
    "Budget items converted into payment items",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment(applied: bool, amount=None) -> None:
    """Record a payment submission outcome"""
    outcome = "applied" if applied else "rejected"
    payment_counter.labels(outcome=outcome).inc()
    if applied and amount is not None:
        payment_amount_histogram.observe(float(amount))


def record_import_row(success: bool) -> None:
    import_rows_counter.labels(outcome="success" if success else "failed").inc()
