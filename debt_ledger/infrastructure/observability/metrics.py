"""Prometheus metrics for monitoring debt intake, repayments and write conflicts"""

from prometheus_client import Counter, Histogram

# Debt metrics
debts_created_counter = Counter(
    "debt_ledger_debts_created_total",
    "Debts recorded",
    ["client"],  # new | existing
)

debts_settled_counter = Counter(
    "debt_ledger_debts_settled_total",
    "Debts fully repaid",
    ["rating"],  # good | bad | untrusted
)

debts_deleted_counter = Counter(
    "debt_ledger_debts_deleted_total",
    "Debts soft-deleted",
)

# Payment metrics
payment_counter = Counter(
    "debt_ledger_payments_total",
    "Payment attempts by outcome",
    ["outcome"],  # partial | settled | <error code>
)

payment_amount_histogram = Histogram(
    "debt_ledger_payment_amount_cents",
    "Accepted payment amounts in cents",
    buckets=[1_000, 5_000, 10_000, 50_000, 100_000, 500_000, 1_000_000],
)

concurrency_conflict_counter = Counter(
    "debt_ledger_concurrency_conflicts_total",
    "Payments rejected because another write touched the same debt",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment_outcome(outcome: str, paid_cents: int = 0) -> None:
    """Count a payment attempt; accepted payments also feed the amount histogram"""
    payment_counter.labels(outcome=outcome).inc()
    if outcome in ("partial", "settled"):
        payment_amount_histogram.observe(paid_cents)
