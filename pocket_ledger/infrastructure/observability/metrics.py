"""Prometheus metrics for loans, payments, budgets, health scores and storage"""

from prometheus_client import Counter, Histogram

# Loan metrics
loan_created_counter = Counter(
    "pocket_ledger_loans_created_total",
    "Loans created with a generated schedule",
    ["loan_type"],  # personal | mortgage | vehicle | education | other
)

schedule_payment_counter = Counter(
    "pocket_ledger_schedule_payments_total",
    "Installments marked paid",
    ["method"],  # cash | transfer | auto-debit
)

schedule_edit_counter = Counter(
    "pocket_ledger_schedule_edits_total",
    "Installment amounts edited after generation",
)

rejected_operation_counter = Counter(
    "pocket_ledger_rejected_operations_total",
    "Operations refused by domain validation",
    ["reason"],
)

# Budget and health metrics
budget_status_counter = Counter(
    "pocket_ledger_budget_status_total",
    "Budget status evaluations by band",
    ["status"],  # unused | safe | warning | danger
)

health_score_histogram = Histogram(
    "pocket_ledger_health_score",
    "Financial health scores produced",
    buckets=[20, 35, 50, 65, 80, 90, 100],
)

# Storage metrics
persistence_failure_counter = Counter(
    "pocket_ledger_persistence_failures_total",
    "Document store operations that failed",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_budget_statuses(status_counts: dict) -> None:
    """Record one evaluation per budget for monitoring overspending"""
    for status, count in status_counts.items():
        if count:
            budget_status_counter.labels(status=status).inc(count)


def record_rejection(error: Exception) -> None:
    rejected_operation_counter.labels(reason=type(error).__name__).inc()
