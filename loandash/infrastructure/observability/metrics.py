"""Prometheus metrics for scheduled payments, archiving and storage health"""

from prometheus_client import Counter, Histogram

from loandash.domain.processing import PassReport

# Scheduler metrics
scheduled_payment_counter = Counter(
    "loandash_scheduled_payments_total",
    "Payments generated by the scheduler",
    ["policy"],  # bank_loan | recurring_debt | recurring_loan
)

completed_counter = Counter(
    "loandash_completed_obligations_total",
    "Records transitioned to completed by a pass",
    ["kind"],  # debts | loans
)

# Archive metrics
archived_counter = Counter(
    "loandash_archived_obligations_total",
    "Records moved to the archive by the auto-archive sweep",
    ["kind"],
)

# Storage metrics
storage_failure_counter = Counter(
    "loandash_storage_failures_total",
    "Failed reads or writes of the data file",
)

document_pass_histogram = Histogram(
    "loandash_document_pass_seconds",
    "Time spent running the scheduler and archive sweep",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_pass(report: PassReport) -> None:
    """Record what a document pass did"""
    for _, result in report.payments:
        scheduled_payment_counter.labels(policy=result.policy).inc()
    for kind, _ in report.completed:
        completed_counter.labels(kind=kind.value).inc()
    for kind, _ in report.sweep.completed:
        completed_counter.labels(kind=kind.value).inc()
    for kind, _ in report.sweep.archived:
        archived_counter.labels(kind=kind.value).inc()
