"""Prometheus metrics for purchases, invoice payments and due date maintenance"""

from prometheus_client import Counter, Histogram

# Purchase metrics
purchase_counter = Counter(
    "finance_purchases_total",
    "Transactions submitted",
    ["payment_method"],  # CASH | DEBIT | CREDIT | PIX
)

installments_created_counter = Counter(
    "finance_installments_created_total",
    "Installment records created for credit purchases",
)

# Invoice metrics
invoice_paid_toggle_counter = Counter(
    "finance_invoice_paid_toggles_total",
    "Bulk invoice payment status changes",
    ["state"],  # paid | unpaid
)

missing_due_date_counter = Counter(
    "finance_missing_due_date_total",
    "Credit transactions listed raw because they lack a due date",
)

# Maintenance metrics
due_date_recalculation_counter = Counter(
    "finance_due_date_recalculations_total",
    "Transactions touched by due date recalculation",
    ["outcome"],  # updated | failed
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_purchase(payment_method: str, record_count: int) -> None:
    """Record a submitted purchase and, for credit, how many installments it produced"""
    purchase_counter.labels(payment_method=payment_method).inc()
    if payment_method == "CREDIT":
        installments_created_counter.inc(record_count)


def record_invoice_toggle(is_paid: bool) -> None:
    invoice_paid_toggle_counter.labels(state="paid" if is_paid else "unpaid").inc()


def record_recalculation(updated_count: int, failed_count: int) -> None:
    if updated_count:
        due_date_recalculation_counter.labels(outcome="updated").inc(updated_count)
    if failed_count:
        due_date_recalculation_counter.labels(outcome="failed").inc(failed_count)
