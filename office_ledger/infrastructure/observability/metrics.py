"""Prometheus metrics for plan generation, reconciliation and payables"""

from prometheus_client import Counter, Histogram

# Receivables
plans_generated_counter = Counter(
    "ledger_plans_generated_total",
    "Sales turned into charge plans",
    ["mode"],  # single_payment | installments | down_payment_plus_installments
)

charges_reconciled_counter = Counter(
    "ledger_charges_reconciled_total",
    "Charge payments reconciled with the ledger",
    ["path"],  # forecast | fallback
)

reconciliation_ambiguous_counter = Counter(
    "ledger_reconciliation_ambiguous_total",
    "Charge payments that matched more than one forecast entry",
)

# Payables
payables_paid_counter = Counter(
    "ledger_payables_paid_total",
    "Payables marked paid",
    ["category"],
)

payables_expanded_counter = Counter(
    "ledger_payable_occurrences_total",
    "Future payable occurrences materialized from recurring templates",
    ["cadence"],
)

overdue_swept_counter = Counter(
    "ledger_payables_overdue_total",
    "Payables moved to overdue by the sweeper",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_charge_reconciled(path: str) -> None:
    """Count a reconciled charge by the path it took; fallbacks point at missing forecasts"""
    charges_reconciled_counter.labels(path=path).inc()


def record_payable_paid(category: str) -> None:
    payables_paid_counter.labels(category=category).inc()
