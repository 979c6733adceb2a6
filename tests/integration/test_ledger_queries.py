"""Integration tests for ledger totals, balance and the monthly report"""

import pytest
from datetime import date
from office_ledger.domain.engine import LedgerEngine
from office_ledger.domain.models import (
    Cadence,
    EntryDirection,
    EntryStatus,
    PayableSpec,
    PaymentMode,
    SaleSpec,
)
from office_ledger.domain.money import Money


@pytest.fixture
def january(ledger_engine: LedgerEngine, sale_day: date):
    """A 9999 sale in 4 installments and a 1000 expense paid in January"""
    plan = ledger_engine.record_sale(
        SaleSpec(
            amount=Money(9999),
            mode=PaymentMode.INSTALLMENTS,
            installment_count=4,
            occasional_client_id="walk-in-7",
        ),
        today=sale_day,
    )
    payable = ledger_engine.create_payable(
        PayableSpec(
            description="Stationery",
            amount=Money(1000),
            category="Supplies",
            first_due_date=date(2024, 1, 15),
            cadence=Cadence.ONE_OFF,
        )
    )[0]
    ledger_engine.pay_payable(payable.id, date(2024, 1, 20))
    return plan


def test_ledger_totals(ledger_engine: LedgerEngine, january):
    assert ledger_engine.ledger_total() == Money(10999)
    assert ledger_engine.ledger_total(EntryDirection.INFLOW, EntryStatus.FORECAST) == Money(7499)
    assert ledger_engine.ledger_total(EntryDirection.INFLOW, EntryStatus.CONFIRMED) == Money(2500)
    assert ledger_engine.ledger_total(EntryDirection.OUTFLOW) == Money(1000)
    assert ledger_engine.ledger_total(start=date(2024, 3, 1), end=date(2024, 3, 31)) == Money(2500)


def test_ledger_total_empty(ledger_engine: LedgerEngine):
    assert ledger_engine.ledger_total() == Money.zero()


def test_balance_counts_confirmed_only(ledger_engine: LedgerEngine, january):
    assert ledger_engine.balance() == Money(1500)
    assert ledger_engine.balance(start=date(2024, 2, 1)) == Money.zero()
    assert ledger_engine.balance().format_brl() == "R$ 15,00"


def test_balance_after_charge_payment(ledger_engine: LedgerEngine, january):
    ledger_engine.pay_charge(january[1].charge.id, date(2024, 2, 27))

    assert ledger_engine.balance() == Money(4000)
    assert ledger_engine.ledger_total(EntryDirection.INFLOW, EntryStatus.FORECAST) == Money(4999)


def test_balance_can_go_negative(ledger_engine: LedgerEngine):
    payable = ledger_engine.create_payable(
        PayableSpec(description="Rent", amount=Money(300000), category="Rent", first_due_date=date(2024, 1, 5))
    )[0]
    ledger_engine.pay_payable(payable.id, date(2024, 1, 5))

    assert ledger_engine.balance() == Money(-300000)
    assert ledger_engine.balance().format_brl() == "-R$ 3.000,00"


def test_monthly_report(ledger_engine: LedgerEngine, january):
    report = ledger_engine.monthly_report(2024, 1, today=date(2024, 1, 31))

    assert report.expenses.paid == Money(1000)
    assert report.expenses.paid_count == 1
    assert report.revenue_confirmed == Money(2500)
    assert report.revenue_forecast == Money.zero()
    assert report.net_result == Money(1500)
    assert (report.expense_percentage, report.revenue_percentage) == (28.57, 71.43)
    assert [(c.category, c.percentage) for c in report.categories] == [("Supplies", 100.0)]


def test_monthly_report_forecast_month(ledger_engine: LedgerEngine, january):
    report = ledger_engine.monthly_report(2024, 2, today=date(2024, 1, 31))

    assert report.revenue_confirmed == Money.zero()
    assert report.revenue_forecast == Money(2500)
    assert report.revenue_total == Money(2500)
    assert report.expenses.total == Money.zero()
    assert report.categories == []


def test_monthly_report_sweeps_overdue(ledger_engine: LedgerEngine):
    ledger_engine.create_payable(
        PayableSpec(description="Internet", amount=Money(12000), category="Utilities", first_due_date=date(2024, 3, 8))
    )

    report = ledger_engine.monthly_report(2024, 3, today=date(2024, 3, 20))

    assert report.expenses.overdue == Money(12000)
    assert report.expenses.pending_count == 0
    assert report.net_result == Money(-12000)
