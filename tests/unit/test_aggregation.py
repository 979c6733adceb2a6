"""Unit tests for payable aggregations"""

from datetime import date
from office_ledger.domain.aggregation import build_monthly_report, totals_by_category, totals_by_status
from office_ledger.domain.models import Payable, PayableStatus
from office_ledger.domain.money import Money


def make_payable(amount, category, status=PayableStatus.PENDING) -> Payable:
    return Payable(
        description=f"{category} bill",
        amount=Money(amount),
        category=category,
        due_date=date(2024, 4, 10),
        status=status,
        payment_date=date(2024, 4, 9) if status == PayableStatus.PAID else None,
    )


def test_totals_by_status():
    totals = totals_by_status(
        [
            make_payable(1000, "Rent"),
            make_payable(2000, "Rent", PayableStatus.PAID),
            make_payable(300, "Software", PayableStatus.OVERDUE),
            make_payable(700, "Software", PayableStatus.PAID),
        ]
    )

    assert totals.pending == Money(1000)
    assert totals.paid == Money(2700)
    assert totals.overdue == Money(300)
    assert (totals.pending_count, totals.paid_count, totals.overdue_count) == (1, 2, 1)
    assert totals.total == Money(4000)


def test_totals_by_category_sorted_with_percentages():
    shares = totals_by_category(
        [make_payable(3000, "Rent"), make_payable(500, "Software"), make_payable(500, "Software"), make_payable(1000, "Taxes")]
    )

    assert [s.category for s in shares] == ["Rent", "Software", "Taxes"]
    assert shares[0].amount == Money(3000)
    assert shares[0].percentage == 60.0
    assert shares[1].percentage == 20.0
    assert totals_by_category([]) == []


def test_monthly_report_net_result():
    report = build_monthly_report(
        2024,
        4,
        [make_payable(2000, "Rent", PayableStatus.PAID), make_payable(1000, "Taxes")],
        revenue_confirmed=Money(5000),
        revenue_forecast=Money(3000),
    )

    assert report.revenue_total == Money(8000)
    assert report.expenses.total == Money(3000)
    assert report.net_result == Money(5000)
    assert report.expense_percentage == 27.27
    assert report.revenue_percentage == 72.73


def test_monthly_report_counts_forecast_revenue_and_unpaid_expenses():
    report = build_monthly_report(
        2024,
        5,
        [make_payable(3000, "Rent")],
        revenue_confirmed=Money(10000),
        revenue_forecast=Money(5000),
    )

    assert report.net_result == Money(12000)
    assert report.expense_percentage == 16.67
    assert report.revenue_percentage == 83.33


def test_monthly_report_empty_month():
    report = build_monthly_report(2024, 6, [], revenue_confirmed=Money.zero(), revenue_forecast=Money.zero())

    assert report.net_result == Money.zero()
    assert (report.expense_percentage, report.revenue_percentage) == (0.0, 0.0)
