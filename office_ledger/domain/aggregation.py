"""Read-only ledger and payable aggregations"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from office_ledger.domain.models import EntryDirection, EntryStatus, Payable, PayableStatus
from office_ledger.domain.money import Money
from office_ledger.domain.ports import LedgerFilter, LedgerStore


@dataclass
class StatusTotals:
    """Amounts and counts of payables per status"""

    pending: Money = field(default_factory=Money.zero)
    paid: Money = field(default_factory=Money.zero)
    overdue: Money = field(default_factory=Money.zero)
    pending_count: int = 0
    paid_count: int = 0
    overdue_count: int = 0

    @property
    def total(self) -> Money:
        return self.pending + self.paid + self.overdue


@dataclass
class CategoryShare:
    category: str
    amount: Money
    percentage: float


@dataclass
class MonthlyReport:
    """Expenses vs revenue for one calendar month"""

    year: int
    month: int
    expenses: StatusTotals
    categories: List[CategoryShare]
    revenue_confirmed: Money
    revenue_forecast: Money
    net_result: Money
    expense_percentage: float
    revenue_percentage: float

    @property
    def revenue_total(self) -> Money:
        return self.revenue_confirmed + self.revenue_forecast


def _percentage(part: int, whole: int) -> float:
    return round(part * 100 / whole, 2) if whole else 0.0


def sum_entries(
    ledger: LedgerStore,
    direction: Optional[EntryDirection] = None,
    status: Optional[EntryStatus] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Money:
    """Sum of ledger entry amounts matching every given criterion"""
    return ledger.sum(LedgerFilter(direction=direction, status=status, start=start, end=end))


def confirmed_balance(ledger: LedgerStore, start: Optional[date] = None, end: Optional[date] = None) -> Money:
    """Confirmed inflows minus confirmed outflows"""
    inflow = sum_entries(ledger, EntryDirection.INFLOW, EntryStatus.CONFIRMED, start, end)
    outflow = sum_entries(ledger, EntryDirection.OUTFLOW, EntryStatus.CONFIRMED, start, end)
    return inflow - outflow


def totals_by_status(payables: Iterable[Payable]) -> StatusTotals:
    totals = StatusTotals()
    for payable in payables:
        if payable.status == PayableStatus.PENDING:
            totals.pending += payable.amount
            totals.pending_count += 1
        elif payable.status == PayableStatus.PAID:
            totals.paid += payable.amount
            totals.paid_count += 1
        elif payable.status == PayableStatus.OVERDUE:
            totals.overdue += payable.amount
            totals.overdue_count += 1
    return totals


def totals_by_category(payables: Iterable[Payable]) -> List[CategoryShare]:
    """Per-category amounts, largest first, with their share of the total (0-100)"""
    amounts: Dict[str, Money] = defaultdict(Money.zero)
    for payable in payables:
        amounts[payable.category] += payable.amount

    grand_total = sum(amount.cents for amount in amounts.values())
    shares = [
        CategoryShare(
            category=category,
            amount=amount,
            percentage=_percentage(amount.cents, grand_total),
        )
        for category, amount in amounts.items()
    ]
    return sorted(shares, key=lambda s: (-s.amount.cents, s.category))


def build_monthly_report(
    year: int,
    month: int,
    payables: List[Payable],
    revenue_confirmed: Money,
    revenue_forecast: Money,
) -> MonthlyReport:
    """
    Combine a month's payables and revenue into the comparative report.

    Net result is all revenue (confirmed and forecast) minus all expenses
    (pending, paid and overdue). The percentages are each side's share of
    revenue plus expenses, 0 when both are zero.
    """
    expenses = totals_by_status(payables)
    revenue_total = revenue_confirmed + revenue_forecast
    grand_total = revenue_total.cents + expenses.total.cents
    return MonthlyReport(
        year=year,
        month=month,
        expenses=expenses,
        categories=totals_by_category(payables),
        revenue_confirmed=revenue_confirmed,
        revenue_forecast=revenue_forecast,
        net_result=revenue_total - expenses.total,
        expense_percentage=_percentage(expenses.total.cents, grand_total),
        revenue_percentage=_percentage(revenue_total.cents, grand_total),
    )
