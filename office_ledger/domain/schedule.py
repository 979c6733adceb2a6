"""Schedule calendar: due dates for cadences and equal installment splits"""

from datetime import date
from typing import List, Optional, Tuple

from office_ledger.domain.exceptions import InvalidPlanError
from office_ledger.domain.models import Cadence
from office_ledger.domain.money import Money
from office_ledger.utils.date_utils import add_months, utc_today

CADENCE_MONTHS = {
    Cadence.ONE_OFF: 0,
    Cadence.MONTHLY: 1,
    Cadence.QUARTERLY: 3,
    Cadence.SEMIANNUAL: 6,
    Cadence.ANNUAL: 12,
}


def next_cadence_date(base: date, cadence: Cadence, n: int) -> date:
    """
    Add ``n`` cadence periods to ``base``.

    Months are added on the calendar, not as a day count, and the day of
    month clamps to the end of the target month:
        2024-01-31 + 1 month -> 2024-02-29
        2023-01-31 + 1 month -> 2023-02-28
        2024-02-29 + 1 year  -> 2025-02-28
    Each occurrence is computed from ``base`` so clamping never accumulates
    (Jan 31 + 2 months is Mar 31, not Mar 28/29).
    """
    return add_months(base, CADENCE_MONTHS[cadence] * n)


def equal_installments(
    total: Money,
    count: int,
    start_offset_months: int = 0,
    start: Optional[date] = None,
) -> List[Tuple[Money, date]]:
    """
    Split ``total`` into ``count`` installments, monthly from ``start``.

    Each share is total/count rounded half-up; the last installment takes
    whatever is left so the shares always add up to ``total`` exactly:
        9999 / 4  -> [2500, 2500, 2500, 2499]
        10000 / 3 -> [3333, 3333, 3334]
    When rounding up would leave the last share zero or negative (tiny totals
    split many ways) the share falls back to the floor and the last
    installment absorbs the positive remainder:
        2 / 3 -> [0, 0, 2]
    Splitting fewer cents than installments still yields leading zero-amount
    installments.

    Due dates are ``start_offset_months + i`` months after ``start``
    (default: today, UTC).
    """
    if count < 1:
        raise InvalidPlanError(f"Installment count must be at least 1, got {count}")
    if total.is_negative():
        raise InvalidPlanError("Cannot split a negative total")

    if start is None:
        start = utc_today()

    share = total.divide(count)
    if not total.is_zero() and share.multiply(count - 1) >= total:
        share = Money(total.cents // count)
    last = total - share.multiply(count - 1)

    installments = []
    for i in range(count):
        due_date = add_months(start, start_offset_months + i)
        amount = last if i == count - 1 else share
        installments.append((amount, due_date))

    return installments
