"""Installment plan generation: turns a sale into charges and ledger entries"""

import logging
from datetime import date
from typing import List, Optional

from office_ledger.config import settings
from office_ledger.domain.exceptions import InvalidAmountError, InvalidPlanError
from office_ledger.domain.models import (
    Charge,
    ChargeStatus,
    EntryDirection,
    EntryStatus,
    InstallmentSpec,
    LedgerEntry,
    PaymentMethod,
    PaymentMode,
    PlanItem,
    SaleSpec,
)
from office_ledger.domain.money import Money, sum_money
from office_ledger.domain.schedule import equal_installments
from office_ledger.utils.date_utils import add_months, utc_today

logger = logging.getLogger(__name__)


def generate_plan(sale: SaleSpec, today: Optional[date] = None) -> List[PlanItem]:
    """
    Generate the charges and ledger entries for a sold service.

    Modes:
    - SINGLE_PAYMENT: one paid charge with a confirmed entry, both dated today
    - INSTALLMENTS: first installment paid (confirmed entry dated today), the
      rest pending with forecast entries on their own due dates
    - DOWN_PAYMENT_PLUS_INSTALLMENTS: a paid down payment (when > 0) followed
      by the installments, all pending/forecast

    Without an explicit installment list the amounts come from
    ``equal_installments``: INSTALLMENTS starts this month, installments after
    a down payment start next month.

    Returns:
        (Charge, LedgerEntry) pairs in persistence order; the charge totals add
        up to ``sale.amount``.

    Raises:
        InvalidAmountError: negative amount or down payment
        InvalidPlanError: bad installment count, explicit due dates out of
            order or in the past, or installments that do not add up to the
            sale amount
    """
    if today is None:
        today = utc_today()

    if sale.amount.is_negative() or sale.down_payment.is_negative():
        raise InvalidAmountError("Sale amounts cannot be negative")
    if (sale.client_id is None) == (sale.occasional_client_id is None):
        raise InvalidPlanError("Sale must belong to exactly one client or occasional client")

    if sale.mode == PaymentMode.SINGLE_PAYMENT:
        items = [_settled(sale, sale.amount, today, f"Single payment - {sale.label}")]

    elif sale.mode == PaymentMode.INSTALLMENTS:
        if sale.down_payment.cents:
            raise InvalidPlanError("Down payment is only accepted with DOWN_PAYMENT_PLUS_INSTALLMENTS")
        schedule = _installment_schedule(sale, sale.amount, start_offset_months=0, today=today)
        count = len(schedule)
        first = schedule[0]
        items = [
            _settled(
                sale,
                first.amount,
                today,
                f"Installment 1/{count} - {sale.label}",
                due_date=first.due_date,
            )
        ]
        items += [
            _scheduled(sale, inst, f"Installment {i}/{count} - {sale.label}")
            for i, inst in enumerate(schedule[1:], start=2)
        ]

    elif sale.mode == PaymentMode.DOWN_PAYMENT_PLUS_INSTALLMENTS:
        if sale.down_payment > sale.amount:
            raise InvalidPlanError("Down payment cannot exceed the sale amount")
        remaining = sale.amount - sale.down_payment
        items = []
        if sale.down_payment.cents > 0:
            items.append(_settled(sale, sale.down_payment, today, f"Down payment - {sale.label}"))
        schedule = _installment_schedule(sale, remaining, start_offset_months=1, today=today)
        count = len(schedule)
        items += [
            _scheduled(sale, inst, f"Installment {i}/{count} - {sale.label}")
            for i, inst in enumerate(schedule, start=1)
        ]

    else:
        raise InvalidPlanError(f"Unsupported payment mode: {sale.mode}")

    planned = sum_money(item.charge.total for item in items)
    if planned != sale.amount:
        raise InvalidPlanError(
            f"Installments add up to {planned.cents} cents, sale amount is {sale.amount.cents}"
        )

    logger.info(
        "Plan generated",
        extra={
            "mode": sale.mode.value,
            "amount_cents": sale.amount.cents,
            "charges": len(items),
        },
    )
    return items


def _installment_schedule(
    sale: SaleSpec,
    total: Money,
    start_offset_months: int,
    today: date,
) -> List[InstallmentSpec]:
    """
    Explicit installments when given, otherwise an equal split of ``total``.

    Explicit due dates must be non-decreasing and not before the first
    schedulable day: today, or the first of next month when the installments
    follow a down payment.
    """
    if sale.installments:
        earliest = add_months(today.replace(day=1), start_offset_months) if start_offset_months else today
        previous = earliest
        for i, inst in enumerate(sale.installments, start=1):
            if inst.amount.is_negative():
                raise InvalidAmountError("Installment amounts cannot be negative")
            if inst.due_date < earliest:
                raise InvalidPlanError(
                    f"Installment {i} is due {inst.due_date.isoformat()}, before {earliest.isoformat()}"
                )
            if inst.due_date < previous:
                raise InvalidPlanError(f"Installment {i} is due before installment {i - 1}")
            previous = inst.due_date
        return list(sale.installments)

    if sale.installment_count is None or sale.installment_count < 1:
        raise InvalidPlanError(f"Installment count must be at least 1, got {sale.installment_count}")

    return [
        InstallmentSpec(amount=amount, due_date=due_date)
        for amount, due_date in equal_installments(total, sale.installment_count, start_offset_months, today)
    ]


def _base_charge(sale: SaleSpec, amount: Money, due_date: date, notes: str, **fields) -> Charge:
    return Charge(
        subtotal=amount,
        total=amount,
        due_date=due_date,
        client_id=sale.client_id,
        occasional_client_id=sale.occasional_client_id,
        notes=notes,
        metadata={"payment_mode": sale.mode.value},
        **fields,
    )


def _settled(
    sale: SaleSpec,
    amount: Money,
    today: date,
    label: str,
    due_date: Optional[date] = None,
) -> PlanItem:
    """Charge paid at sale time with its confirmed inflow"""
    method = sale.payment_method or PaymentMethod(settings.default_payment_method)
    charge = _base_charge(
        sale,
        amount,
        due_date or today,
        label,
        status=ChargeStatus.PAID,
        payment_date=today,
        payment_method=method,
    )
    entry = LedgerEntry(
        direction=EntryDirection.INFLOW,
        amount=amount,
        description=f"Revenue received - {label}",
        effective_date=today,
        status=EntryStatus.CONFIRMED,
        charge_id=charge.id,
        metadata={"category": sale.category or settings.revenue_category},
    )
    return PlanItem(charge=charge, entry=entry)


def _scheduled(sale: SaleSpec, inst: InstallmentSpec, label: str) -> PlanItem:
    """Pending charge with its forecast inflow on the due date"""
    charge = _base_charge(sale, inst.amount, inst.due_date, label)
    entry = LedgerEntry(
        direction=EntryDirection.INFLOW,
        amount=inst.amount,
        description=f"Revenue forecast - {label}",
        effective_date=inst.due_date,
        status=EntryStatus.FORECAST,
        charge_id=charge.id,
        metadata={"category": sale.category or settings.revenue_category, "billing": "forecast"},
    )
    return PlanItem(charge=charge, entry=entry)
