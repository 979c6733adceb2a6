"""Integration tests for payables: expansion, payment, overdue sweep"""

import pytest
import uuid
from datetime import date
from sqlalchemy.exc import IntegrityError
from office_ledger.domain.engine import LedgerEngine
from office_ledger.domain.exceptions import AlreadyPaidError, NotFoundError, StorageFailure
from office_ledger.domain.models import Cadence, EntryDirection, EntryStatus, PayableSpec, PayableStatus
from office_ledger.domain.money import Money
from office_ledger.domain.ports import LedgerFilter, PayableFilter


def rent(cadence=Cadence.MONTHLY, first_due=date(2024, 1, 31)) -> PayableSpec:
    return PayableSpec(
        description="Office rent",
        amount=Money(250000),
        category="Rent",
        first_due_date=first_due,
        cadence=cadence,
    )


def all_payables(ledger_engine: LedgerEngine):
    return ledger_engine.payables.find_many(PayableFilter(limit=100))


def test_create_monthly_payable_persists_thirteen(ledger_engine: LedgerEngine):
    created = ledger_engine.create_payable(rent())

    assert len(created) == 13
    stored = all_payables(ledger_engine)
    assert len(stored) == 13
    assert [p.due_date for p in stored][:3] == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]
    assert {p.series_id for p in stored} == {created[0].id}


def test_create_one_off_payable(ledger_engine: LedgerEngine):
    created = ledger_engine.create_payable(rent(cadence=None))

    assert len(created) == 1
    assert created[0].cadence == Cadence.ONE_OFF
    assert len(all_payables(ledger_engine)) == 1


def test_expansion_is_atomic(ledger_engine: LedgerEngine, monkeypatch):
    original_create = ledger_engine.payables.create
    calls = []

    def flaky_create(payable):
        calls.append(payable)
        if len(calls) == 5:
            raise IntegrityError("INSERT INTO payable", {}, Exception("constraint failed"))
        return original_create(payable)

    monkeypatch.setattr(ledger_engine.payables, "create", flaky_create)
    with pytest.raises(StorageFailure):
        ledger_engine.create_payable(rent())

    assert all_payables(ledger_engine) == []


def test_pay_payable_writes_one_outflow(ledger_engine: LedgerEngine):
    created = ledger_engine.create_payable(rent(cadence=Cadence.QUARTERLY))
    target = created[1]

    paid = ledger_engine.pay_payable(target.id, date(2024, 4, 29))

    assert paid.status == PayableStatus.PAID
    assert paid.payment_date == date(2024, 4, 29)
    outflow = ledger_engine.ledger.sum(LedgerFilter(direction=EntryDirection.OUTFLOW, status=EntryStatus.CONFIRMED))
    assert outflow == Money(250000)

    with pytest.raises(AlreadyPaidError):
        ledger_engine.pay_payable(target.id, date(2024, 4, 30))
    outflow = ledger_engine.ledger.sum(LedgerFilter(direction=EntryDirection.OUTFLOW))
    assert outflow == Money(250000)

    # Other occurrences are untouched
    assert ledger_engine.payables.find_by_id(created[2].id).status == PayableStatus.PENDING


def test_pay_unknown_payable(ledger_engine: LedgerEngine):
    with pytest.raises(NotFoundError):
        ledger_engine.pay_payable(uuid.uuid4(), date(2024, 1, 1))


def test_paid_payable_is_immutable(ledger_engine: LedgerEngine):
    payable = ledger_engine.create_payable(rent(cadence=Cadence.ONE_OFF))[0]
    ledger_engine.pay_payable(payable.id, date(2024, 1, 30))

    with pytest.raises(AlreadyPaidError):
        ledger_engine.update_payable(payable.id, {"amount": Money(1)})
    with pytest.raises(AlreadyPaidError):
        ledger_engine.delete_payable(payable.id)


def test_update_payable(ledger_engine: LedgerEngine):
    payable = ledger_engine.create_payable(rent(cadence=Cadence.ONE_OFF))[0]

    updated = ledger_engine.update_payable(
        payable.id, {"amount": Money(260000), "category": "Facilities", "due_date": date(2024, 2, 5)}
    )

    assert updated.amount == Money(260000)
    assert updated.category == "Facilities"
    assert updated.due_date == date(2024, 2, 5)


def test_delete_payable_is_soft(ledger_engine: LedgerEngine):
    payable = ledger_engine.create_payable(rent(cadence=Cadence.ONE_OFF))[0]

    ledger_engine.delete_payable(payable.id)

    assert all_payables(ledger_engine) == []
    assert ledger_engine.payables.find_by_id(payable.id).active is False
    with pytest.raises(NotFoundError):
        ledger_engine.pay_payable(payable.id, date(2024, 1, 30))


def test_sweep_overdue_is_idempotent(ledger_engine: LedgerEngine):
    created = ledger_engine.create_payable(rent(first_due=date(2024, 1, 10)))
    ledger_engine.pay_payable(created[0].id, date(2024, 1, 9))

    first_run = ledger_engine.sweep_overdue(date(2024, 3, 10))
    statuses = [p.status for p in all_payables(ledger_engine)]
    second_run = ledger_engine.sweep_overdue(date(2024, 3, 10))

    assert first_run == 1  # Feb 10; Mar 10 is due today, not overdue
    assert second_run == 0
    assert [p.status for p in all_payables(ledger_engine)] == statuses
    assert statuses[:3] == [PayableStatus.PAID, PayableStatus.OVERDUE, PayableStatus.PENDING]


def test_overdue_payable_can_be_paid(ledger_engine: LedgerEngine):
    payable = ledger_engine.create_payable(rent(cadence=Cadence.ONE_OFF, first_due=date(2024, 1, 10)))[0]
    ledger_engine.sweep_overdue(date(2024, 2, 1))

    paid = ledger_engine.pay_payable(payable.id, date(2024, 2, 2))

    assert paid.status == PayableStatus.PAID


def test_list_payables_sweeps_first(ledger_engine: LedgerEngine):
    ledger_engine.create_payable(rent(first_due=date(2024, 1, 10)))

    listing = ledger_engine.list_payables(PayableFilter(status=PayableStatus.OVERDUE), today=date(2024, 4, 15))

    assert [p.due_date for p in listing.payables] == [
        date(2024, 1, 10),
        date(2024, 2, 10),
        date(2024, 3, 10),
        date(2024, 4, 10),
    ]
    assert listing.summary.pending_count == 0
    assert listing.summary.overdue_count == 1  # April occurrence (due the 10th) is overdue
    assert listing.summary.overdue == Money(250000)


def test_payables_by_category(ledger_engine: LedgerEngine):
    ledger_engine.create_payable(rent(cadence=Cadence.ONE_OFF, first_due=date(2024, 5, 3)))
    ledger_engine.create_payable(
        PayableSpec(
            description="Accounting software",
            amount=Money(50000),
            category="Software",
            first_due_date=date(2024, 5, 20),
        )
    )

    shares = ledger_engine.payables_by_category(date(2024, 5, 1), date(2024, 5, 31))

    assert [(s.category, s.amount.cents) for s in shares] == [("Rent", 250000), ("Software", 50000)]
