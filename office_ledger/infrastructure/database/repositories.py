"""Data access layer: SQLAlchemy implementations of the engine's stores"""

import uuid
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from office_ledger.infrastructure.database.models import (
    ChargeItemRecord,
    ChargeRecord,
    LedgerEntryRecord,
    PayableRecord,
)
from office_ledger.domain.models import (
    Cadence,
    Charge,
    ChargeItem,
    ChargeStatus,
    EntryDirection,
    EntryStatus,
    LedgerEntry,
    Payable,
    PayableStatus,
    PaymentMethod,
)
from office_ledger.domain.money import Money
from office_ledger.domain.ports import ChargeFilter, LedgerFilter, PayableFilter


def _column_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Translate domain field values into column values (Money -> *_cents, Enum -> value)"""
    values = {}
    for name, value in fields.items():
        if isinstance(value, Money):
            values[f"{name}_cents"] = value.cents
        elif isinstance(value, Enum):
            values[name] = value.value
        elif name == "metadata":
            values["extra"] = dict(value or {})
        else:
            values[name] = value
    return values


def _apply(record, fields: Dict[str, Any]) -> None:
    for column, value in _column_values(fields).items():
        if not hasattr(record, column):
            raise AttributeError(f"{type(record).__name__} has no column {column!r}")
        setattr(record, column, value)


class ChargeRepository:
    """Repository for charges and their line items"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, charge: Charge) -> Charge:
        db_charge = ChargeRecord(
            id=charge.id,
            client_id=charge.client_id,
            occasional_client_id=charge.occasional_client_id,
            subtotal_cents=charge.subtotal.cents,
            discount_cents=charge.discount.cents,
            total_cents=charge.total.cents,
            due_date=charge.due_date,
            status=charge.status.value,
            payment_date=charge.payment_date,
            payment_method=charge.payment_method.value if charge.payment_method else None,
            notes=charge.notes,
            extra=dict(charge.metadata),
            items=[
                ChargeItemRecord(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price_cents=item.unit_price.cents,
                    discount_cents=item.discount.cents,
                )
                for item in charge.items
            ],
        )
        self.db.add(db_charge)
        self.db.flush()  # Get ID without committing
        return self._to_domain(db_charge)

    def find_by_id(self, charge_id: uuid.UUID, for_update: bool = False) -> Optional[Charge]:
        """Fetch a charge; ``for_update`` row-locks it until the transaction ends"""
        query = self.db.query(ChargeRecord).filter(ChargeRecord.id == charge_id)
        if for_update:
            query = query.with_for_update()
        db_charge = query.first()
        return self._to_domain(db_charge) if db_charge else None

    def update(self, charge_id: uuid.UUID, **fields: Any) -> Charge:
        db_charge = self.db.get(ChargeRecord, charge_id)
        if db_charge is None:
            raise LookupError(f"Charge {charge_id} vanished during update")
        _apply(db_charge, fields)
        self.db.flush()
        return self._to_domain(db_charge)

    def find_many(self, criteria: ChargeFilter) -> List[Charge]:
        query = self.db.query(ChargeRecord)
        if criteria.client_id:
            query = query.filter(ChargeRecord.client_id == criteria.client_id)
        if criteria.occasional_client_id:
            query = query.filter(ChargeRecord.occasional_client_id == criteria.occasional_client_id)
        if criteria.status is not None:
            query = query.filter(ChargeRecord.status == criteria.status.value)
        if criteria.start is not None:
            query = query.filter(ChargeRecord.due_date >= criteria.start)
        if criteria.end is not None:
            query = query.filter(ChargeRecord.due_date <= criteria.end)

        query = query.order_by(ChargeRecord.due_date.asc(), ChargeRecord.created_at.asc(), ChargeRecord.id)
        query = query.offset((criteria.page - 1) * criteria.limit).limit(criteria.limit)
        return [self._to_domain(c) for c in query.all()]

    @staticmethod
    def _to_domain(db_charge: ChargeRecord) -> Charge:
        return Charge(
            id=db_charge.id,
            client_id=db_charge.client_id,
            occasional_client_id=db_charge.occasional_client_id,
            subtotal=Money(db_charge.subtotal_cents),
            discount=Money(db_charge.discount_cents),
            total=Money(db_charge.total_cents),
            due_date=db_charge.due_date,
            status=ChargeStatus(db_charge.status),
            payment_date=db_charge.payment_date,
            payment_method=PaymentMethod(db_charge.payment_method) if db_charge.payment_method else None,
            notes=db_charge.notes,
            metadata=dict(db_charge.extra or {}),
            items=[
                ChargeItem(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=Money(item.unit_price_cents),
                    discount=Money(item.discount_cents),
                )
                for item in db_charge.items
            ],
            created_at=db_charge.created_at,
        )


class LedgerRepository:
    """Repository for cash-flow ledger entries"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, entry: LedgerEntry) -> LedgerEntry:
        db_entry = LedgerEntryRecord(
            id=entry.id,
            direction=entry.direction.value,
            amount_cents=entry.amount.cents,
            description=entry.description,
            status=entry.status.value,
            effective_date=entry.effective_date,
            charge_id=entry.charge_id,
            recurrence_id=entry.recurrence_id,
            payable_id=entry.payable_id,
            extra=dict(entry.metadata),
        )
        if entry.created_at is not None:
            db_entry.created_at = entry.created_at
        self.db.add(db_entry)
        self.db.flush()
        return self._to_domain(db_entry)

    def find_by_id(self, entry_id: uuid.UUID) -> Optional[LedgerEntry]:
        db_entry = self.db.get(LedgerEntryRecord, entry_id)
        return self._to_domain(db_entry) if db_entry else None

    def find_by_charge(
        self,
        charge_id: uuid.UUID,
        status: Optional[EntryStatus] = None,
        direction: Optional[EntryDirection] = None,
    ) -> List[LedgerEntry]:
        """Entries linked to a charge, earliest-created first"""
        query = self.db.query(LedgerEntryRecord).filter(LedgerEntryRecord.charge_id == charge_id)
        if status is not None:
            query = query.filter(LedgerEntryRecord.status == status.value)
        if direction is not None:
            query = query.filter(LedgerEntryRecord.direction == direction.value)
        query = query.order_by(LedgerEntryRecord.created_at.asc(), LedgerEntryRecord.id.asc())
        return [self._to_domain(e) for e in query.all()]

    def find_one(
        self, charge_id: uuid.UUID, status: EntryStatus, direction: EntryDirection
    ) -> Optional[LedgerEntry]:
        entries = self.find_by_charge(charge_id, status, direction)
        return entries[0] if entries else None

    def update(self, entry_id: uuid.UUID, **fields: Any) -> LedgerEntry:
        db_entry = self.db.get(LedgerEntryRecord, entry_id)
        if db_entry is None:
            raise LookupError(f"Ledger entry {entry_id} vanished during update")
        _apply(db_entry, fields)
        self.db.flush()
        return self._to_domain(db_entry)

    def sum(self, criteria: LedgerFilter) -> Money:
        query = self._filtered(self.db.query(func.coalesce(func.sum(LedgerEntryRecord.amount_cents), 0)), criteria)
        return Money(int(query.scalar()))

    def find_many(self, criteria: LedgerFilter, page: int = 1, limit: int = 50) -> List[LedgerEntry]:
        """Entries by effective date, then creation order"""
        query = self._filtered(self.db.query(LedgerEntryRecord), criteria)
        query = query.order_by(
            LedgerEntryRecord.effective_date.asc(), LedgerEntryRecord.created_at.asc(), LedgerEntryRecord.id
        )
        query = query.offset((page - 1) * limit).limit(limit)
        return [self._to_domain(e) for e in query.all()]

    @staticmethod
    def _filtered(query, criteria: LedgerFilter):
        if criteria.direction is not None:
            query = query.filter(LedgerEntryRecord.direction == criteria.direction.value)
        if criteria.status is not None:
            query = query.filter(LedgerEntryRecord.status == criteria.status.value)
        if criteria.start is not None:
            query = query.filter(LedgerEntryRecord.effective_date >= criteria.start)
        if criteria.end is not None:
            query = query.filter(LedgerEntryRecord.effective_date <= criteria.end)
        if criteria.charge_id is not None:
            query = query.filter(LedgerEntryRecord.charge_id == criteria.charge_id)
        return query

    @staticmethod
    def _to_domain(db_entry: LedgerEntryRecord) -> LedgerEntry:
        return LedgerEntry(
            id=db_entry.id,
            direction=EntryDirection(db_entry.direction),
            amount=Money(db_entry.amount_cents),
            description=db_entry.description,
            status=EntryStatus(db_entry.status),
            effective_date=db_entry.effective_date,
            charge_id=db_entry.charge_id,
            recurrence_id=db_entry.recurrence_id,
            payable_id=db_entry.payable_id,
            metadata=dict(db_entry.extra or {}),
            created_at=db_entry.created_at,
        )


class PayableRepository:
    """Repository for payables (soft-deleted rows are invisible to queries)"""

    ORDERABLE = {
        "due_date": PayableRecord.due_date,
        "amount": PayableRecord.amount_cents,
        "status": PayableRecord.status,
        "category": PayableRecord.category,
        "created_at": PayableRecord.created_at,
    }

    def __init__(self, db: Session):
        self.db = db

    def create(self, payable: Payable) -> Payable:
        db_payable = PayableRecord(
            id=payable.id,
            description=payable.description,
            amount_cents=payable.amount.cents,
            category=payable.category,
            due_date=payable.due_date,
            cadence=payable.cadence.value,
            status=payable.status.value,
            payment_date=payable.payment_date,
            active=payable.active,
            series_id=payable.series_id,
            extra=dict(payable.metadata),
        )
        self.db.add(db_payable)
        self.db.flush()
        return self._to_domain(db_payable)

    def find_by_id(self, payable_id: uuid.UUID, for_update: bool = False) -> Optional[Payable]:
        query = self.db.query(PayableRecord).filter(PayableRecord.id == payable_id)
        if for_update:
            query = query.with_for_update()
        db_payable = query.first()
        return self._to_domain(db_payable) if db_payable else None

    def update(self, payable_id: uuid.UUID, **fields: Any) -> Payable:
        db_payable = self.db.get(PayableRecord, payable_id)
        if db_payable is None:
            raise LookupError(f"Payable {payable_id} vanished during update")
        _apply(db_payable, fields)
        self.db.flush()
        return self._to_domain(db_payable)

    def find_overdue_candidates(self, today: date) -> List[Payable]:
        """Active pending payables due strictly before ``today``"""
        rows = (
            self.db.query(PayableRecord)
            .filter(
                PayableRecord.active.is_(True),
                PayableRecord.status == PayableStatus.PENDING.value,
                PayableRecord.due_date < today,
            )
            .with_for_update()
            .all()
        )
        return [self._to_domain(p) for p in rows]

    def find_by_date_range(self, start: date, end: date) -> List[Payable]:
        rows = (
            self.db.query(PayableRecord)
            .filter(
                PayableRecord.active.is_(True),
                PayableRecord.due_date >= start,
                PayableRecord.due_date <= end,
            )
            .order_by(PayableRecord.due_date.asc())
            .all()
        )
        return [self._to_domain(p) for p in rows]

    def find_many(self, criteria: PayableFilter) -> List[Payable]:
        query = self.db.query(PayableRecord).filter(PayableRecord.active.is_(True))
        if criteria.status is not None:
            query = query.filter(PayableRecord.status == criteria.status.value)
        if criteria.category:
            query = query.filter(PayableRecord.category == criteria.category)
        if criteria.cadence is not None:
            query = query.filter(PayableRecord.cadence == criteria.cadence.value)
        if criteria.start is not None:
            query = query.filter(PayableRecord.due_date >= criteria.start)
        if criteria.end is not None:
            query = query.filter(PayableRecord.due_date <= criteria.end)

        column = self.ORDERABLE.get(criteria.order_by, PayableRecord.due_date)
        query = query.order_by(column.desc() if criteria.descending else column.asc(), PayableRecord.id)
        query = query.offset((criteria.page - 1) * criteria.limit).limit(criteria.limit)
        return [self._to_domain(p) for p in query.all()]

    @staticmethod
    def _to_domain(db_payable: PayableRecord) -> Payable:
        return Payable(
            id=db_payable.id,
            description=db_payable.description,
            amount=Money(db_payable.amount_cents),
            category=db_payable.category,
            due_date=db_payable.due_date,
            cadence=Cadence(db_payable.cadence),
            status=PayableStatus(db_payable.status),
            payment_date=db_payable.payment_date,
            active=db_payable.active,
            series_id=db_payable.series_id,
            metadata=dict(db_payable.extra or {}),
            created_at=db_payable.created_at,
        )
