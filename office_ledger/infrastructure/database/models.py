"""SQLAlchemy ORM models for charges, ledger entries and payables"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, Date, Integer, ForeignKey, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChargeRecord(Base):
    """Billable event (cobrança)"""

    __tablename__ = "charge"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id = Column(Text, nullable=True, index=True)
    occasional_client_id = Column(Text, nullable=True, index=True)
    subtotal_cents = Column(BigInteger, nullable=False)
    discount_cents = Column(BigInteger, nullable=False, default=0)
    total_cents = Column(BigInteger, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(String(16), nullable=False, default="pending", index=True)
    payment_date = Column(Date, nullable=True)
    payment_method = Column(String(16), nullable=True)
    notes = Column(Text, nullable=True)
    extra = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    items = relationship("ChargeItemRecord", back_populates="charge", cascade="all, delete-orphan")


class ChargeItemRecord(Base):
    """Line item of an invoiced charge"""

    __tablename__ = "charge_item"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    charge_id = Column(Uuid, ForeignKey("charge.id", ondelete="CASCADE"), nullable=False)
    description = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price_cents = Column(BigInteger, nullable=False)
    discount_cents = Column(BigInteger, nullable=False, default=0)

    charge = relationship("ChargeRecord", back_populates="items")


class LedgerEntryRecord(Base):
    """Cash-flow ledger line (balanço)"""

    __tablename__ = "ledger_entry"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    direction = Column(String(8), nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default="forecast", index=True)
    effective_date = Column(Date, nullable=False, index=True)
    charge_id = Column(Uuid, ForeignKey("charge.id"), nullable=True, index=True)
    recurrence_id = Column(Uuid, nullable=True)
    payable_id = Column(Uuid, ForeignKey("payable.id"), nullable=True, index=True)
    extra = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class PayableRecord(Base):
    """Obligation to pay (conta a pagar)"""

    __tablename__ = "payable"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    description = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    category = Column(Text, nullable=False, index=True)
    due_date = Column(Date, nullable=False, index=True)
    cadence = Column(String(16), nullable=False, default="one_off")
    status = Column(String(16), nullable=False, default="pending", index=True)
    payment_date = Column(Date, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    series_id = Column(Uuid, nullable=True, index=True)
    extra = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
