"""Domain models - pure Python dataclasses representing business entities

Status fields are closed enums and every state change goes through a
transition method that returns a new instance, so an illegal transition
fails where it is attempted instead of being written to storage.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from office_ledger.domain.exceptions import (
    AlreadyCanceledError,
    AlreadyPaidError,
    IllegalTransitionError,
    InvalidAmountError,
    InvalidPlanError,
)
from office_ledger.domain.money import Money, sum_money


class ChargeStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELED = "canceled"
    OVERDUE = "overdue"


class EntryDirection(str, Enum):
    INFLOW = "inflow"
    OUTFLOW = "outflow"


class EntryStatus(str, Enum):
    FORECAST = "forecast"
    CONFIRMED = "confirmed"
    CANCELED = "canceled"
    RECONCILED = "reconciled"


class PayableStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class Cadence(str, Enum):
    ONE_OFF = "one_off"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"


class PaymentMode(str, Enum):
    SINGLE_PAYMENT = "single_payment"
    INSTALLMENTS = "installments"
    DOWN_PAYMENT_PLUS_INSTALLMENTS = "down_payment_plus_installments"


class PaymentMethod(str, Enum):
    PIX = "PIX"
    BOLETO = "BOLETO"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    TRANSFER = "TRANSFER"
    CASH = "CASH"
    CHECK = "CHECK"


@dataclass
class ChargeItem:
    """Line item of an invoiced charge"""

    description: str
    quantity: int
    unit_price: Money
    discount: Money = field(default_factory=Money.zero)

    def __post_init__(self):
        if self.quantity < 1:
            raise InvalidAmountError(f"Item quantity must be positive, got {self.quantity}")

    @property
    def total(self) -> Money:
        return self.unit_price.multiply(self.quantity) - self.discount


@dataclass
class Charge:
    """Billable event owed by a regular or an occasional client"""

    subtotal: Money
    total: Money
    due_date: date
    discount: Money = field(default_factory=Money.zero)
    status: ChargeStatus = ChargeStatus.PENDING
    client_id: Optional[str] = None
    occasional_client_id: Optional[str] = None
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    items: List[ChargeItem] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if (self.client_id is None) == (self.occasional_client_id is None):
            raise InvalidPlanError("Charge must belong to exactly one client or occasional client")
        if self.total != self.subtotal - self.discount:
            raise InvalidAmountError(
                f"Charge total {self.total.cents} != subtotal {self.subtotal.cents} - discount {self.discount.cents}"
            )
        if self.total.is_negative():
            raise InvalidAmountError("Charge total cannot be negative")
        if (self.status == ChargeStatus.PAID) != (self.payment_date is not None):
            raise IllegalTransitionError("Payment date must be set exactly when a charge is paid")
        if (self.status == ChargeStatus.PAID) != (self.payment_method is not None):
            raise IllegalTransitionError("Payment method must be set exactly when a charge is paid")

    @property
    def is_payable(self) -> bool:
        return self.status in (ChargeStatus.PENDING, ChargeStatus.OVERDUE)

    def _ensure_open(self) -> None:
        if self.status == ChargeStatus.PAID:
            raise AlreadyPaidError(f"Charge {self.id} is already paid")
        if self.status == ChargeStatus.CANCELED:
            raise AlreadyCanceledError(f"Charge {self.id} was canceled")

    def pay(self, on: date, method: PaymentMethod) -> "Charge":
        self._ensure_open()
        return replace(self, status=ChargeStatus.PAID, payment_date=on, payment_method=method)

    def cancel(self, reason: str, on: date) -> "Charge":
        self._ensure_open()
        metadata = dict(self.metadata, cancellation_reason=reason, canceled_on=on.isoformat())
        return replace(self, status=ChargeStatus.CANCELED, metadata=metadata)


@dataclass
class LedgerEntry:
    """One line in the cash-flow ledger"""

    direction: EntryDirection
    amount: Money
    description: str
    effective_date: date
    status: EntryStatus = EntryStatus.FORECAST
    charge_id: Optional[uuid.UUID] = None
    recurrence_id: Optional[uuid.UUID] = None
    payable_id: Optional[uuid.UUID] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.amount.is_negative():
            raise InvalidAmountError("Ledger entry amount cannot be negative")

    def confirm(self, on: date, description: Optional[str] = None) -> "LedgerEntry":
        if self.status != EntryStatus.FORECAST:
            raise IllegalTransitionError(f"Entry {self.id} is {self.status.value}, only forecast entries confirm")
        return replace(
            self,
            status=EntryStatus.CONFIRMED,
            effective_date=on,
            description=description or self.description,
        )

    def cancel(self) -> "LedgerEntry":
        if self.status != EntryStatus.FORECAST:
            raise IllegalTransitionError(f"Entry {self.id} is {self.status.value}, only forecast entries cancel")
        return replace(self, status=EntryStatus.CANCELED)


@dataclass
class Payable:
    """Obligation the office owes, possibly one occurrence of a recurring series"""

    description: str
    amount: Money
    category: str
    due_date: date
    cadence: Cadence = Cadence.ONE_OFF
    status: PayableStatus = PayableStatus.PENDING
    payment_date: Optional[date] = None
    active: bool = True
    series_id: Optional[uuid.UUID] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.amount.is_negative():
            raise InvalidAmountError("Payable amount cannot be negative")

    def ensure_mutable(self) -> None:
        if self.status == PayableStatus.PAID:
            raise AlreadyPaidError(f"Payable {self.id} is already paid and cannot be changed")

    def pay(self, on: date) -> "Payable":
        self.ensure_mutable()
        return replace(self, status=PayableStatus.PAID, payment_date=on)

    def is_overdue_on(self, today: date) -> bool:
        return self.active and self.status == PayableStatus.PENDING and self.due_date < today


@dataclass
class InstallmentSpec:
    """Caller-supplied installment of a sale"""

    amount: Money
    due_date: date


@dataclass
class SaleSpec:
    """Sold service to be turned into charges (transient, consumed once)"""

    amount: Money
    mode: PaymentMode
    client_id: Optional[str] = None
    occasional_client_id: Optional[str] = None
    client_name: Optional[str] = None
    down_payment: Money = field(default_factory=Money.zero)
    installment_count: Optional[int] = None
    installments: Optional[List[InstallmentSpec]] = None
    payment_method: Optional[PaymentMethod] = None  # Method of the amount settled at sale time
    category: Optional[str] = None

    @property
    def label(self) -> str:
        return self.client_name or self.client_id or self.occasional_client_id or "client"


@dataclass
class PayableSpec:
    """Template for a payable and, when recurring, its occurrences"""

    description: str
    amount: Money
    category: str
    first_due_date: date
    cadence: Optional[Cadence] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class InvoiceSpec:
    """Direct invoice of line items to a client"""

    due_date: date
    items: List[ChargeItem]
    client_id: Optional[str] = None
    occasional_client_id: Optional[str] = None
    discount: Money = field(default_factory=Money.zero)
    notes: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def subtotal(self) -> Money:
        return sum_money(item.total for item in self.items)


@dataclass
class PlanItem:
    """One (Charge, LedgerEntry) pair emitted by the plan generator"""

    charge: Charge
    entry: LedgerEntry
