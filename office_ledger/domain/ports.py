"""Storage interfaces the engine depends on

Implemented over SQLAlchemy in ``infrastructure/database``; tests may pass
any object with the same methods.
"""

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, List, Optional, Protocol, TypeVar

from office_ledger.domain.models import (
    Cadence,
    Charge,
    ChargeStatus,
    EntryDirection,
    EntryStatus,
    LedgerEntry,
    Payable,
    PayableStatus,
)
from office_ledger.domain.money import Money

T = TypeVar("T")


@dataclass
class LedgerFilter:
    """Criteria for summing or listing ledger entries; None means no constraint"""

    direction: Optional[EntryDirection] = None
    status: Optional[EntryStatus] = None
    start: Optional[date] = None
    end: Optional[date] = None  # inclusive
    charge_id: Optional[uuid.UUID] = None


@dataclass
class ChargeFilter:
    """Criteria for listing charges, earliest due first"""

    client_id: Optional[str] = None
    occasional_client_id: Optional[str] = None
    status: Optional[ChargeStatus] = None
    start: Optional[date] = None
    end: Optional[date] = None  # inclusive
    page: int = 1
    limit: int = 20


@dataclass
class PayableFilter:
    """Criteria for listing payables"""

    status: Optional[PayableStatus] = None
    category: Optional[str] = None
    cadence: Optional[Cadence] = None
    start: Optional[date] = None
    end: Optional[date] = None  # inclusive
    page: int = 1
    limit: int = 20
    order_by: str = "due_date"
    descending: bool = False


class ChargeStore(Protocol):
    def create(self, charge: Charge) -> Charge: ...

    def find_by_id(self, charge_id: uuid.UUID, for_update: bool = False) -> Optional[Charge]: ...

    def update(self, charge_id: uuid.UUID, **fields: Any) -> Charge: ...

    def find_many(self, criteria: ChargeFilter) -> List[Charge]: ...


class LedgerStore(Protocol):
    def create(self, entry: LedgerEntry) -> LedgerEntry: ...

    def find_by_id(self, entry_id: uuid.UUID) -> Optional[LedgerEntry]: ...

    def find_one(
        self, charge_id: uuid.UUID, status: EntryStatus, direction: EntryDirection
    ) -> Optional[LedgerEntry]: ...

    def find_by_charge(
        self,
        charge_id: uuid.UUID,
        status: Optional[EntryStatus] = None,
        direction: Optional[EntryDirection] = None,
    ) -> List[LedgerEntry]: ...

    def update(self, entry_id: uuid.UUID, **fields: Any) -> LedgerEntry: ...

    def sum(self, criteria: LedgerFilter) -> Money: ...

    def find_many(self, criteria: LedgerFilter, page: int = 1, limit: int = 50) -> List[LedgerEntry]: ...


class PayableStore(Protocol):
    def create(self, payable: Payable) -> Payable: ...

    def find_by_id(self, payable_id: uuid.UUID, for_update: bool = False) -> Optional[Payable]: ...

    def update(self, payable_id: uuid.UUID, **fields: Any) -> Payable: ...

    def find_overdue_candidates(self, today: date) -> List[Payable]: ...

    def find_by_date_range(self, start: date, end: date) -> List[Payable]: ...

    def find_many(self, criteria: PayableFilter) -> List[Payable]: ...


class Transaction(Protocol):
    def run_atomic(self, fn: Callable[[], T]) -> T:
        """Run ``fn`` with all-or-nothing semantics; failures roll back"""
        ...
