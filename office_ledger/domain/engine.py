"""Ledger engine facade: the operations exposed to request handlers"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from office_ledger.domain import aggregation
from office_ledger.domain.exceptions import InvalidAmountError, InvalidPlanError, NotFoundError
from office_ledger.domain.installments import generate_plan
from office_ledger.domain.models import (
    Charge,
    EntryDirection,
    EntryStatus,
    InvoiceSpec,
    LedgerEntry,
    Payable,
    PayableSpec,
    PaymentMethod,
    PlanItem,
    SaleSpec,
)
from office_ledger.domain.money import Money
from office_ledger.domain.overdue import sweep_overdue
from office_ledger.domain.ports import (
    ChargeFilter,
    ChargeStore,
    LedgerFilter,
    LedgerStore,
    PayableFilter,
    PayableStore,
    Transaction,
)
from office_ledger.domain.reconciliation import ReconciliationEngine
from office_ledger.domain.recurrence import expand_recurring_payable
from office_ledger.infrastructure.observability.metrics import payables_expanded_counter, plans_generated_counter
from office_ledger.utils.date_utils import month_bounds, utc_today

logger = logging.getLogger(__name__)

# Payable fields a caller may change before the payable is paid
UPDATABLE_PAYABLE_FIELDS = {"description", "amount", "category", "due_date", "cadence", "metadata"}


@dataclass
class PayableListing:
    payables: List[Payable]
    summary: aggregation.StatusTotals


class LedgerEngine:
    """
    Schedule generation and reconciliation over injected stores.

    Built per request from the caller's stores; holds no state of its own.
    """

    def __init__(
        self,
        charges: ChargeStore,
        ledger: LedgerStore,
        payables: PayableStore,
        transaction: Transaction,
    ):
        self.charges = charges
        self.ledger = ledger
        self.payables = payables
        self.transaction = transaction
        self.reconciliation = ReconciliationEngine(charges, ledger, payables, transaction)

    # Receivables

    def generate_plan(self, sale: SaleSpec, today: Optional[date] = None) -> List[PlanItem]:
        """Compute the plan for a sale without persisting it"""
        return generate_plan(sale, today)

    def record_sale(self, sale: SaleSpec, today: Optional[date] = None) -> List[PlanItem]:
        """Generate a sale's plan and persist every charge and entry in one transaction"""
        plan = generate_plan(sale, today)

        def work() -> List[PlanItem]:
            persisted = []
            for item in plan:
                charge = self.charges.create(item.charge)
                entry = self.ledger.create(item.entry)
                persisted.append(PlanItem(charge=charge, entry=entry))
            return persisted

        persisted = self.transaction.run_atomic(work)
        plans_generated_counter.labels(mode=sale.mode.value).inc()
        return persisted

    def issue_charge(self, invoice: InvoiceSpec) -> PlanItem:
        """Invoice line items as a pending charge with its forecast inflow"""
        if not invoice.items:
            raise InvalidPlanError("Invoice must have at least one item")
        subtotal = invoice.subtotal
        total = subtotal - invoice.discount
        if invoice.discount.is_negative() or not total.cents > 0:
            raise InvalidAmountError(
                f"Invoice total must be positive (subtotal {subtotal.cents}, discount {invoice.discount.cents})"
            )

        charge = Charge(
            subtotal=subtotal,
            discount=invoice.discount,
            total=total,
            due_date=invoice.due_date,
            client_id=invoice.client_id,
            occasional_client_id=invoice.occasional_client_id,
            notes=invoice.notes,
            metadata=dict(invoice.metadata),
            items=list(invoice.items),
        )
        entry = LedgerEntry(
            direction=EntryDirection.INFLOW,
            amount=total,
            description=f"Revenue forecast - {invoice.notes or f'invoice {charge.id}'}",
            effective_date=invoice.due_date,
            status=EntryStatus.FORECAST,
            charge_id=charge.id,
            metadata={"billing": "forecast"},
        )

        def work() -> PlanItem:
            return PlanItem(charge=self.charges.create(charge), entry=self.ledger.create(entry))

        return self.transaction.run_atomic(work)

    def get_charge(self, charge_id: uuid.UUID) -> Charge:
        charge = self.transaction.run_atomic(lambda: self.charges.find_by_id(charge_id))
        if charge is None:
            raise NotFoundError("Charge", charge_id)
        return charge

    def pay_charge(
        self,
        charge_id: uuid.UUID,
        payment_date: Optional[date] = None,
        method: PaymentMethod = PaymentMethod.CASH,
    ) -> Charge:
        return self.reconciliation.pay_charge(charge_id, payment_date or utc_today(), method)

    def cancel_charge(self, charge_id: uuid.UUID, reason: str, on: Optional[date] = None) -> Charge:
        return self.reconciliation.cancel_charge(charge_id, reason, on or utc_today())

    def list_charges(self, criteria: ChargeFilter) -> List[Charge]:
        """Charges matching the filters, earliest due first (e.g. one client's installments)"""
        return self.transaction.run_atomic(lambda: self.charges.find_many(criteria))

    # Payables

    def expand_recurring_payable(self, template: PayableSpec) -> List[Payable]:
        """Expand a template into its occurrences without persisting them"""
        return expand_recurring_payable(template)

    def create_payable(self, template: PayableSpec) -> List[Payable]:
        """Persist a payable and, when recurring, its 12 occurrences as one unit"""
        expanded = expand_recurring_payable(template)

        def work() -> List[Payable]:
            return [self.payables.create(payable) for payable in expanded]

        created = self.transaction.run_atomic(work)
        payables_expanded_counter.labels(cadence=created[0].cadence.value).inc(len(created) - 1)
        logger.info(
            "Payable created",
            extra={
                "payable_id": str(created[0].id),
                "cadence": created[0].cadence.value,
                "occurrences": len(created) - 1,
            },
        )
        return created

    def update_payable(self, payable_id: uuid.UUID, changes: Dict[str, Any]) -> Payable:
        unknown = set(changes) - UPDATABLE_PAYABLE_FIELDS
        if unknown:
            raise InvalidPlanError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        amount = changes.get("amount")
        if isinstance(amount, Money) and amount.is_negative():
            raise InvalidAmountError("Payable amount cannot be negative")

        def work() -> Payable:
            payable = self._active_payable(payable_id)
            payable.ensure_mutable()
            if not changes:
                return payable
            return self.payables.update(payable_id, **changes)

        return self.transaction.run_atomic(work)

    def delete_payable(self, payable_id: uuid.UUID) -> None:
        """Soft-delete: the payable stays stored with active=False"""

        def work() -> None:
            payable = self._active_payable(payable_id)
            payable.ensure_mutable()
            self.payables.update(payable_id, active=False)

        self.transaction.run_atomic(work)

    def _active_payable(self, payable_id: uuid.UUID) -> Payable:
        payable = self.payables.find_by_id(payable_id, for_update=True)
        if payable is None or not payable.active:
            raise NotFoundError("Payable", payable_id)
        return payable

    def pay_payable(self, payable_id: uuid.UUID, payment_date: Optional[date] = None) -> Payable:
        return self.reconciliation.pay_payable(payable_id, payment_date or utc_today())

    def sweep_overdue(self, today: Optional[date] = None) -> int:
        return sweep_overdue(self.payables, self.transaction, today or utc_today())

    def list_payables(self, criteria: PayableFilter, today: Optional[date] = None) -> PayableListing:
        """Sweep overdue payables, then list and summarize the current month"""
        today = today or utc_today()
        self.sweep_overdue(today)
        month_start, month_end = month_bounds(today.year, today.month)

        def work() -> PayableListing:
            payables = self.payables.find_many(criteria)
            this_month = self.payables.find_by_date_range(month_start, month_end)
            return PayableListing(payables=payables, summary=aggregation.totals_by_status(this_month))

        return self.transaction.run_atomic(work)

    # Ledger queries

    def ledger_total(
        self,
        direction: Optional[EntryDirection] = None,
        status: Optional[EntryStatus] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Money:
        return self.transaction.run_atomic(
            lambda: aggregation.sum_entries(self.ledger, direction, status, start, end)
        )

    def list_ledger_entries(self, criteria: LedgerFilter, page: int = 1, limit: int = 50) -> List[LedgerEntry]:
        return self.transaction.run_atomic(lambda: self.ledger.find_many(criteria, page, limit))

    def balance(self, start: Optional[date] = None, end: Optional[date] = None) -> Money:
        return self.transaction.run_atomic(lambda: aggregation.confirmed_balance(self.ledger, start, end))

    def payables_by_category(self, start: date, end: date) -> List[aggregation.CategoryShare]:
        return self.transaction.run_atomic(
            lambda: aggregation.totals_by_category(self.payables.find_by_date_range(start, end))
        )

    def monthly_report(self, year: int, month: int, today: Optional[date] = None) -> aggregation.MonthlyReport:
        self.sweep_overdue(today)
        start, end = month_bounds(year, month)

        def work() -> aggregation.MonthlyReport:
            payables = self.payables.find_by_date_range(start, end)
            confirmed = aggregation.sum_entries(
                self.ledger, EntryDirection.INFLOW, EntryStatus.CONFIRMED, start, end
            )
            forecast = aggregation.sum_entries(self.ledger, EntryDirection.INFLOW, EntryStatus.FORECAST, start, end)
            return aggregation.build_monthly_report(year, month, payables, confirmed, forecast)

        return self.transaction.run_atomic(work)
