"""Payment reconciliation: charge and payable payments against the ledger"""

import logging
import uuid
from datetime import date
from typing import Optional

from office_ledger.domain.exceptions import NotFoundError, ReconciliationAmbiguousError
from office_ledger.domain.models import (
    Charge,
    EntryDirection,
    EntryStatus,
    LedgerEntry,
    Payable,
    PaymentMethod,
)
from office_ledger.domain.ports import ChargeStore, LedgerStore, PayableStore, Transaction
from office_ledger.infrastructure.observability.logging import log_payable_payment, log_reconciliation
from office_ledger.infrastructure.observability.metrics import (
    reconciliation_ambiguous_counter,
    record_charge_reconciled,
    record_payable_paid,
)
from office_ledger.utils.date_utils import format_date_br

logger = logging.getLogger(__name__)

PATH_FORECAST = "forecast"
PATH_FALLBACK = "fallback"


class ReconciliationEngine:
    """
    Applies payment events to charges and payables and mirrors them in the ledger.

    Each operation is one ``run_atomic`` unit: the status change and the ledger
    write either both land or neither does.
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

    def pay_charge(self, charge_id: uuid.UUID, payment_date: date, method: PaymentMethod) -> Charge:
        """
        Mark a charge paid and confirm its receipt in the ledger.

        Flow:
        1. Load the charge (row-locked) and apply the pay transition; paid or
           canceled charges raise AlreadyPaid / AlreadyCanceled
        2. Persist the charge status (flushed, so the lookup below sees it)
        3. Confirm the earliest forecast inflow linked to the charge
        4. With no forecast inflow, write a confirmed inflow tagged "fallback"

        Raises:
            NotFoundError, AlreadyPaidError, AlreadyCanceledError, StorageFailure
        """

        def work():
            charge = self.charges.find_by_id(charge_id, for_update=True)
            if charge is None:
                raise NotFoundError("Charge", charge_id)

            paid = charge.pay(payment_date, method)
            self.charges.update(
                charge_id,
                status=paid.status,
                payment_date=paid.payment_date,
                payment_method=paid.payment_method,
            )

            entry, path = self._confirm_receipt(paid)
            return paid, entry, path

        paid, entry, path = self.transaction.run_atomic(work)
        log_reconciliation(str(charge_id), str(entry.id), path, paid.total.cents)
        record_charge_reconciled(path)
        return paid

    def _confirm_receipt(self, charge: Charge):
        forecast = self._find_forecast_inflow(charge.id)
        label = charge.notes or f"charge {charge.id}"
        description = f"Payment received on {format_date_br(charge.payment_date)} - {label}"

        if forecast is not None:
            confirmed = forecast.confirm(charge.payment_date, description)
            self.ledger.update(
                forecast.id,
                status=confirmed.status,
                effective_date=confirmed.effective_date,
                description=confirmed.description,
            )
            return confirmed, PATH_FORECAST

        logger.warning(
            "No forecast entry for paid charge, recording fallback inflow",
            extra={"charge_id": str(charge.id), "amount_cents": charge.total.cents},
        )
        entry = LedgerEntry(
            direction=EntryDirection.INFLOW,
            amount=charge.total,
            description=description,
            effective_date=charge.payment_date,
            status=EntryStatus.CONFIRMED,
            charge_id=charge.id,
            metadata=dict(charge.metadata, reconciliation="fallback"),
        )
        return self.ledger.create(entry), PATH_FALLBACK

    def _find_forecast_inflow(self, charge_id: uuid.UUID) -> Optional[LedgerEntry]:
        """Earliest-created forecast inflow for the charge, warning when several match"""
        candidates = self.ledger.find_by_charge(charge_id, EntryStatus.FORECAST, EntryDirection.INFLOW)
        if not candidates:
            return None
        if len(candidates) > 1:
            ambiguity = ReconciliationAmbiguousError(
                f"{len(candidates)} forecast entries for charge {charge_id}, confirming the earliest"
            )
            reconciliation_ambiguous_counter.inc()
            logger.warning(
                ambiguity.message,
                extra={
                    "code": ambiguity.code,
                    "charge_id": str(charge_id),
                    "entry_ids": [str(c.id) for c in candidates],
                },
            )
        return candidates[0]

    def cancel_charge(self, charge_id: uuid.UUID, reason: str, on: date) -> Charge:
        """Cancel an open charge and its forecast entries"""

        def work() -> Charge:
            charge = self.charges.find_by_id(charge_id, for_update=True)
            if charge is None:
                raise NotFoundError("Charge", charge_id)

            canceled = charge.cancel(reason, on)
            self.charges.update(charge_id, status=canceled.status, metadata=canceled.metadata)

            for entry in self.ledger.find_by_charge(charge_id, EntryStatus.FORECAST):
                self.ledger.update(entry.id, status=entry.cancel().status)

            return canceled

        canceled = self.transaction.run_atomic(work)
        logger.info("Charge canceled", extra={"charge_id": str(charge_id), "reason": reason})
        return canceled

    def pay_payable(self, payable_id: uuid.UUID, payment_date: date) -> Payable:
        """
        Mark a payable paid and record exactly one confirmed outflow.

        Raises:
            NotFoundError, AlreadyPaidError, StorageFailure
        """

        def work():
            payable = self.payables.find_by_id(payable_id, for_update=True)
            if payable is None or not payable.active:
                raise NotFoundError("Payable", payable_id)

            paid = payable.pay(payment_date)
            self.payables.update(payable_id, status=paid.status, payment_date=paid.payment_date)

            entry = self.ledger.create(
                LedgerEntry(
                    direction=EntryDirection.OUTFLOW,
                    amount=paid.amount,
                    description=f"Payment: {paid.description}",
                    effective_date=payment_date,
                    status=EntryStatus.CONFIRMED,
                    payable_id=paid.id,
                    recurrence_id=paid.series_id,
                    metadata={"category": paid.category, "payable_id": str(paid.id)},
                )
            )
            return paid, entry

        paid, entry = self.transaction.run_atomic(work)
        log_payable_payment(str(payable_id), str(entry.id), paid.amount.cents)
        record_payable_paid(paid.category)
        return paid
