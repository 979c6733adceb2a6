"""Overdue sweep for payables"""

import logging
from datetime import date

from office_ledger.domain.models import PayableStatus
from office_ledger.domain.ports import PayableStore, Transaction
from office_ledger.infrastructure.observability.metrics import overdue_swept_counter

logger = logging.getLogger(__name__)


def sweep_overdue(payables: PayableStore, transaction: Transaction, today: date) -> int:
    """
    Move active pending payables due strictly before ``today`` to overdue.

    Idempotent: overdue and paid payables are never candidates, so a second
    run changes nothing. Returns the number of payables transitioned.
    """

    def work() -> int:
        swept = 0
        for payable in payables.find_overdue_candidates(today):
            if not payable.is_overdue_on(today):
                continue
            payables.update(payable.id, status=PayableStatus.OVERDUE)
            swept += 1
        return swept

    swept = transaction.run_atomic(work)
    if swept:
        overdue_swept_counter.inc(swept)
        logger.info("Payables marked overdue", extra={"count": swept, "as_of": today.isoformat()})
    return swept
