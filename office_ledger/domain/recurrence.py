"""Recurring payable expansion"""

import uuid
from typing import List

from office_ledger.domain.exceptions import InvalidAmountError
from office_ledger.domain.models import Cadence, Payable, PayableSpec, PayableStatus
from office_ledger.domain.schedule import next_cadence_date

# Occurrences materialized ahead of the template; later ones come from a re-expansion job
RECURRING_HORIZON = 12


def expand_recurring_payable(template: PayableSpec) -> List[Payable]:
    """
    Materialize a payable template into independent payables.

    - one-off (or no cadence): just the template
    - recurring: the template plus RECURRING_HORIZON occurrences, due
      ``next_cadence_date(first_due_date, cadence, k)`` for k = 1..12

    All payables of a recurring series share ``series_id`` (the template's id).
    """
    if template.amount.is_negative():
        raise InvalidAmountError("Payable amount cannot be negative")

    cadence = template.cadence or Cadence.ONE_OFF
    first_id = uuid.uuid4()
    series_id = first_id if cadence != Cadence.ONE_OFF else None

    first = Payable(
        id=first_id,
        description=template.description,
        amount=template.amount,
        category=template.category,
        due_date=template.first_due_date,
        cadence=cadence,
        series_id=series_id,
        metadata=dict(template.metadata),
    )
    if cadence == Cadence.ONE_OFF:
        return [first]

    occurrences = [
        Payable(
            description=template.description,
            amount=template.amount,
            category=template.category,
            due_date=next_cadence_date(template.first_due_date, cadence, k),
            cadence=cadence,
            status=PayableStatus.PENDING,
            series_id=series_id,
            metadata=dict(template.metadata, occurrence=k),
        )
        for k in range(1, RECURRING_HORIZON + 1)
    ]
    return [first] + occurrences
