"""Payable endpoints: creation with recurring expansion, listing, payment"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from office_ledger.api.dependencies import get_engine, parse_id
from office_ledger.api.v1.schemas import (
    PayableCreateRequest,
    PayableCreateResponse,
    PayableListResponse,
    PayableResponse,
    PayableUpdateRequest,
    PayPayableRequest,
    StatusTotalsSchema,
    SweepResponse,
)
from office_ledger.domain.engine import LedgerEngine
from office_ledger.domain.models import Cadence, PayableSpec, PayableStatus
from office_ledger.domain.money import Money
from office_ledger.domain.ports import PayableFilter

router = APIRouter()


@router.post("/payables", response_model=PayableCreateResponse, status_code=status.HTTP_201_CREATED)
def create_payable(request_body: PayableCreateRequest, engine: LedgerEngine = Depends(get_engine)):
    """Create a payable; recurring cadences also create the next 12 occurrences"""
    created = engine.create_payable(
        PayableSpec(
            description=request_body.description,
            amount=Money.from_minor(request_body.amount_cents),
            category=request_body.category,
            first_due_date=request_body.due_date,
            cadence=request_body.cadence,
            metadata=request_body.metadata,
        )
    )
    return PayableCreateResponse(
        payable=PayableResponse.from_domain(created[0]),
        occurrences=[PayableResponse.from_domain(p) for p in created[1:]],
    )


@router.get("/payables", response_model=PayableListResponse)
def list_payables(
    status_filter: Optional[PayableStatus] = Query(None, alias="status"),
    category: Optional[str] = None,
    cadence: Optional[Cadence] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    order_by: str = Query("due_date", pattern="^(due_date|amount|status|category|created_at)$"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    engine: LedgerEngine = Depends(get_engine),
):
    """List payables after marking overdue ones; summary covers the current month"""
    listing = engine.list_payables(
        PayableFilter(
            status=status_filter,
            category=category,
            cadence=cadence,
            start=start,
            end=end,
            page=page,
            limit=limit,
            order_by=order_by,
            descending=order == "desc",
        )
    )
    return PayableListResponse(
        payables=[PayableResponse.from_domain(p) for p in listing.payables],
        summary=StatusTotalsSchema.from_domain(listing.summary),
    )


@router.patch("/payables/{payable_id}", response_model=PayableResponse)
def update_payable(payable_id: str, request_body: PayableUpdateRequest, engine: LedgerEngine = Depends(get_engine)):
    """Update an unpaid payable; paid payables return 409"""
    changes = request_body.model_dump(exclude_unset=True, exclude_none=True)
    if "amount_cents" in changes:
        changes["amount"] = Money.from_minor(changes.pop("amount_cents"))
    payable = engine.update_payable(parse_id(payable_id, "payable"), changes)
    return PayableResponse.from_domain(payable)


@router.delete("/payables/{payable_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payable(payable_id: str, engine: LedgerEngine = Depends(get_engine)):
    engine.delete_payable(parse_id(payable_id, "payable"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/payables/{payable_id}/pay", response_model=PayableResponse)
def pay_payable(payable_id: str, request_body: PayPayableRequest, engine: LedgerEngine = Depends(get_engine)):
    """Mark a payable paid and record its outflow in the ledger"""
    payable = engine.pay_payable(parse_id(payable_id, "payable"), request_body.payment_date)
    return PayableResponse.from_domain(payable)


@router.post("/payables/sweep", response_model=SweepResponse)
def sweep_overdue(engine: LedgerEngine = Depends(get_engine)):
    return SweepResponse(swept=engine.sweep_overdue())
