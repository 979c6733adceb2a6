"""Charge endpoints: direct invoicing, listing, payment and cancellation"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from office_ledger.api.dependencies import get_engine, parse_id
from office_ledger.api.v1.schemas import (
    CancelChargeRequest,
    ChargeListResponse,
    ChargeResponse,
    InvoiceRequest,
    PayChargeRequest,
    PlanItemResponse,
)
from office_ledger.domain.engine import LedgerEngine
from office_ledger.domain.models import ChargeItem, ChargeStatus, InvoiceSpec
from office_ledger.domain.money import Money
from office_ledger.domain.ports import ChargeFilter

router = APIRouter()


@router.post("/charges", response_model=PlanItemResponse, status_code=status.HTTP_201_CREATED)
def issue_charge(request_body: InvoiceRequest, engine: LedgerEngine = Depends(get_engine)):
    """Invoice line items as a pending charge with a forecast ledger entry"""
    invoice = InvoiceSpec(
        due_date=request_body.due_date,
        items=[
            ChargeItem(
                description=item.description,
                quantity=item.quantity,
                unit_price=Money.from_minor(item.unit_price_cents),
                discount=Money.from_minor(item.discount_cents),
            )
            for item in request_body.items
        ],
        client_id=request_body.client_id,
        occasional_client_id=request_body.occasional_client_id,
        discount=Money.from_minor(request_body.discount_cents),
        notes=request_body.notes,
        metadata=request_body.metadata,
    )
    return PlanItemResponse.from_domain(engine.issue_charge(invoice))


@router.get("/charges", response_model=ChargeListResponse)
def list_charges(
    client_id: Optional[str] = None,
    occasional_client_id: Optional[str] = None,
    status_filter: Optional[ChargeStatus] = Query(None, alias="status"),
    start: Optional[date] = None,
    end: Optional[date] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    engine: LedgerEngine = Depends(get_engine),
):
    """List charges by due date; filter by client to get its installments"""
    charges = engine.list_charges(
        ChargeFilter(
            client_id=client_id,
            occasional_client_id=occasional_client_id,
            status=status_filter,
            start=start,
            end=end,
            page=page,
            limit=limit,
        )
    )
    return ChargeListResponse(charges=[ChargeResponse.from_domain(c) for c in charges], page=page, limit=limit)


@router.get("/charges/{charge_id}", response_model=ChargeResponse)
def get_charge(charge_id: str, engine: LedgerEngine = Depends(get_engine)):
    return ChargeResponse.from_domain(engine.get_charge(parse_id(charge_id, "charge")))


@router.post("/charges/{charge_id}/pay", response_model=ChargeResponse)
def pay_charge(charge_id: str, request_body: PayChargeRequest, engine: LedgerEngine = Depends(get_engine)):
    """
    Mark a charge paid and confirm its ledger entry.

    Returns 404 for unknown charges and 409 when already paid or canceled.
    """
    charge = engine.pay_charge(
        parse_id(charge_id, "charge"),
        payment_date=request_body.payment_date,
        method=request_body.payment_method,
    )
    return ChargeResponse.from_domain(charge)


@router.post("/charges/{charge_id}/cancel", response_model=ChargeResponse)
def cancel_charge(charge_id: str, request_body: CancelChargeRequest, engine: LedgerEngine = Depends(get_engine)):
    charge = engine.cancel_charge(parse_id(charge_id, "charge"), request_body.reason, request_body.canceled_on)
    return ChargeResponse.from_domain(charge)
