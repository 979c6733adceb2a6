"""Ledger totals, balance and the monthly comparative report"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from office_ledger.api.dependencies import get_engine, parse_id
from office_ledger.api.v1.schemas import (
    BalanceResponse,
    LedgerEntryListResponse,
    LedgerEntryResponse,
    LedgerTotalResponse,
    MonthlyReportResponse,
)
from office_ledger.domain.engine import LedgerEngine
from office_ledger.domain.models import EntryDirection, EntryStatus
from office_ledger.domain.ports import LedgerFilter

router = APIRouter()


@router.get("/ledger/entries", response_model=LedgerEntryListResponse)
def list_entries(
    direction: Optional[EntryDirection] = None,
    status: Optional[EntryStatus] = None,
    charge_id: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    engine: LedgerEngine = Depends(get_engine),
):
    """Ledger entries by effective date, optionally those of one charge"""
    criteria = LedgerFilter(
        direction=direction,
        status=status,
        start=start,
        end=end,
        charge_id=parse_id(charge_id, "charge") if charge_id else None,
    )
    entries = engine.list_ledger_entries(criteria, page, limit)
    return LedgerEntryListResponse(
        entries=[LedgerEntryResponse.from_domain(e) for e in entries], page=page, limit=limit
    )


@router.get("/ledger/totals", response_model=LedgerTotalResponse)
def ledger_totals(
    direction: Optional[EntryDirection] = None,
    status: Optional[EntryStatus] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    engine: LedgerEngine = Depends(get_engine),
):
    """Sum of entry amounts matching the filters (all entries when none given)"""
    total = engine.ledger_total(direction=direction, status=status, start=start, end=end)
    return LedgerTotalResponse(total_cents=total.cents, formatted=total.format_brl())


@router.get("/ledger/balance", response_model=BalanceResponse)
def ledger_balance(
    start: Optional[date] = None,
    end: Optional[date] = None,
    engine: LedgerEngine = Depends(get_engine),
):
    balance = engine.balance(start, end)
    return BalanceResponse(balance_cents=balance.cents, formatted=balance.format_brl())


@router.get("/reports/monthly", response_model=MonthlyReportResponse)
def monthly_report(
    year: int = Query(..., ge=2000),
    month: int = Query(..., ge=1, le=12),
    engine: LedgerEngine = Depends(get_engine),
):
    """
    Expenses vs revenue for one month.

    Expenses are the month's payables by status and category; revenue is the
    month's confirmed and forecast inflows; net result is total revenue
    minus total expenses.
    """
    return MonthlyReportResponse.from_domain(engine.monthly_report(year, month))
