"""Pydantic schemas for API request/response validation

Amounts travel as integer cents. Range checks on amounts are left to the
domain so they surface as INVALID_AMOUNT (400) like every other amount error.
"""

from datetime import date
from typing import Annotated, Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, Field

from office_ledger.domain.aggregation import MonthlyReport, StatusTotals
from office_ledger.domain.models import (
    Cadence,
    Charge,
    ChargeStatus,
    EntryDirection,
    EntryStatus,
    LedgerEntry,
    Payable,
    PayableStatus,
    PaymentMethod,
    PaymentMode,
    PlanItem,
)
from office_ledger.utils.date_utils import normalize_date_only


def _date_only(value: Any) -> Any:
    if value is None or isinstance(value, date):
        return value
    try:
        return normalize_date_only(value)
    except ValueError:
        return value  # Let pydantic report the invalid date


DateOnly = Annotated[date, BeforeValidator(_date_only)]


class ErrorResponse(BaseModel):
    """Body of every domain error response"""

    code: str
    message: str


# Sales and charges


class InstallmentInput(BaseModel):
    amount_cents: int
    due_date: DateOnly


class SaleRequest(BaseModel):
    """Request body for POST /v1/sales"""

    mode: PaymentMode
    amount_cents: int
    client_id: Optional[str] = None
    occasional_client_id: Optional[str] = None
    client_name: Optional[str] = None
    down_payment_cents: int = 0
    installment_count: Optional[int] = None
    installments: Optional[List[InstallmentInput]] = None
    payment_method: Optional[PaymentMethod] = None
    category: Optional[str] = None


class ChargeItemSchema(BaseModel):
    description: str = Field(..., min_length=1)
    quantity: int = 1
    unit_price_cents: int
    discount_cents: int = 0


class InvoiceRequest(BaseModel):
    """Request body for POST /v1/charges"""

    due_date: DateOnly
    items: List[ChargeItemSchema] = Field(..., min_length=1)
    client_id: Optional[str] = None
    occasional_client_id: Optional[str] = None
    discount_cents: int = 0
    notes: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ChargeResponse(BaseModel):
    id: UUID
    client_id: Optional[str] = None
    occasional_client_id: Optional[str] = None
    subtotal_cents: int
    discount_cents: int
    total_cents: int
    due_date: date
    status: ChargeStatus
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    items: List[ChargeItemSchema] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, charge: Charge) -> "ChargeResponse":
        return cls(
            id=charge.id,
            client_id=charge.client_id,
            occasional_client_id=charge.occasional_client_id,
            subtotal_cents=charge.subtotal.cents,
            discount_cents=charge.discount.cents,
            total_cents=charge.total.cents,
            due_date=charge.due_date,
            status=charge.status,
            payment_date=charge.payment_date,
            payment_method=charge.payment_method,
            notes=charge.notes,
            metadata=charge.metadata,
            items=[
                ChargeItemSchema(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price_cents=item.unit_price.cents,
                    discount_cents=item.discount.cents,
                )
                for item in charge.items
            ],
        )


class LedgerEntryResponse(BaseModel):
    id: UUID
    direction: EntryDirection
    amount_cents: int
    description: str
    status: EntryStatus
    effective_date: date
    charge_id: Optional[UUID] = None
    recurrence_id: Optional[UUID] = None
    payable_id: Optional[UUID] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, entry: LedgerEntry) -> "LedgerEntryResponse":
        return cls(
            id=entry.id,
            direction=entry.direction,
            amount_cents=entry.amount.cents,
            description=entry.description,
            status=entry.status,
            effective_date=entry.effective_date,
            charge_id=entry.charge_id,
            recurrence_id=entry.recurrence_id,
            payable_id=entry.payable_id,
            metadata=entry.metadata,
        )


class PlanItemResponse(BaseModel):
    charge: ChargeResponse
    entry: LedgerEntryResponse

    @classmethod
    def from_domain(cls, item: PlanItem) -> "PlanItemResponse":
        return cls(charge=ChargeResponse.from_domain(item.charge), entry=LedgerEntryResponse.from_domain(item.entry))


class ChargeListResponse(BaseModel):
    """Response for GET /v1/charges"""

    charges: List[ChargeResponse]
    page: int
    limit: int


class SaleResponse(BaseModel):
    """Response for POST /v1/sales"""

    total_cents: int
    items: List[PlanItemResponse]


class PayChargeRequest(BaseModel):
    payment_method: PaymentMethod
    payment_date: Optional[DateOnly] = None


class CancelChargeRequest(BaseModel):
    reason: str = Field(..., min_length=5, max_length=500)
    canceled_on: Optional[DateOnly] = None


# Payables


class PayableCreateRequest(BaseModel):
    """Request body for POST /v1/payables; no cadence means one-off"""

    description: str = Field(..., min_length=1)
    amount_cents: int
    category: str = Field(..., min_length=1)
    due_date: DateOnly
    cadence: Optional[Cadence] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PayableUpdateRequest(BaseModel):
    description: Optional[str] = Field(None, min_length=1)
    amount_cents: Optional[int] = None
    category: Optional[str] = Field(None, min_length=1)
    due_date: Optional[DateOnly] = None
    cadence: Optional[Cadence] = None
    metadata: Optional[Dict[str, Any]] = None


class PayPayableRequest(BaseModel):
    payment_date: Optional[DateOnly] = None


class PayableResponse(BaseModel):
    id: UUID
    description: str
    amount_cents: int
    category: str
    due_date: date
    cadence: Cadence
    status: PayableStatus
    payment_date: Optional[date] = None
    series_id: Optional[UUID] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, payable: Payable) -> "PayableResponse":
        return cls(
            id=payable.id,
            description=payable.description,
            amount_cents=payable.amount.cents,
            category=payable.category,
            due_date=payable.due_date,
            cadence=payable.cadence,
            status=payable.status,
            payment_date=payable.payment_date,
            series_id=payable.series_id,
            metadata=payable.metadata,
        )


class PayableCreateResponse(BaseModel):
    payable: PayableResponse
    occurrences: List[PayableResponse]


class StatusTotalsSchema(BaseModel):
    pending_cents: int
    paid_cents: int
    overdue_cents: int
    pending_count: int
    paid_count: int
    overdue_count: int

    @classmethod
    def from_domain(cls, totals: StatusTotals) -> "StatusTotalsSchema":
        return cls(
            pending_cents=totals.pending.cents,
            paid_cents=totals.paid.cents,
            overdue_cents=totals.overdue.cents,
            pending_count=totals.pending_count,
            paid_count=totals.paid_count,
            overdue_count=totals.overdue_count,
        )


class PayableListResponse(BaseModel):
    """Response for GET /v1/payables; summary covers the current month"""

    payables: List[PayableResponse]
    summary: StatusTotalsSchema


class SweepResponse(BaseModel):
    swept: int


# Ledger


class LedgerEntryListResponse(BaseModel):
    entries: List[LedgerEntryResponse]
    page: int
    limit: int


class LedgerTotalResponse(BaseModel):
    total_cents: int
    formatted: str


class BalanceResponse(BaseModel):
    balance_cents: int
    formatted: str


class CategoryShareSchema(BaseModel):
    category: str
    amount_cents: int
    percentage: float


class MonthlyReportResponse(BaseModel):
    """Response for GET /v1/reports/monthly"""

    year: int
    month: int
    expenses: StatusTotalsSchema
    expenses_total_cents: int
    categories: List[CategoryShareSchema]
    revenue_confirmed_cents: int
    revenue_forecast_cents: int
    revenue_total_cents: int
    net_result_cents: int
    expense_percentage: float
    revenue_percentage: float

    @classmethod
    def from_domain(cls, report: MonthlyReport) -> "MonthlyReportResponse":
        return cls(
            year=report.year,
            month=report.month,
            expenses=StatusTotalsSchema.from_domain(report.expenses),
            expenses_total_cents=report.expenses.total.cents,
            categories=[
                CategoryShareSchema(category=c.category, amount_cents=c.amount.cents, percentage=c.percentage)
                for c in report.categories
            ],
            revenue_confirmed_cents=report.revenue_confirmed.cents,
            revenue_forecast_cents=report.revenue_forecast.cents,
            revenue_total_cents=report.revenue_total.cents,
            net_result_cents=report.net_result.cents,
            expense_percentage=report.expense_percentage,
            revenue_percentage=report.revenue_percentage,
        )
