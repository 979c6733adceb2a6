"""POST /v1/sales - turn a sold service into charges and ledger entries"""

from fastapi import APIRouter, Depends, status

from office_ledger.api.dependencies import get_engine
from office_ledger.api.v1.schemas import PlanItemResponse, SaleRequest, SaleResponse
from office_ledger.domain.engine import LedgerEngine
from office_ledger.domain.models import InstallmentSpec, SaleSpec
from office_ledger.domain.money import Money

router = APIRouter()


@router.post("/sales", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
def record_sale(request_body: SaleRequest, engine: LedgerEngine = Depends(get_engine)):
    """
    Record a sale and its payment plan.

    Flow:
    1. Convert the request into a SaleSpec (amounts validated as Money)
    2. Generate the plan for the payment mode
    3. Persist every charge and ledger entry in one transaction
    """
    installments = None
    if request_body.installments:
        installments = [
            InstallmentSpec(amount=Money.from_minor(inst.amount_cents), due_date=inst.due_date)
            for inst in request_body.installments
        ]

    sale = SaleSpec(
        amount=Money.from_minor(request_body.amount_cents),
        mode=request_body.mode,
        client_id=request_body.client_id,
        occasional_client_id=request_body.occasional_client_id,
        client_name=request_body.client_name,
        down_payment=Money.from_minor(request_body.down_payment_cents),
        installment_count=request_body.installment_count,
        installments=installments,
        payment_method=request_body.payment_method,
        category=request_body.category,
    )
    plan = engine.record_sale(sale)

    return SaleResponse(
        total_cents=sale.amount.cents,
        items=[PlanItemResponse.from_domain(item) for item in plan],
    )
