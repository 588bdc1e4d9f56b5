from fastapi import APIRouter, Depends, status

from app.api.deps import get_payment_service
from app.api.errors import to_http_exception
from app.core.exceptions import CommissionError
from app.schemas.payment import (
    CommissionPreviewRequest,
    CommissionPreviewResponse,
    PaymentCreate,
    PaymentResponse,
    PaymentSummary,
)
from app.services.payment_service import PaymentService

router = APIRouter()

@router.post("/", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def process_payment(
    payment_in: PaymentCreate,
    service: PaymentService = Depends(get_payment_service)
):
    """Record a completed payment and its pending commission"""
    try:
        payment = await service.process_payment(payment_in)
    except CommissionError as exc:
        raise to_http_exception(exc)
    return PaymentResponse.model_validate(payment)

@router.post("/validate")
async def validate_payment(
    payment_in: PaymentCreate,
    service: PaymentService = Depends(get_payment_service)
):
    """Check payment input without recording it"""
    try:
        service.validate_payment_data(payment_in)
    except CommissionError as exc:
        raise to_http_exception(exc)
    return {"valid": True}

@router.post("/commission-preview", response_model=CommissionPreviewResponse)
async def preview_commission(
    request: CommissionPreviewRequest,
    service: PaymentService = Depends(get_payment_service)
):
    """Commission and net amount for a gross amount"""
    try:
        split = service.calculate_commission(request.gross_amount_cents)
    except CommissionError as exc:
        raise to_http_exception(exc)
    return CommissionPreviewResponse(**split.model_dump())

@router.get("/summary/{owner_account_id}", response_model=PaymentSummary)
async def get_payment_summary(
    owner_account_id: str,
    period: str = "monthly",
    service: PaymentService = Depends(get_payment_service)
):
    """Revenue totals for one owner in the current period"""
    try:
        return await service.get_payment_summary(owner_account_id, period)
    except CommissionError as exc:
        raise to_http_exception(exc)

@router.post("/{payment_id}/refund", response_model=PaymentResponse)
async def refund_payment(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service)
):
    """Mark a completed payment as refunded"""
    try:
        payment = await service.refund_payment(payment_id)
    except CommissionError as exc:
        raise to_http_exception(exc)
    return PaymentResponse.model_validate(payment)
