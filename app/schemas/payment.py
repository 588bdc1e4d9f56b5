from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, ConfigDict

from app.models.payment import CommissionStatus, PaymentMethod, PaymentStatus
from app.models.commission_report import ReportPeriod
from app.utils.commission_math import CommissionSplit


class PaymentCreate(BaseModel):
    """
    Request body to record a payment.

    Fields are deliberately loose so that PaymentService.validate_payment_data
    reports the offending field instead of a generic 422.
    """
    invoice_id: Any = ""
    driver_id: Any = ""
    parking_slot_id: Any = ""
    owner_account_id: Any = ""
    gross_amount_cents: Any = 0  # Integer cents
    payment_method: Any = ""
    transaction_id: Any = ""


class CommissionPreviewRequest(BaseModel):
    gross_amount_cents: Any  # checked by the calculator


class CommissionPreviewResponse(CommissionSplit):
    pass


class PaymentResponse(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="id")
    invoice_id: str
    driver_id: str
    parking_slot_id: str
    owner_account_id: str
    gross_amount_cents: int
    commission_rate: Decimal
    commission_amount_cents: int
    net_amount_cents: int
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    commission_status: CommissionStatus
    transaction_id: str
    commission_collected_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )


class PaymentSummary(BaseModel):
    """Per-owner totals for one period window."""
    owner_account_id: str
    period: ReportPeriod
    start_date: datetime
    end_date: datetime
    total_gross_revenue_cents: int
    total_net_revenue_cents: int
    total_commissions_cents: int
    transaction_count: int
