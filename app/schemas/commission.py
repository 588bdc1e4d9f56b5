from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, ConfigDict

from app.models.commission_report import OwnerBreakdown, ReportPeriod, ReportStatus
from app.models.payment import CommissionStatus


class ReportGenerateRequest(BaseModel):
    """Both dates must be given to override the period window."""
    period: str = "monthly"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class ReportStatusUpdate(BaseModel):
    report_status: str


class CommissionReportResponse(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="id")
    report_period: ReportPeriod
    start_date: datetime
    end_date: datetime
    total_gross_revenue_cents: int
    total_commission_amount_cents: int
    total_net_revenue_cents: int
    transaction_count: int
    owner_breakdown: List[OwnerBreakdown]
    report_status: ReportStatus
    generated_at: datetime
    processed_at: Optional[datetime] = None

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )


class CommissionSummary(BaseModel):
    period: ReportPeriod
    total_commissions_collected_cents: int
    pending_commissions_cents: int
    this_period_commissions_cents: int
    last_period_commissions_cents: int
    commission_growth: float  # percent, one decimal


class CommissionCollectRequest(BaseModel):
    payment_ids: List[str] = Field(..., min_length=1)


class CollectionResult(BaseModel):
    """Outcome for one payment id in a collection batch."""
    payment_id: str
    success: bool
    commission_status: Optional[CommissionStatus] = None
    error: Optional[str] = None    # error code, e.g. "NotFound"
    message: Optional[str] = None
