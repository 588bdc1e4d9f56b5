"""
Commission report model - point-in-time aggregation of payments over a window.

A report covers the half-open interval [start_date, end_date). Aggregates are
fixed at creation; only report_status / processed_at move afterwards.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, model_validator

from app.models.account import OwnerType
from app.models.base import MongoModel


class ReportPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ReportStatus(str, Enum):
    GENERATED = "Generated"
    REVIEWED = "Reviewed"
    PROCESSED = "Processed"


# Forward-only
REPORT_STATUS_TRANSITIONS = {
    ReportStatus.GENERATED: {ReportStatus.REVIEWED, ReportStatus.PROCESSED},
    ReportStatus.REVIEWED: {ReportStatus.PROCESSED},
}


class OwnerBreakdown(BaseModel):
    owner_account_id: str
    owner_name: str
    owner_type: OwnerType
    gross_revenue_cents: int = 0
    commission_amount_cents: int = 0
    net_revenue_cents: int = 0
    transaction_count: int = 0


class CommissionReport(MongoModel):
    report_period: ReportPeriod
    start_date: datetime  # inclusive
    end_date: datetime    # exclusive

    # Financial summary
    total_gross_revenue_cents: int = 0
    total_commission_amount_cents: int = 0
    total_net_revenue_cents: int = 0
    transaction_count: int = 0

    owner_breakdown: List[OwnerBreakdown] = []

    report_status: ReportStatus = ReportStatus.GENERATED
    generated_at: datetime
    processed_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_breakdown_totals(self) -> "CommissionReport":
        if self.start_date >= self.end_date:
            raise ValueError("start_date must be before end_date")

        sums = (
            sum(o.gross_revenue_cents for o in self.owner_breakdown),
            sum(o.commission_amount_cents for o in self.owner_breakdown),
            sum(o.net_revenue_cents for o in self.owner_breakdown),
            sum(o.transaction_count for o in self.owner_breakdown),
        )
        totals = (
            self.total_gross_revenue_cents,
            self.total_commission_amount_cents,
            self.total_net_revenue_cents,
            self.transaction_count,
        )
        if sums != totals:
            raise ValueError(f"owner breakdown {sums} does not add up to report totals {totals}")
        return self
