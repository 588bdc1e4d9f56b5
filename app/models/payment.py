"""
Payment model - one completed transaction between a driver and a slot owner.

Design principles:
- Append-only: one record per processed payment
- Financial fields are immutable once created
- Only payment_status / commission_status move, along the transition tables
- All amounts in integer cents
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import field_serializer, model_validator

from app.models.base import MongoModel
from app.utils.commission_math import is_consistent_split


class PaymentMethod(str, Enum):
    GCASH = "GCash"
    CREDIT_CARD = "Credit Card"
    PREPAID = "Prepaid"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"
    REFUNDED = "Refunded"


class CommissionStatus(str, Enum):
    PENDING = "Pending"
    COLLECTED = "Collected"
    PAID = "Paid"


PAYMENT_STATUS_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
}

COMMISSION_STATUS_TRANSITIONS = {
    CommissionStatus.PENDING: {CommissionStatus.COLLECTED},
    CommissionStatus.COLLECTED: {CommissionStatus.PAID},
}

# Fields a store may change after creation
STATUS_FIELDS = ("payment_status", "commission_status")


class Payment(MongoModel):
    """
    Invariants:
    - gross_amount_cents > 0
    - commission_amount_cents == round(gross_amount_cents * commission_rate)
    - net_amount_cents == gross_amount_cents - commission_amount_cents
    """

    # References
    invoice_id: str
    driver_id: str
    parking_slot_id: str
    owner_account_id: str  # Municipal or Establishment

    # Financial
    gross_amount_cents: int       # Charged to the driver
    commission_rate: Decimal      # 0.10 == 10%
    commission_amount_cents: int
    net_amount_cents: int         # Retained by the owner

    # Method & status
    payment_method: PaymentMethod
    payment_status: PaymentStatus = PaymentStatus.COMPLETED
    transaction_id: str  # External processor reference

    # Commission tracking
    commission_status: CommissionStatus = CommissionStatus.PENDING
    commission_collected_at: Optional[datetime] = None

    @property
    def counts_toward_revenue(self) -> bool:
        """Only completed payments earn revenue and commission; refunds drop out."""
        return self.payment_status == PaymentStatus.COMPLETED

    @field_serializer("commission_rate")
    def _serialize_rate(self, rate: Decimal) -> str:
        # BSON has no native Decimal
        return str(rate)

    @model_validator(mode="after")
    def _check_amounts(self) -> "Payment":
        if self.gross_amount_cents <= 0:
            raise ValueError("gross_amount_cents must be positive")
        if not is_consistent_split(
            self.gross_amount_cents,
            self.commission_amount_cents,
            self.net_amount_cents,
            self.commission_rate
        ):
            raise ValueError("commission and net amounts do not match the commission rate")
        return self
