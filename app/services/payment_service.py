"""
Payment processing - validate, split commission, append to the ledger.

Validation always runs before anything is written; a payment is persisted
exactly once per successful call.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

from app.core.config import settings
from app.core.exceptions import (
    InvalidAmountError,
    InvalidTransitionError,
    NotFoundError,
    PaymentValidationError,
    PersistenceError,
)
from app.models.base import generate_id
from app.models.payment import (
    CommissionStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
    PAYMENT_STATUS_TRANSITIONS,
)
from app.repositories.base import PaymentStore
from app.schemas.payment import PaymentCreate, PaymentSummary
from app.utils import commission_math
from app.utils.commission_math import CommissionSplit
from app.utils.report_window import resolve_report_window

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "invoice_id",
    "driver_id",
    "parking_slot_id",
    "owner_account_id",
    "transaction_id",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentService:
    def __init__(
        self,
        payments: PaymentStore,
        commission_rate: Optional[Decimal] = None,
        clock: Callable[[], datetime] = _utcnow
    ):
        self.payments = payments
        self.commission_rate = commission_rate if commission_rate is not None else settings.COMMISSION_RATE
        self.clock = clock

    @staticmethod
    def validate_payment_data(data: PaymentCreate) -> None:
        """
        Check payment input before processing.

        Raises PaymentValidationError naming the first bad field, or
        InvalidAmountError for a non-positive amount.
        """
        for field in REQUIRED_FIELDS:
            value = getattr(data, field, None)
            if not isinstance(value, str) or not value.strip():
                raise PaymentValidationError(f"{field} is required", field=field)

        amount = data.gross_amount_cents
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmountError(f"Payment amount must be whole cents, got {amount!r}")
        if amount <= 0:
            raise InvalidAmountError("Payment amount must be greater than zero")

        try:
            PaymentMethod(data.payment_method)
        except ValueError:
            allowed = ", ".join(m.value for m in PaymentMethod)
            raise PaymentValidationError(
                f"Invalid payment method '{data.payment_method}'; expected one of {allowed}",
                field="payment_method"
            )

    def calculate_commission(self, gross_amount_cents) -> CommissionSplit:
        """Preview the commission split without recording anything."""
        return commission_math.calculate_commission(gross_amount_cents, self.commission_rate)

    async def process_payment(self, data: PaymentCreate) -> Payment:
        """Record a completed payment with its commission pending collection."""
        self.validate_payment_data(data)
        split = self.calculate_commission(data.gross_amount_cents)
        now = self.clock()

        payment = Payment(
            id=generate_id("PAY"),
            invoice_id=data.invoice_id.strip(),
            driver_id=data.driver_id.strip(),
            parking_slot_id=data.parking_slot_id.strip(),
            owner_account_id=data.owner_account_id.strip(),
            gross_amount_cents=split.gross_amount_cents,
            commission_rate=split.commission_rate,
            commission_amount_cents=split.commission_amount_cents,
            net_amount_cents=split.net_amount_cents,
            payment_method=PaymentMethod(data.payment_method),
            payment_status=PaymentStatus.COMPLETED,
            transaction_id=data.transaction_id.strip(),
            commission_status=CommissionStatus.PENDING,
            created_at=now,
            updated_at=now
        )

        try:
            await self.payments.append(payment)
        except PersistenceError:
            logger.warning("Payment %s for invoice %s was not saved", payment.id, payment.invoice_id)
            raise

        logger.info(
            "Payment %s saved: owner=%s gross=%d commission=%d",
            payment.id, payment.owner_account_id,
            payment.gross_amount_cents, payment.commission_amount_cents
        )
        return payment

    async def refund_payment(self, payment_id: str) -> Payment:
        """
        Mark a completed payment as refunded.

        Amounts on the record are left untouched; the ledger keeps the
        original charge and the status records the refund.
        """
        payment = await self.payments.get(payment_id)
        if payment is None:
            raise NotFoundError(f"Payment '{payment_id}' not found")

        current = payment.payment_status
        if PaymentStatus.REFUNDED not in PAYMENT_STATUS_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(
                f"Payment '{payment_id}' is {current.value}; only Completed payments can be refunded"
            )

        updated = await self.payments.update_status(
            payment_id, "payment_status", PaymentStatus.REFUNDED, expected=current
        )
        if updated is None:
            raise InvalidTransitionError(f"Payment '{payment_id}' changed while being refunded")

        logger.info("Payment %s refunded", payment_id)
        return updated

    async def get_payment_summary(self, owner_account_id: str, period: str = "monthly") -> PaymentSummary:
        """Totals for one owner over the current period window; refunds are left out."""
        if not owner_account_id or not owner_account_id.strip():
            raise PaymentValidationError("owner_account_id is required", field="owner_account_id")

        window = resolve_report_window(period, now=self.clock())
        payments = [
            p for p in await self.payments.query_by_owner(owner_account_id)
            if window.contains(p.created_at) and p.counts_toward_revenue
        ]

        return PaymentSummary(
            owner_account_id=owner_account_id,
            period=window.period,
            start_date=window.start_date,
            end_date=window.end_date,
            total_gross_revenue_cents=sum(p.gross_amount_cents for p in payments),
            total_net_revenue_cents=sum(p.net_amount_cents for p in payments),
            total_commissions_cents=sum(p.commission_amount_cents for p in payments),
            transaction_count=len(payments)
        )
