"""
Commission reporting and collection.

Reports are built from a single range query: the payments returned for the
window are the snapshot the whole report is computed from. A report is only
returned once it has been saved.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from app.core.config import settings
from app.core.exceptions import (
    CommissionError,
    InvalidTransitionError,
    NotFoundError,
    ReportValidationError,
    PersistenceError,
)
from app.models.base import generate_id
from app.models.commission_report import (
    CommissionReport,
    OwnerBreakdown,
    ReportStatus,
    REPORT_STATUS_TRANSITIONS,
)
from app.models.payment import CommissionStatus, Payment, PaymentStatus
from app.repositories.base import AccountLookup, PaymentStore, ReportStore
from app.schemas.commission import CollectionResult, CommissionSummary
from app.utils.report_export import render_report_csv
from app.utils.report_window import previous_report_window, resolve_report_window

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommissionService:
    def __init__(
        self,
        payments: PaymentStore,
        reports: ReportStore,
        accounts: AccountLookup,
        clock: Callable[[], datetime] = _utcnow,
        currency: Optional[str] = None
    ):
        self.payments = payments
        self.reports = reports
        self.accounts = accounts
        self.clock = clock
        self.currency = currency or settings.CURRENCY

    async def generate_commission_report(
        self,
        period: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> CommissionReport:
        """
        Aggregate the payments in [start_date, end_date) into a saved report.

        Raises InvalidPeriodError, OwnerLookupError when an owner in the
        window cannot be resolved, and PersistenceError when the report
        cannot be saved.
        """
        now = self.clock()
        window = resolve_report_window(period, start_date, end_date, now=now)

        fetched = await self.payments.query_by_created_range(window.start_date, window.end_date)
        snapshot = tuple(
            p for p in fetched
            if window.contains(p.created_at) and p.counts_toward_revenue
        )

        owner_breakdown = await self._build_owner_breakdown(snapshot)

        report = CommissionReport(
            id=generate_id("REPORT"),
            report_period=window.period,
            start_date=window.start_date,
            end_date=window.end_date,
            total_gross_revenue_cents=sum(p.gross_amount_cents for p in snapshot),
            total_commission_amount_cents=sum(p.commission_amount_cents for p in snapshot),
            total_net_revenue_cents=sum(p.net_amount_cents for p in snapshot),
            transaction_count=len(snapshot),
            owner_breakdown=owner_breakdown,
            report_status=ReportStatus.GENERATED,
            generated_at=now,
            created_at=now,
            updated_at=now
        )

        try:
            await self.reports.append(report)
        except PersistenceError:
            logger.warning("Commission report for %s..%s was not saved", window.start_date, window.end_date)
            raise

        logger.info(
            "Commission report %s generated: %s %s..%s, %d payments, commission=%d",
            report.id, window.period.value, window.start_date.isoformat(),
            window.end_date.isoformat(), report.transaction_count,
            report.total_commission_amount_cents
        )
        return report

    async def _build_owner_breakdown(self, payments: Sequence[Payment]) -> List[OwnerBreakdown]:
        """Group by owner, in order of each owner's first payment."""
        totals: Dict[str, Dict[str, int]] = {}
        for payment in payments:
            owner = totals.setdefault(payment.owner_account_id, {
                "gross_revenue_cents": 0,
                "commission_amount_cents": 0,
                "net_revenue_cents": 0,
                "transaction_count": 0,
            })
            owner["gross_revenue_cents"] += payment.gross_amount_cents
            owner["commission_amount_cents"] += payment.commission_amount_cents
            owner["net_revenue_cents"] += payment.net_amount_cents
            owner["transaction_count"] += 1

        breakdown = []
        for owner_account_id, sums in totals.items():
            info = await self.accounts.get_display_info(owner_account_id)
            breakdown.append(OwnerBreakdown(
                owner_account_id=owner_account_id,
                owner_name=info.name,
                owner_type=info.owner_type,
                **sums
            ))
        return breakdown

    async def get_commission_reports(self) -> List[CommissionReport]:
        return await self.reports.list_all()

    async def get_commission_report(self, report_id: str) -> CommissionReport:
        report = await self.reports.get_by_id(report_id)
        if report is None:
            raise NotFoundError(f"Commission report '{report_id}' not found")
        return report

    async def update_report_status(self, report_id: str, new_status: str) -> CommissionReport:
        """Move a report forward: Generated -> Reviewed -> Processed."""
        try:
            target = ReportStatus(new_status)
        except ValueError:
            raise ReportValidationError(f"Unknown report status '{new_status}'", field="report_status")

        report = await self.get_commission_report(report_id)
        current = report.report_status
        if target not in REPORT_STATUS_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(
                f"Report '{report_id}' cannot move from {current.value} to {target.value}"
            )

        processed_at = self.clock() if target == ReportStatus.PROCESSED else None
        updated = await self.reports.update_status(report_id, target, expected=current, processed_at=processed_at)
        if updated is None:
            raise InvalidTransitionError(f"Report '{report_id}' changed while being updated")

        logger.info("Commission report %s moved to %s", report_id, target.value)
        return updated

    async def get_commission_summary(self, period: str = "monthly") -> CommissionSummary:
        """
        Collected vs pending commissions, and this period against the last.

        Collected commission is money already taken and always counts. Pending
        and per-period figures only count payments that are still completed.
        """
        current = resolve_report_window(period, now=self.clock())
        previous = previous_report_window(current)

        collected = await self.payments.query_by_commission_status(
            [CommissionStatus.COLLECTED, CommissionStatus.PAID]
        )
        pending = [
            p for p in await self.payments.query_by_commission_status([CommissionStatus.PENDING])
            if p.counts_toward_revenue
        ]
        this_period = [
            p for p in await self.payments.query_by_created_range(current.start_date, current.end_date)
            if p.counts_toward_revenue
        ]
        last_period = [
            p for p in await self.payments.query_by_created_range(previous.start_date, previous.end_date)
            if p.counts_toward_revenue
        ]

        this_total = sum(p.commission_amount_cents for p in this_period)
        last_total = sum(p.commission_amount_cents for p in last_period)
        if last_total == 0:
            growth = 0.0
        else:
            growth = round((this_total - last_total) / last_total * 100, 1)

        return CommissionSummary(
            period=current.period,
            total_commissions_collected_cents=sum(p.commission_amount_cents for p in collected),
            pending_commissions_cents=sum(p.commission_amount_cents for p in pending),
            this_period_commissions_cents=this_total,
            last_period_commissions_cents=last_total,
            commission_growth=growth
        )

    async def collect_commissions(self, payment_ids: Sequence[str]) -> List[CollectionResult]:
        """
        Mark each payment's commission as collected.

        Each id succeeds or fails on its own; the result list is in the same
        order as ``payment_ids``.
        """
        results = []
        for payment_id in payment_ids:
            try:
                payment = await self._collect_one(payment_id)
            except CommissionError as exc:
                logger.warning("Commission for payment %s not collected: %s", payment_id, exc.message)
                results.append(CollectionResult(
                    payment_id=payment_id,
                    success=False,
                    error=exc.code,
                    message=exc.message
                ))
            else:
                results.append(CollectionResult(
                    payment_id=payment_id,
                    success=True,
                    commission_status=payment.commission_status
                ))

        collected = sum(1 for r in results if r.success)
        logger.info("Collected commissions for %d of %d payments", collected, len(results))
        return results

    async def _collect_one(self, payment_id: str) -> Payment:
        payment = await self.payments.get(payment_id)
        if payment is None:
            raise NotFoundError(f"Payment '{payment_id}' not found")
        if payment.payment_status != PaymentStatus.COMPLETED:
            raise InvalidTransitionError(
                f"Payment '{payment_id}' is {payment.payment_status.value}; "
                "commission is only collected on Completed payments"
            )
        if payment.commission_status != CommissionStatus.PENDING:
            raise InvalidTransitionError(
                f"Commission for payment '{payment_id}' is {payment.commission_status.value}; "
                "only Pending commissions can be collected"
            )

        updated = await self.payments.update_status(
            payment_id,
            "commission_status",
            CommissionStatus.COLLECTED,
            expected=CommissionStatus.PENDING,
            extra={"commission_collected_at": self.clock()}
        )
        if updated is None:
            raise InvalidTransitionError(f"Commission for payment '{payment_id}' changed while being collected")
        return updated

    async def export_commission_report(self, report_id: str) -> str:
        """Stored report as CSV text."""
        report = await self.get_commission_report(report_id)
        return render_report_csv(report, currency=self.currency)
