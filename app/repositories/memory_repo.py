"""
In-memory stores with the same contracts as the MongoDB repositories.

Used by the test-suite and by ``STORAGE_BACKEND=memory``. No method awaits
while touching shared state, so each call is atomic on the event loop.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from app.core.exceptions import PersistenceError
from app.models.account import OwnerAccount, OwnerDisplayInfo
from app.models.commission_report import CommissionReport, ReportStatus
from app.models.payment import CommissionStatus, Payment, STATUS_FIELDS
from app.repositories.account_repo import display_info_for


def _by_creation(payments: Iterable[Payment]) -> List[Payment]:
    return sorted(payments, key=lambda p: (p.created_at, p.id))


class InMemoryPaymentStore:
    def __init__(self, payments: Iterable[Payment] = ()):
        self._payments: Dict[str, Payment] = {p.id: p for p in payments}

    async def append(self, payment: Payment) -> None:
        existing = self._payments.get(payment.id)
        if existing is not None:
            if existing == payment:
                return
            raise PersistenceError(f"Payment id '{payment.id}' is already in use")
        self._payments[payment.id] = payment

    async def get(self, payment_id: str) -> Optional[Payment]:
        return self._payments.get(payment_id)

    async def query_by_created_range(self, start: datetime, end: datetime) -> List[Payment]:
        return _by_creation(p for p in self._payments.values() if start <= p.created_at < end)

    async def query_by_owner(self, owner_account_id: str) -> List[Payment]:
        return _by_creation(p for p in self._payments.values() if p.owner_account_id == owner_account_id)

    async def query_by_commission_status(self, statuses: Iterable[CommissionStatus]) -> List[Payment]:
        wanted = set(statuses)
        return _by_creation(p for p in self._payments.values() if p.commission_status in wanted)

    async def update_status(
        self,
        payment_id: str,
        field: str,
        new_value: Any,
        expected: Any = None,
        extra: Optional[dict] = None
    ) -> Optional[Payment]:
        if field not in STATUS_FIELDS:
            raise ValueError(f"'{field}' is not an updatable payment field")

        payment = self._payments.get(payment_id)
        if payment is None:
            return None
        if expected is not None and getattr(payment, field) != expected:
            return None

        updates = dict(extra or {})
        updates[field] = new_value
        updates["updated_at"] = datetime.now(timezone.utc)
        updated = payment.model_copy(update=updates)
        self._payments[payment_id] = updated
        return updated


class InMemoryReportStore:
    def __init__(self, reports: Iterable[CommissionReport] = ()):
        self._reports: Dict[str, CommissionReport] = {r.id: r for r in reports}

    async def append(self, report: CommissionReport) -> None:
        existing = self._reports.get(report.id)
        if existing is not None:
            if existing == report:
                return
            raise PersistenceError(f"Report id '{report.id}' is already in use")
        self._reports[report.id] = report

    async def get_by_id(self, report_id: str) -> Optional[CommissionReport]:
        return self._reports.get(report_id)

    async def list_all(self) -> List[CommissionReport]:
        return sorted(self._reports.values(), key=lambda r: (r.generated_at, r.id), reverse=True)

    async def update_status(
        self,
        report_id: str,
        new_status: ReportStatus,
        expected: ReportStatus,
        processed_at: Optional[datetime] = None
    ) -> Optional[CommissionReport]:
        report = self._reports.get(report_id)
        if report is None or report.report_status != expected:
            return None

        updates = {"report_status": new_status, "updated_at": datetime.now(timezone.utc)}
        if processed_at is not None:
            updates["processed_at"] = processed_at
        updated = report.model_copy(update=updates)
        self._reports[report_id] = updated
        return updated


class InMemoryAccountDirectory:
    def __init__(self, accounts: Iterable[OwnerAccount] = ()):
        self._accounts: Dict[str, OwnerAccount] = {a.id: a for a in accounts}

    def add(self, account: OwnerAccount) -> None:
        self._accounts[account.id] = account

    async def get_display_info(self, owner_account_id: str) -> OwnerDisplayInfo:
        return display_info_for(owner_account_id, self._accounts.get(owner_account_id))


class MemoryBackend:
    """One process-wide set of in-memory stores."""

    def __init__(self):
        self.payments = InMemoryPaymentStore()
        self.reports = InMemoryReportStore()
        self.accounts = InMemoryAccountDirectory()


memory_backend = MemoryBackend()
