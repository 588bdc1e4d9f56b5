"""
Storage interfaces the services depend on.

Each has a MongoDB implementation (``*_repo.py``) and an in-memory one
(``memory_repo.py``).
"""
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Protocol

from app.models.account import OwnerDisplayInfo
from app.models.commission_report import CommissionReport, ReportStatus
from app.models.payment import CommissionStatus, Payment


class PaymentStore(Protocol):
    async def append(self, payment: Payment) -> None:
        """Persist a new payment. Raises PersistenceError."""
        ...

    async def get(self, payment_id: str) -> Optional[Payment]:
        ...

    async def query_by_created_range(self, start: datetime, end: datetime) -> List[Payment]:
        """Payments with start <= created_at < end, oldest first."""
        ...

    async def query_by_owner(self, owner_account_id: str) -> List[Payment]:
        ...

    async def query_by_commission_status(self, statuses: Iterable[CommissionStatus]) -> List[Payment]:
        ...

    async def update_status(
        self,
        payment_id: str,
        field: str,
        new_value: Any,
        expected: Any = None,
        extra: Optional[dict] = None
    ) -> Optional[Payment]:
        """
        Set a status field, optionally only if it currently equals ``expected``.

        Returns the updated payment, or None when nothing matched.
        """
        ...


class ReportStore(Protocol):
    async def append(self, report: CommissionReport) -> None:
        ...

    async def get_by_id(self, report_id: str) -> Optional[CommissionReport]:
        ...

    async def list_all(self) -> List[CommissionReport]:
        """Newest first."""
        ...

    async def update_status(
        self,
        report_id: str,
        new_status: ReportStatus,
        expected: ReportStatus,
        processed_at: Optional[datetime] = None
    ) -> Optional[CommissionReport]:
        ...


class AccountLookup(Protocol):
    async def get_display_info(self, owner_account_id: str) -> OwnerDisplayInfo:
        """Raises OwnerLookupError when the owner cannot be resolved."""
        ...


def enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _stored_form(value: Any) -> Any:
    """Value as MongoDB hands it back: plain enum values, millisecond UTC datetimes."""
    if isinstance(value, dict):
        return {k: _stored_form(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_stored_form(v) for v in value]
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).replace(microsecond=value.microsecond // 1000 * 1000)
    return enum_value(value)


def same_document(stored: dict, document: dict) -> bool:
    """True when ``stored`` is the document written for ``document``, field for field."""
    return _stored_form(stored) == _stored_form(document)
