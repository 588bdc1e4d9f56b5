import logging
from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.exceptions import PersistenceError
from app.models.commission_report import CommissionReport, ReportStatus
from app.repositories.base import same_document

logger = logging.getLogger(__name__)


class CommissionReportRepository:
    """Commission report database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["commission_reports"]

    async def append(self, report: CommissionReport) -> None:
        """Insert a generated report. A retried write of the same report is a no-op."""
        try:
            try:
                await self.collection.insert_one(report.to_document())
                return
            except DuplicateKeyError:
                existing = await self.collection.find_one({"_id": report.id})
        except PyMongoError as exc:
            logger.error("Failed to save commission report %s: %s", report.id, exc)
            raise PersistenceError("Failed to save commission report") from exc

        if existing and same_document(existing, report.to_document()):
            logger.info("Commission report %s already stored, treating write as a retry", report.id)
            return
        raise PersistenceError(f"Report id '{report.id}' is already in use")

    async def get_by_id(self, report_id: str) -> Optional[CommissionReport]:
        doc = await self._call(self.collection.find_one({"_id": report_id}))
        if doc:
            return CommissionReport(**doc)
        return None

    async def list_all(self) -> List[CommissionReport]:
        """All reports, newest first."""
        cursor = self.collection.find({}).sort("generated_at", -1)
        docs = await self._call(cursor.to_list(None))
        return [CommissionReport(**doc) for doc in docs]

    async def update_status(
        self,
        report_id: str,
        new_status: ReportStatus,
        expected: ReportStatus,
        processed_at: Optional[datetime] = None
    ) -> Optional[CommissionReport]:
        """Move a report's status if it is still ``expected``."""
        updates = {
            "report_status": new_status.value,
            "updated_at": datetime.now(timezone.utc)
        }
        if processed_at is not None:
            updates["processed_at"] = processed_at

        doc = await self._call(self.collection.find_one_and_update(
            {"_id": report_id, "report_status": expected.value},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        ))
        if doc:
            return CommissionReport(**doc)
        return None

    async def _call(self, awaitable):
        try:
            return await awaitable
        except PyMongoError as exc:
            logger.error("Report store operation failed: %s", exc)
            raise PersistenceError("Report store is unavailable") from exc
