"""
PaymentRepository - append-only payment ledger in MongoDB.

Only the status fields are ever updated in place; updates are
compare-and-set on the current value so concurrent callers cannot both
move the same payment.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.exceptions import PersistenceError
from app.models.payment import CommissionStatus, Payment, STATUS_FIELDS
from app.repositories.base import enum_value, same_document

logger = logging.getLogger(__name__)


class PaymentRepository:
    """Repository for payment records."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["payments"]

    async def append(self, payment: Payment) -> None:
        """
        Insert a payment.

        Re-inserting the same payment id (a retried write) is accepted when
        the stored record is the same payment; anything else is a
        PersistenceError.
        """
        try:
            try:
                await self.collection.insert_one(payment.to_document())
                return
            except DuplicateKeyError:
                existing = await self.collection.find_one({"_id": payment.id})
        except PyMongoError as exc:
            logger.error("Failed to save payment %s: %s", payment.id, exc)
            raise PersistenceError("Failed to save payment") from exc

        if existing and same_document(existing, payment.to_document()):
            logger.info("Payment %s already stored, treating write as a retry", payment.id)
            return
        raise PersistenceError(f"Payment id '{payment.id}' is already in use")

    async def get(self, payment_id: str) -> Optional[Payment]:
        """Get a payment by id."""
        doc = await self._call(self.collection.find_one({"_id": payment_id}))
        if doc:
            return Payment(**doc)
        return None

    async def query_by_created_range(self, start: datetime, end: datetime) -> List[Payment]:
        """Payments created in [start, end), oldest first."""
        cursor = self.collection.find({
            "created_at": {"$gte": start, "$lt": end}
        }).sort([("created_at", 1), ("_id", 1)])
        docs = await self._call(cursor.to_list(None))
        return [Payment(**doc) for doc in docs]

    async def query_by_owner(self, owner_account_id: str) -> List[Payment]:
        """All payments received by an owner, oldest first."""
        cursor = self.collection.find({
            "owner_account_id": owner_account_id
        }).sort([("created_at", 1), ("_id", 1)])
        docs = await self._call(cursor.to_list(None))
        return [Payment(**doc) for doc in docs]

    async def query_by_commission_status(self, statuses: Iterable[CommissionStatus]) -> List[Payment]:
        cursor = self.collection.find({
            "commission_status": {"$in": [enum_value(s) for s in statuses]}
        }).sort([("created_at", 1), ("_id", 1)])
        docs = await self._call(cursor.to_list(None))
        return [Payment(**doc) for doc in docs]

    async def update_status(
        self,
        payment_id: str,
        field: str,
        new_value: Any,
        expected: Any = None,
        extra: Optional[dict] = None
    ) -> Optional[Payment]:
        """
        Set ``field`` to ``new_value`` in a single atomic update.

        With ``expected`` the update only applies while the field still holds
        that value. Returns the updated payment or None if nothing matched.
        """
        if field not in STATUS_FIELDS:
            raise ValueError(f"'{field}' is not an updatable payment field")

        query = {"_id": payment_id}
        if expected is not None:
            query[field] = enum_value(expected)

        updates = dict(extra or {})
        updates[field] = enum_value(new_value)
        updates["updated_at"] = datetime.now(timezone.utc)

        doc = await self._call(self.collection.find_one_and_update(
            query,
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        ))
        if doc:
            return Payment(**doc)
        return None

    async def _call(self, awaitable):
        try:
            return await awaitable
        except PyMongoError as exc:
            logger.error("Payment store operation failed: %s", exc)
            raise PersistenceError("Payment store is unavailable") from exc
