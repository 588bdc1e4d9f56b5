import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from app.core.exceptions import OwnerLookupError, PersistenceError
from app.models.account import OwnerAccount, OwnerDisplayInfo

logger = logging.getLogger(__name__)


def display_info_for(owner_account_id: str, account: OwnerAccount | None) -> OwnerDisplayInfo:
    """Resolve display info, failing loudly rather than inventing a name."""
    if account is None:
        raise OwnerLookupError(owner_account_id)
    if account.owner_type is None:
        raise OwnerLookupError(
            owner_account_id,
            f"Account '{owner_account_id}' is a {account.account_type.value} account, not a slot owner"
        )
    if account.display_name is None:
        raise OwnerLookupError(owner_account_id, f"Owner account '{owner_account_id}' has no display name")
    return OwnerDisplayInfo(name=account.display_name, owner_type=account.owner_type)


class AccountRepository:
    """Read-only owner lookups against the accounts collection."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["accounts"]

    async def get_display_info(self, owner_account_id: str) -> OwnerDisplayInfo:
        try:
            doc = await self.collection.find_one({"_id": owner_account_id})
        except PyMongoError as exc:
            logger.error("Account lookup for %s failed: %s", owner_account_id, exc)
            raise PersistenceError("Account store is unavailable") from exc

        account = None
        if doc:
            try:
                account = OwnerAccount(**doc)
            except ValidationError as exc:
                logger.warning("Account %s has an unreadable document: %s", owner_account_id, exc)
                raise OwnerLookupError(owner_account_id, f"Owner account '{owner_account_id}' is malformed")

        return display_info_for(owner_account_id, account)
