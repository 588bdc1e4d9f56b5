import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field, ConfigDict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_id(prefix: str) -> str:
    """Opaque record id, e.g. ``PAY_3f2a...``."""
    return f"{prefix}_{uuid.uuid4().hex}"


class MongoModel(BaseModel):
    """Base for stored records; ``id`` is kept in the ``_id`` field."""
    id: str = Field(alias="_id")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        frozen=True
    )

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)
