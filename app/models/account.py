from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


class AccountType(str, Enum):
    DRIVER = "Driver"
    MUNICIPAL = "Municipal"
    ESTABLISHMENT = "Establishment"
    ADMIN = "Admin"


class OwnerType(str, Enum):
    """Account types that own parking slots."""
    MUNICIPAL = "Municipal"
    ESTABLISHMENT = "Establishment"


class OwnerDisplayInfo(BaseModel):
    name: str
    owner_type: OwnerType


class OwnerAccount(BaseModel):
    """Read model for an account document; only the fields reporting needs."""
    id: str = Field(alias="_id")
    account_type: AccountType
    business_name: Optional[str] = None
    contact_person: Optional[str] = None
    is_active: bool = True

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )

    @property
    def owner_type(self) -> Optional[OwnerType]:
        try:
            return OwnerType(self.account_type.value)
        except ValueError:
            return None

    @property
    def display_name(self) -> Optional[str]:
        return (self.business_name or self.contact_person or "").strip() or None
