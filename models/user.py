"""
User record persisted in the users collection (users.json)
Created only through signup; never updated or deleted here
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def normalize_email(email) -> str:
    return str(email or "").strip().lower()


class UserRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Time-derived id assigned by the record store on append
    id: Optional[int] = None
    name: str = ""
    # Trimmed + lowercased; unique key of the collection
    email: str
    password_hash: str = Field(..., alias="passwordHash")
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        alias="createdAt",
    )

    def to_storage(self) -> dict:
        """Camel-cased dict as written to disk (id is assigned by the store)."""
        return self.model_dump(by_alias=True, exclude_none=True)
