# Models with validation
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# Stored entity
class Swosh(BaseModel):
    id: str
    payee: str
    amount: Union[int, float]
    description: Optional[str] = None
    expires_on: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_on is None:
            return False
        now = now or datetime.now(timezone.utc)
        expires_on = self.expires_on
        # Mongo hands back naive datetimes in UTC
        if expires_on.tzinfo is None:
            expires_on = expires_on.replace(tzinfo=timezone.utc)
        return expires_on <= now

    def to_document(self) -> dict:
        document = self.model_dump(exclude={"id"})
        document["_id"] = self.id
        return document

    @classmethod
    def from_document(cls, document: dict) -> "Swosh":
        data = dict(document)
        data["id"] = data.pop("_id")
        return cls.model_validate(data)


# API request models
class SwoshRequest(BaseModel):
    """Body of POST /api/create.

    Every field is optional here so that missing values are reported by
    the validation step rather than by the parser.
    """
    model_config = ConfigDict(populate_by_name=True)

    phone: Optional[str] = None
    amount: Optional[Union[int, float]] = None
    message: Optional[str] = None
    expire_after_seconds: Optional[int] = Field(default=None, alias="expireAfterSeconds")


# API response models
class SwoshUrlResponse(BaseModel):
    id: str


class ErrorResponse(BaseModel):
    reason: str


class SwoshPreview(BaseModel):
    id: str
    payee: str
    amount: Union[int, float]
    description: Optional[str] = None
    expires_on: Optional[datetime] = None
    swish_uri: str
    qr_code: str
