# storecast/schemas/store.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class StoreCreate(SQLModel):
    """
    Payload for registering a store location.

    Latitude / longitude are optional map coordinates.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=200)
    brand_company: str = Field(max_length=200)
    address: str
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    @field_validator("name", "brand_company", "address")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class StoreRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    brand_company: str
    address: str
    latitude: float | None = None
    longitude: float | None = None
    created_at: datetime


class StoreSummary(SQLModel):
    """Store fields joined onto content rows."""

    id: uuid.UUID | None = None
    name: str = ""
    brand_company: str = ""
    address: str = ""
