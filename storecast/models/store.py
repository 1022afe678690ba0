# storecast/models/store.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Store(SQLModel, table=True):
    """
    Physical store location owned by one client profile.

    A client needs at least one store before uploading content.
    """

    __tablename__ = "stores"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="profiles.id",
        index=True,
        description="Owning client profile",
    )

    name: str = Field(max_length=200)
    brand_company: str = Field(max_length=200)
    address: str = Field(description="Street address; text before the first comma is the location")

    latitude: float | None = None
    longitude: float | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
