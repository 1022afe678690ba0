# storecast/models/content.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Content(SQLModel, table=True):
    """
    Scheduled media asset belonging to a store.

    Rows are never updated after insert; deletion removes the Storage
    object (best effort) and then the row.
    Status (scheduled / active / archived) is derived from the date
    range at read time and never stored.
    """

    __tablename__ = "content"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    store_id: uuid.UUID = Field(
        foreign_key="stores.id",
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="profiles.id",
        index=True,
        description="Owning client profile",
    )

    title: str = Field(max_length=255)

    # image | video | music
    type: str = Field(index=True)

    file_url: str = Field(description="Public URL in Supabase Storage")
    file_size: int = Field(ge=0, description="Size in bytes")

    start_date: datetime
    end_date: datetime

    # none | daily | weekly | monthly | custom
    recurrence_type: str = Field(default="none")
    recurrence_days: list[str] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Weekday names, only for custom recurrence",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Upload timestamp (UTC)",
    )
