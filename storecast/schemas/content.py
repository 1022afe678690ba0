# storecast/schemas/content.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

from storecast.core.timeutils import ensure_utc
from storecast.schemas.store import StoreSummary

ContentType = Literal["image", "video", "music"]
RecurrenceType = Literal["none", "daily", "weekly", "monthly", "custom"]

WEEK_DAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


class ContentSchedule(SQLModel):
    """
    Scheduling metadata shared by every file of one upload.

    Rules:
      - end_date must not be before start_date
      - recurrence_days only for recurrence_type == "custom"
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, max_length=255)
    store_id: uuid.UUID
    start_date: datetime
    end_date: datetime
    recurrence_type: RecurrenceType = "none"
    recurrence_days: list[str] | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("title")
    @classmethod
    def blank_title_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("recurrence_days")
    @classmethod
    def normalize_days(cls, v: list[str] | None) -> list[str] | None:
        if not v:
            return None
        days: list[str] = []
        for raw in v:
            day = raw.strip().capitalize()
            if day not in WEEK_DAYS:
                raise ValueError(f"unknown weekday: {raw}")
            if day not in days:
                days.append(day)
        return days

    @model_validator(mode="after")
    def check_schedule(self) -> "ContentSchedule":
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        if self.recurrence_type != "custom":
            self.recurrence_days = None
        elif not self.recurrence_days:
            raise ValueError("custom recurrence needs at least one day")
        return self


class ContentCreate(SQLModel):
    """Row payload for insert_content (file already in Storage)."""

    model_config = ConfigDict(extra="forbid")

    store_id: uuid.UUID
    user_id: uuid.UUID
    title: str = Field(max_length=255)
    type: ContentType
    file_url: str
    file_size: int = Field(ge=0)
    start_date: datetime
    end_date: datetime
    recurrence_type: RecurrenceType = "none"
    recurrence_days: list[str] | None = None


class ContentRead(SQLModel):
    """
    Content row joined with its store summary and owner email.

    `status` is filled in by views at render time.
    """

    id: uuid.UUID
    store_id: uuid.UUID
    user_id: uuid.UUID
    title: str
    type: str
    file_url: str
    file_size: int
    start_date: datetime | None = None
    end_date: datetime | None = None
    recurrence_type: str | None = None
    recurrence_days: list[str] | None = None
    created_at: datetime

    store: StoreSummary | None = None
    owner_email: str | None = None
    status: str | None = None


class ContentStats(SQLModel):
    total: int = 0
    active: int = 0
    scheduled: int = 0
    this_month: int = 0
