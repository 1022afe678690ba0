# storecast/schemas/admin.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from storecast.schemas.content import ContentRead
from storecast.schemas.profile import ProfileRead
from storecast.schemas.results import ActionResult


class ClientStore(SQLModel):
    id: uuid.UUID
    name: str
    brand_company: str
    address: str | None = None


class ClientSummary(SQLModel):
    """
    Client row for the admin client list / overview.
    """

    id: uuid.UUID
    email: str
    role: str
    created_at: datetime
    stores: list[ClientStore] = Field(default_factory=list)
    content_count: int = 0
    latest_upload: datetime | None = None
    active_campaigns: int | None = None


class OverviewStats(SQLModel):
    total_clients: int = 0
    active_clients: int = 0
    total_uploads: int = 0
    recent_activity: int = 0


class AdminDashboardData(SQLModel):
    total_clients: int
    total_stores: int
    total_content: int
    recent_clients: list[ProfileRead]
    recent_content: list[ContentRead]


class AdminContentStats(SQLModel):
    total_content: int = 0
    active_content: int = 0
    scheduled_content: int = 0
    archived_content: int = 0
    content_by_type: dict[str, int] = Field(default_factory=dict)


class ClientsResult(ActionResult):
    clients: list[ClientSummary] = Field(default_factory=list)


class ClientOverviewResult(ActionResult):
    clients: list[ClientSummary] = Field(default_factory=list)
    stats: OverviewStats = Field(default_factory=OverviewStats)


class AdminDashboardResult(ActionResult):
    data: AdminDashboardData | None = None


class AdminContentStatsResult(ActionResult):
    stats: AdminContentStats | None = None
