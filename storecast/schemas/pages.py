# storecast/schemas/pages.py
"""
View models returned by the guarded page routes (/dashboard, /admin/*).
"""
import uuid
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

from storecast.schemas.admin import AdminContentStats, AdminDashboardData
from storecast.schemas.content import ContentRead, ContentStats
from storecast.schemas.profile import ProfileRead
from storecast.schemas.store import StoreRead


class PageInfo(SQLModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int


class DashboardPage(SQLModel):
    """
    Client dashboard.

    `admin_view` is true when an admin is looking at a client's dashboard;
    uploads are disabled in that case.
    """

    client: ProfileRead
    stores: list[StoreRead]
    stats: ContentStats
    content: list[ContentRead]
    pagination: PageInfo
    view: Literal["grid", "list"]
    upload_enabled: bool
    needs_store_setup: bool
    admin_view: bool = False


class AdminHomePage(SQLModel):
    data: AdminDashboardData
    stats: AdminContentStats


class AdminContentPage(SQLModel):
    view_mode: Literal["location", "company"]
    sort: Literal["newest", "oldest"]
    total_items: int
    groups: dict[str, dict[str, dict[str, list[ContentRead]]]]


class DownloadsPage(SQLModel):
    content: list[ContentRead]
    pagination: PageInfo
    total_size: int


class ExportSelection(SQLModel):
    model_config = ConfigDict(extra="forbid")

    content_ids: list[uuid.UUID] = Field(min_length=1)
