# storecast/schemas/results.py
"""
Action result envelopes.

Every server action answers `{success, <data>?, error?}`; routers serialize
with `response_model_exclude_none=True` so absent data fields are omitted.
"""
import uuid

from sqlmodel import SQLModel

from storecast.schemas.content import ContentRead, ContentStats
from storecast.schemas.profile import ProfileRead
from storecast.schemas.store import StoreRead


class ActionResult(SQLModel):
    success: bool
    message: str | None = None
    error: str | None = None
    warnings: list[str] | None = None


class RoleResult(ActionResult):
    role: str | None = None


class ProfileResult(ActionResult):
    profile: ProfileRead | None = None


class UserIdResult(ActionResult):
    user_id: uuid.UUID | None = None


class StoresResult(ActionResult):
    stores: list[StoreRead] | None = None


class ContentListResult(ActionResult):
    content: list[ContentRead] | None = None


class ContentStatsResult(ActionResult):
    stats: ContentStats | None = None


class CsvResult(ActionResult):
    csv_string: str | None = None
    file_name: str | None = None


class SignInResult(ActionResult):
    access_token: str | None = None
    redirect_to: str | None = None
