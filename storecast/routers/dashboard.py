# storecast/routers/dashboard.py
import asyncio
import logging
import uuid
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from storecast.core.auth import CurrentUser, require_auth
from storecast.database import call_with_session
from storecast.repositories.content_repo import ContentRepository
from storecast.repositories.profile_repo import ProfileRepository
from storecast.repositories.scope import DataScope
from storecast.repositories.store_repo import StoreRepository
from storecast.schemas.pages import DashboardPage, PageInfo
from storecast.schemas.profile import ProfileRead
from storecast.services.content_query import (
    ContentBrowserState,
    ContentFilter,
    ContentSort,
    SortDirection,
    SortField,
    ViewMode,
    annotate_status,
)
from storecast.services.content_service import ContentService
from storecast.services.profile_service import ProfileService
from storecast.services.store_service import StoreService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["Pages"])

store_repo = StoreRepository()
content_service = ContentService(ContentRepository(), store_repo)
store_service = StoreService(store_repo)
profile_service = ProfileService(ProfileRepository())


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _resolve_client(
    current_user: CurrentUser,
    admin_view: str | None,
) -> tuple[ProfileRead, DataScope, bool]:
    """
    Whose dashboard is shown, with which data scope.

    Clients always see their own data, whatever `admin_view` says.
    """
    if not current_user.is_admin:
        return (
            ProfileRead.model_validate(current_user.profile),
            DataScope.owner(current_user.id),
            False,
        )

    if not admin_view:
        raise _not_found("Select a client to view")
    try:
        client_id = uuid.UUID(admin_view)
    except ValueError:
        raise _not_found("Client not found")

    result = call_with_session(profile_service.fetch_client_profile_by_id, client_id)
    if not result.success or result.profile is None:
        raise _not_found(result.error or "Client not found")
    return result.profile, DataScope.service(), True


@router.get("", response_model=DashboardPage)
async def client_dashboard(
    admin_view: str | None = None,
    search: str | None = None,
    content_type: Literal["image", "video", "music"] | None = Query(None, alias="type"),
    content_status: Literal["scheduled", "active", "archived"] | None = Query(None, alias="status"),
    created_after: date | None = None,
    created_before: date | None = None,
    sort: SortField = "created_at",
    direction: SortDirection = "desc",
    view: ViewMode = "grid",
    page: int = 1,
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Client dashboard: stores, content stats and the content browser.

    Stores, content and stats are fetched concurrently, each with its own
    Session; any failed fetch turns the whole page into a 404.
    """
    client, scope, is_admin_view = await asyncio.to_thread(
        _resolve_client, current_user, admin_view
    )

    stores_result, content_result, stats_result = await asyncio.gather(
        asyncio.to_thread(
            call_with_session, store_service.fetch_stores_by_user_id, client.id, scope
        ),
        asyncio.to_thread(
            call_with_session, content_service.fetch_content_for_user, client.id, scope
        ),
        asyncio.to_thread(
            call_with_session, content_service.fetch_content_stats_by_user_id, client.id
        ),
    )
    for result in (stores_result, content_result, stats_result):
        if not result.success:
            logger.error("Dashboard fetch failed for %s: %s", client.id, result.error)
            raise _not_found("Dashboard data unavailable")

    state = ContentBrowserState(
        filter=ContentFilter(
            search=search,
            type=content_type,
            status=content_status,
            created_after=created_after,
            created_before=created_before,
        ),
        sort=ContentSort(field=sort, direction=direction),
        view=view,
        page=page,
    )
    visible = state.apply(content_result.content or [])

    stores = stores_result.stores or []
    return DashboardPage(
        client=client,
        stores=stores,
        stats=stats_result.stats,
        content=annotate_status(visible.items),
        pagination=PageInfo(
            page=visible.page,
            page_size=visible.page_size,
            total_items=visible.total_items,
            total_pages=visible.total_pages,
        ),
        view=view,
        upload_enabled=bool(stores) and not is_admin_view,
        needs_store_setup=not stores and not is_admin_view,
        admin_view=is_admin_view,
    )
