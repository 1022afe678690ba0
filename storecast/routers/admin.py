# storecast/routers/admin.py
import asyncio
import logging
import uuid
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlmodel import Session

from storecast.core.auth import require_admin
from storecast.database import call_with_session, get_session
from storecast.repositories.content_repo import ContentRepository
from storecast.repositories.profile_repo import ProfileRepository
from storecast.repositories.store_repo import StoreRepository
from storecast.schemas.admin import ClientOverviewResult, ClientsResult
from storecast.schemas.pages import (
    AdminContentPage,
    AdminHomePage,
    DownloadsPage,
    ExportSelection,
    PageInfo,
)
from storecast.schemas.results import CsvResult
from storecast.services.admin_service import AdminService
from storecast.services.content_query import (
    ContentBrowserState,
    ContentFilter,
    ContentSort,
    SortDirection,
    SortField,
    ViewMode,
    annotate_status,
    filter_content,
    group_content,
)
from storecast.services.content_service import ContentService
from storecast.services.export_service import ExportService
from storecast.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin pages"],
    dependencies=[Depends(require_admin)],
)

profile_repo = ProfileRepository()
store_repo = StoreRepository()
content_repo = ContentRepository()

admin_service = AdminService(profile_repo, store_repo, content_repo)
content_service = ContentService(content_repo, store_repo)
export_service = ExportService(content_repo)
profile_service = ProfileService(profile_repo)


def _csv_response(result: CsvResult) -> Response:
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=result.error or "Failed to generate CSV data.",
        )
    return Response(
        content=result.csv_string,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{result.file_name}"'},
    )


# -------- Overview --------


@router.get("", response_model=AdminHomePage)
async def admin_home():
    """
    Admin dashboard: totals, recent activity and content stats.

    Both fetches run concurrently; if either fails the page is not shown.
    """
    dashboard, stats = await asyncio.gather(
        asyncio.to_thread(call_with_session, admin_service.fetch_admin_dashboard_data),
        asyncio.to_thread(call_with_session, admin_service.fetch_admin_content_stats),
    )
    if not dashboard.success or not stats.success:
        logger.error(
            "Admin dashboard fetch failed: %s",
            dashboard.error or stats.error,
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Admin dashboard data unavailable",
        )
    return AdminHomePage(data=dashboard.data, stats=stats.stats)


# -------- Clients --------


@router.get("/clients", response_model=ClientsResult, response_model_exclude_none=True)
def list_clients(session: Session = Depends(get_session)):
    return admin_service.get_all_clients(session)


@router.get(
    "/clients/overview",
    response_model=ClientOverviewResult,
    response_model_exclude_none=True,
)
def clients_overview(session: Session = Depends(get_session)):
    """Six most recent clients plus platform activity over the last week."""
    return admin_service.get_client_overview(session)


@router.get("/clients/{client_id}/export")
def export_client(client_id: uuid.UUID, session: Session = Depends(get_session)):
    """
    Download every content item of one client as CSV.
    """
    client = profile_service.fetch_client_profile_by_id(session, client_id)
    if not client.success or client.profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=client.error or "Client not found",
        )
    return _csv_response(
        export_service.get_client_data_as_csv(session, client_id, client.profile.email)
    )


# -------- Content browser --------


@router.get("/content", response_model=AdminContentPage)
def content_browser(
    view_mode: Literal["location", "company"] = "location",
    sort: Literal["newest", "oldest"] = "newest",
    session: Session = Depends(get_session),
):
    """
    All content grouped by location -> company -> type, or by
    company -> location -> type.
    """
    result = content_service.fetch_all_content(session)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Content unavailable",
        )
    items = annotate_status(result.content or [])
    order = ContentSort(field="created_at", direction="desc" if sort == "newest" else "asc")
    return AdminContentPage(
        view_mode=view_mode,
        sort=sort,
        total_items=len(items),
        groups=group_content(items, view_mode, order),
    )


# -------- Downloads --------


@router.get("/downloads", response_model=DownloadsPage)
def downloads(
    search: str | None = None,
    content_type: Literal["image", "video", "music"] | None = Query(None, alias="type"),
    content_status: Literal["scheduled", "active", "archived"] | None = Query(None, alias="status"),
    created_after: date | None = None,
    created_before: date | None = None,
    client_email: str | None = None,
    company: str | None = None,
    sort: SortField = "created_at",
    direction: SortDirection = "desc",
    view: ViewMode = "list",
    page: int = 1,
    session: Session = Depends(get_session),
):
    """
    Filterable list of every content item, with the total size of the
    filtered set (what a bulk download would fetch).
    """
    result = content_service.fetch_all_content(session)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Content unavailable",
        )

    content_filter = ContentFilter(
        search=search,
        type=content_type,
        status=content_status,
        created_after=created_after,
        created_before=created_before,
        client_email=client_email,
        company=company,
    )
    state = ContentBrowserState(
        filter=content_filter,
        sort=ContentSort(field=sort, direction=direction),
        view=view,
        page=page,
    )
    items = result.content or []
    visible = state.apply(items)
    total_size = sum(item.file_size or 0 for item in filter_content(items, content_filter))
    return DownloadsPage(
        content=annotate_status(visible.items),
        pagination=PageInfo(
            page=visible.page,
            page_size=visible.page_size,
            total_items=visible.total_items,
            total_pages=visible.total_pages,
        ),
        total_size=total_size,
    )


@router.post("/downloads/export")
def export_selection(payload: ExportSelection, session: Session = Depends(get_session)):
    """CSV of the selected content items."""
    return _csv_response(export_service.export_selected_content(session, payload.content_ids))
