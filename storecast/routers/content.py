# storecast/routers/content.py
import uuid
from datetime import datetime

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    UploadFile,
    status,
)
from pydantic import ValidationError
from sqlmodel import Session

from storecast.core.auth import CurrentUser, require_admin, require_auth, require_client
from storecast.database import get_session
from storecast.repositories.content_repo import ContentRepository
from storecast.repositories.scope import DataScope
from storecast.repositories.store_repo import StoreRepository
from storecast.schemas.content import ContentSchedule
from storecast.schemas.results import (
    ActionResult,
    ContentListResult,
    ContentStatsResult,
)
from storecast.services.content_service import ContentService, UploadedFile

router = APIRouter(prefix="/content", tags=["Content"])

repo = ContentRepository()
service = ContentService(repo, StoreRepository())


@router.post(
    "",
    response_model=ContentListResult,
    response_model_exclude_none=True,
    summary="Upload one or more files with shared scheduling",
)
def upload_content(
    files: list[UploadFile] = File(...),
    store_id: uuid.UUID = Form(...),
    start_date: datetime = Form(...),
    end_date: datetime = Form(...),
    title: str | None = Form(None),
    recurrence_type: str = Form("none"),
    recurrence_days: list[str] | None = Form(None),
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(require_client),
):
    """
    Upload content files for one of the current client's stores.

    - Accepts image/*, video/* and audio/* files.
    - Every file gets the same schedule; the title defaults to the file name.
    """
    try:
        schedule = ContentSchedule(
            title=title,
            store_id=store_id,
            start_date=start_date,
            end_date=end_date,
            recurrence_type=recurrence_type,
            recurrence_days=recurrence_days,
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.errors(include_url=False, include_context=False, include_input=False),
        )

    uploads: list[UploadedFile] = []
    for f in files:
        if not f.content_type:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing content-type for one of the uploaded files",
            )
        uploads.append(
            UploadedFile(
                filename=f.filename or "upload",
                content_type=f.content_type,
                data=f.file.read(),
            )
        )

    return service.upload_content(session, current_user.id, schedule, uploads)


@router.get("", response_model=ContentListResult, response_model_exclude_none=True)
def list_my_content(
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(require_auth),
):
    """Content of the current user, newest first."""
    return service.fetch_content_for_user(
        session, current_user.id, DataScope.owner(current_user.id)
    )


@router.get(
    "/all",
    response_model=ContentListResult,
    response_model_exclude_none=True,
    dependencies=[Depends(require_admin)],
)
def list_all_content(session: Session = Depends(get_session)):
    return service.fetch_all_content(session)


@router.get("/stats", response_model=ContentStatsResult, response_model_exclude_none=True)
def my_content_stats(
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(require_auth),
):
    return service.fetch_content_stats_by_user_id(session, current_user.id)


@router.delete(
    "/{content_id}",
    response_model=ActionResult,
    response_model_exclude_none=True,
)
def delete_content(
    content_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Delete a content item and its stored file.

    Owners can delete their own items; admins can delete any item.
    """
    row = repo.get_by_id(session, content_id)
    if row is None or (row.user_id != current_user.id and not current_user.is_admin):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Content not found",
        )
    return service.delete_content(session, content_id, row.file_url)
