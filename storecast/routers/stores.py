# storecast/routers/stores.py
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from storecast.core.auth import CurrentUser, require_auth, require_client
from storecast.database import get_session
from storecast.repositories.scope import DataScope
from storecast.repositories.store_repo import StoreRepository
from storecast.schemas.results import StoresResult
from storecast.schemas.store import StoreCreate
from storecast.services.store_service import StoreService

router = APIRouter(prefix="/stores", tags=["Stores"])

repo = StoreRepository()
service = StoreService(repo)


@router.post(
    "",
    response_model=StoresResult,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def add_store(
    payload: StoreCreate,
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(require_client),
):
    """
    Register a store location for the current client.

    Auth:
      - Clients only.
    """
    return service.add_store(session, current_user.id, payload)


@router.get("", response_model=StoresResult, response_model_exclude_none=True)
def list_stores(
    user_id: uuid.UUID | None = None,
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Stores of the current user, or of `user_id` for admins.
    """
    if user_id is None or user_id == current_user.id:
        return service.fetch_stores_by_user_id(
            session, current_user.id, DataScope.owner(current_user.id)
        )
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return service.fetch_stores_by_user_id(session, user_id, DataScope.service())
