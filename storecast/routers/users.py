# storecast/routers/users.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storecast.core.auth import CurrentUser, require_admin, require_auth
from storecast.database import get_session
from storecast.repositories.profile_repo import ProfileRepository
from storecast.schemas.profile import (
    EmailChange,
    EmailOnly,
    InviteRequest,
    PasswordChange,
    RoleChange,
)
from storecast.schemas.results import ActionResult, ProfileResult, RoleResult
from storecast.services.profile_service import ProfileService
from storecast.services.user_admin_service import UserAdminService

router = APIRouter(prefix="/profile", tags=["Profile"])
admin_router = APIRouter(
    prefix="/admin/users",
    tags=["User management"],
    dependencies=[Depends(require_admin)],
)

repo = ProfileRepository()
profile_service = ProfileService(repo)
service = UserAdminService(repo)


# -------- Self --------


@router.get("/role", response_model=RoleResult, response_model_exclude_none=True)
def read_my_role(
    session: Session = Depends(get_session),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Role stored on the current user's profile.

    Auth:
      - Requires valid Supabase JWT.
    """
    return profile_service.fetch_user_role(session, current_user.id)


@router.post("/password", response_model=ActionResult, response_model_exclude_none=True)
def change_my_password(
    payload: PasswordChange,
    current_user: CurrentUser = Depends(require_auth),
):
    """Change the current user's password (Supabase Auth only)."""
    return service.change_password(current_user.id, payload.password)


@router.post(
    "/reauthenticate",
    response_model=ActionResult,
    response_model_exclude_none=True,
)
def reauthenticate(current_user: CurrentUser = Depends(require_auth)):
    """Email a sign-in link to confirm a sensitive change."""
    return service.request_reauthentication(current_user.email)


# -------- Admin endpoints --------


@admin_router.post(
    "/sync-metadata",
    response_model=ActionResult,
    response_model_exclude_none=True,
)
def sync_metadata(session: Session = Depends(get_session)):
    """
    Copy every profile role into the Supabase Auth claims.
    """
    return service.sync_all_users_app_metadata(session)


@admin_router.post("/invite", response_model=ActionResult, response_model_exclude_none=True)
def invite(payload: InviteRequest):
    return service.invite_user(payload.email, payload.role)


@admin_router.post(
    "/password-reset",
    response_model=ActionResult,
    response_model_exclude_none=True,
)
def password_reset(payload: EmailOnly):
    """Send a password reset email on behalf of a user."""
    return service.send_password_reset(payload.email)


@admin_router.get(
    "/{user_id}",
    response_model=ProfileResult,
    response_model_exclude_none=True,
)
def read_client(user_id: uuid.UUID, session: Session = Depends(get_session)):
    return profile_service.fetch_client_profile_by_id(session, user_id)


@admin_router.patch(
    "/{user_id}/email",
    response_model=ActionResult,
    response_model_exclude_none=True,
)
def change_email(
    user_id: uuid.UUID,
    payload: EmailChange,
    session: Session = Depends(get_session),
):
    """
    Change a user's email (admin only).

    The Supabase Auth update must succeed; the profile copy is best effort.
    """
    return service.change_user_email(session, user_id, payload.email)


@admin_router.patch(
    "/{user_id}/role",
    response_model=ActionResult,
    response_model_exclude_none=True,
)
def change_role(
    user_id: uuid.UUID,
    payload: RoleChange,
    session: Session = Depends(get_session),
):
    """
    Update a user's role (admin only).

    Allowed roles: client, admin.
    """
    return service.switch_user_role(session, user_id, payload.role)


@admin_router.post(
    "/{user_id}/metadata",
    response_model=ActionResult,
    response_model_exclude_none=True,
)
def update_metadata(user_id: uuid.UUID, payload: RoleChange):
    return service.update_user_app_metadata(user_id, payload.role)


@admin_router.delete(
    "/{user_id}",
    response_model=ActionResult,
    response_model_exclude_none=True,
)
def delete_user(user_id: uuid.UUID):
    return service.delete_user(user_id)
