# storecast/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from storecast.core.config import get_settings
from storecast.database import get_session
from storecast.repositories.profile_repo import ProfileRepository
from storecast.schemas.auth import RegisterRequest, SignInRequest
from storecast.schemas.profile import EmailOnly
from storecast.schemas.results import ActionResult, SignInResult, UserIdResult
from storecast.services.auth_service import AuthService
from storecast.services.user_admin_service import UserAdminService

router = APIRouter(prefix="/auth", tags=["Auth"])
# OAuth providers redirect back to /auth/callback, outside the API prefix.
callback_router = APIRouter(prefix="/auth", tags=["Auth"])

repo = ProfileRepository()
service = AuthService(repo)
account_service = UserAdminService(repo)


def _set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.SITE_URL.startswith("https"),
        path="/",
    )


@router.post(
    "/register",
    response_model=UserIdResult,
    response_model_exclude_none=True,
)
def register(payload: RegisterRequest, session: Session = Depends(get_session)):
    """
    Create a confirmed account with the given role.

    Admin sign-up is refused unless ALLOW_ADMIN_SIGNUP is on.
    """
    if payload.role == "admin" and not get_settings().ALLOW_ADMIN_SIGNUP:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin sign-up is disabled",
        )
    return service.register_user(session, payload.email, payload.password, payload.role)


@router.post("/signin", response_model=SignInResult, response_model_exclude_none=True)
def sign_in(
    payload: SignInRequest,
    response: Response,
    session: Session = Depends(get_session),
):
    """
    Email + password sign-in.

    On success the access token is also stored in the session cookie so
    the page routes see the session.
    """
    result = service.sign_in(session, payload.email, payload.password)
    if result.success and result.access_token:
        _set_session_cookie(response, result.access_token)
    return result


@router.post("/signout")
def sign_out():
    """Drop the session cookie and go back to the landing page."""
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME, path="/")
    return response


@router.post("/magic-link", response_model=ActionResult, response_model_exclude_none=True)
def magic_link(payload: EmailOnly):
    return account_service.send_magic_link(payload.email)


@router.post(
    "/password-reset",
    response_model=ActionResult,
    response_model_exclude_none=True,
)
def forgot_password(payload: EmailOnly):
    return account_service.send_password_reset(payload.email)


@callback_router.get("/callback")
def oauth_callback(
    code: str | None = None,
    user_type: str = Query("client", alias="userType"),
    session: Session = Depends(get_session),
):
    """
    OAuth landing route: exchange the code, then redirect to the area
    matching the user's role (or back to sign-in on error).
    """
    outcome = service.handle_oauth_callback(session, code, user_type)
    response = RedirectResponse(outcome.redirect_to, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    if outcome.access_token:
        _set_session_cookie(response, outcome.access_token)
    return response
