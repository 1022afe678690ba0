# storecast/core/auth.py
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from storecast.core.config import get_settings
from storecast.core.timeutils import utcnow
from storecast.database import get_session
from storecast.models.profile import Profile
from storecast.repositories.profile_repo import ProfileRepository
from storecast.repositories.scope import DataScope

logger = logging.getLogger(__name__)

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so browser sessions can fall back to the session cookie.
bearer_scheme = HTTPBearer(auto_error=False)

profile_repo = ProfileRepository()


@dataclass(frozen=True)
class AuthIdentity:
    """
    Verified Supabase Auth identity taken from the access token claims.

    Supabase puts the role in two places: `user_metadata` (legacy, user
    editable) and `app_metadata` (authoritative, service role only).
    """

    id: uuid.UUID
    email: str
    user_metadata: dict[str, Any] = field(default_factory=dict)
    app_metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def admin_intent(self) -> bool:
        return (
            self.user_metadata.get("role") == "admin"
            or self.app_metadata.get("role") == "admin"
        )


@dataclass
class RequestContext:
    """
    Everything an action needs about the current request.

    Built per request and passed explicitly; there is no process-wide
    "current session".
    """

    session: Session
    identity: AuthIdentity | None = None
    access_token: str | None = None


@dataclass
class CurrentUser:
    identity: AuthIdentity
    profile: Profile

    @property
    def id(self) -> uuid.UUID:
        return self.identity.id

    @property
    def email(self) -> str:
        return self.profile.email

    @property
    def role(self) -> str:
        return self.profile.role

    @property
    def is_admin(self) -> bool:
        return self.profile.role == "admin"


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT).

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Raises:
        JWTError: if token is invalid/expired.
    """
    settings = get_settings()
    return jwt.decode(
        token,
        settings.SUPABASE_JWT_SECRET,
        algorithms=[settings.SUPABASE_JWT_ALG],
        options={"verify_aud": False},
    )


def read_identity(token: str | None) -> AuthIdentity | None:
    """
    Turn a raw access token into an AuthIdentity.

    Missing, invalid, expired, or malformed tokens all mean "no session".
    """
    if not token:
        return None
    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        logger.info("Rejected access token: %s", exc)
        return None

    sub = payload.get("sub")
    if not sub:
        return None
    try:
        user_id = uuid.UUID(str(sub))
    except ValueError:
        logger.info("Rejected access token with non-UUID sub")
        return None

    return AuthIdentity(
        id=user_id,
        email=payload.get("email") or "",
        user_metadata=payload.get("user_metadata") or {},
        app_metadata=payload.get("app_metadata") or {},
    )


def token_from_request(request: Request) -> str | None:
    """Bearer header first, then the session cookie."""
    header = request.headers.get("authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(get_settings().SESSION_COOKIE_NAME)


def _provision_profile(session: Session, identity: AuthIdentity, role: str) -> Profile:
    """
    Create the missing profile row.

    Never raises: if the insert fails an unsaved profile with the same
    shape is returned so callers always see a profile.
    """
    try:
        return profile_repo.create(
            session,
            Profile(id=identity.id, email=identity.email, role=role),
        )
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Error creating profile for %s: %s", identity.id, exc)
        return Profile(
            id=identity.id,
            email=identity.email,
            role=role,
            created_at=utcnow(),
        )


def resolve_current_user(ctx: RequestContext) -> CurrentUser | None:
    """
    Resolve the current user from the request context.

    Flow:
      1. No valid session => None.
      2. Admin intent from user_metadata / app_metadata role claims.
      3. Fetch profile (service scope for admins, own row otherwise).
      4. Fetch errors are logged and treated as "no row".
      5. Missing row => auto-provision with role admin/client.
    """
    identity = ctx.identity
    if identity is None:
        return None

    admin_intent = identity.admin_intent
    scope = DataScope.service() if admin_intent else DataScope.owner(identity.id)

    try:
        profile = profile_repo.get_by_id(ctx.session, identity.id, scope)
    except SQLAlchemyError as exc:
        ctx.session.rollback()
        logger.error("Error fetching profile for %s: %s", identity.id, exc)
        profile = None

    if profile is None:
        profile = _provision_profile(
            ctx.session, identity, "admin" if admin_intent else "client"
        )

    return CurrentUser(identity=identity, profile=profile)


# ----- FastAPI dependencies -----


def get_access_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(get_settings().SESSION_COOKIE_NAME)


def get_request_context(
    token: str | None = Depends(get_access_token),
    session: Session = Depends(get_session),
) -> RequestContext:
    return RequestContext(session=session, identity=read_identity(token), access_token=token)


def get_current_user(ctx: RequestContext = Depends(get_request_context)) -> CurrentUser | None:
    """Current user or None for anonymous requests."""
    return resolve_current_user(ctx)


def require_auth(user: CurrentUser | None = Depends(get_current_user)) -> CurrentUser:
    """
    Enforce authentication.

    Raises:
        HTTPException(401): if there is no valid session.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_admin(user: CurrentUser = Depends(require_auth)) -> CurrentUser:
    """
    Enforce admin role.

    Raises:
        HTTPException(403): if role is not admin.
    """
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


def require_client(user: CurrentUser = Depends(require_auth)) -> CurrentUser:
    """
    Enforce that only clients (store owners) can access a route.

    Use this for store registration and content upload.
    """
    if user.role != "client":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Client access required",
        )
    return user
