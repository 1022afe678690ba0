# storecast/core/route_guard.py
"""
Role-based guard for the page areas.

Every request under /dashboard or /admin is checked before it reaches a
router:

    no session               -> sign-in page of the area
    profile lookup fails     -> sign-in page of the area
    /admin*, role != admin   -> /auth/admin/signin
    /dashboard*, role client -> pass
    /dashboard*, role admin  -> pass only with ?admin_view=<client id>
    otherwise                -> /auth/client/signin

Lookup errors always end in a redirect, never in a pass-through.
"""
import logging
import uuid
from typing import Callable, Mapping

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

from storecast.core.auth import AuthIdentity, read_identity, token_from_request
from storecast.database import new_session
from storecast.repositories.profile_repo import ProfileRepository

logger = logging.getLogger(__name__)

CLIENT_SIGNIN = "/auth/client/signin"
ADMIN_SIGNIN = "/auth/admin/signin"

PROTECTED_AREAS: dict[str, str] = {
    "/dashboard": CLIENT_SIGNIN,
    "/admin": ADMIN_SIGNIN,
}

RoleLookup = Callable[[uuid.UUID], str | None]


def protected_area(path: str) -> str | None:
    """Return the protected prefix `path` falls under, if any."""
    for prefix in PROTECTED_AREAS:
        if path == prefix or path.startswith(prefix + "/"):
            return prefix
    return None


def lookup_profile_role(user_id: uuid.UUID) -> str | None:
    """Read the profile role with a short-lived session."""
    with new_session() as session:
        return ProfileRepository().get_role(session, user_id)


def evaluate_route(
    path: str,
    query: Mapping[str, str],
    identity: AuthIdentity | None,
    lookup_role: RoleLookup,
) -> str | None:
    """
    Decide the fate of one request.

    Returns the redirect target, or None to let the request through.
    """
    area = protected_area(path)
    if area is None:
        return None

    signin = PROTECTED_AREAS[area]
    if identity is None:
        return signin

    try:
        role = lookup_role(identity.id)
    except Exception as exc:
        logger.error("Profile lookup failed in route guard for %s: %s", identity.id, exc)
        return signin

    if role is None:
        logger.warning("No profile row for %s, redirecting to %s", identity.id, signin)
        return signin

    if area == "/admin":
        return None if role == "admin" else ADMIN_SIGNIN

    if role == "client":
        return None
    if role == "admin" and query.get("admin_view"):
        return None
    return CLIENT_SIGNIN


class RouteGuardMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, lookup_role: RoleLookup = lookup_profile_role):
        super().__init__(app)
        self.lookup_role = lookup_role

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if protected_area(path) is None:
            return await call_next(request)

        identity = read_identity(token_from_request(request))

        def decide() -> str | None:
            return evaluate_route(path, request.query_params, identity, self.lookup_role)

        target = await run_in_threadpool(decide)
        if target is not None:
            return RedirectResponse(target, status_code=307)
        return await call_next(request)
