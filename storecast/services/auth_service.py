# storecast/services/auth_service.py
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from storecast.core.auth import RequestContext, read_identity, resolve_current_user
from storecast.core.steps import StepSequence
from storecast.core.supabase_client import supabase_admin, supabase_public
from storecast.models.profile import Profile
from storecast.repositories.profile_repo import ProfileRepository
from storecast.schemas.results import SignInResult, UserIdResult

logger = logging.getLogger(__name__)


def home_for_role(role: str) -> str:
    return "/admin" if role == "admin" else "/dashboard"


@dataclass
class OAuthOutcome:
    redirect_to: str
    access_token: str | None = None


class AuthService:
    """
    Sign-up, sign-in and OAuth callback handling.
    """

    def __init__(self, repo: ProfileRepository):
        self.repo = repo

    def register_user(
        self,
        session: Session,
        email: str,
        password: str,
        role: str = "client",
    ) -> UserIdResult:
        """
        Create a confirmed Auth user carrying the role in both claim
        namespaces, then upsert the profile (best effort).
        """
        steps = StepSequence("register_user", on_failure=session.rollback)
        try:
            response = steps.run(
                "auth",
                lambda: supabase_admin().auth.admin.create_user(
                    {
                        "email": email,
                        "password": password,
                        "email_confirm": True,
                        "user_metadata": {"role": role},
                        "app_metadata": {"role": role},
                    }
                ),
            )
        except Exception as exc:
            return UserIdResult(success=False, message="Failed to register user", error=str(exc))

        user = getattr(response, "user", None)
        if user is None:
            return UserIdResult(
                success=False,
                message="User creation failed with no error",
                error="No user returned from create_user",
            )

        user_id = uuid.UUID(str(user.id))
        steps.run(
            "profile",
            lambda: self.repo.upsert(session, user_id, user.email or email, role),
            required=False,
        )
        return UserIdResult(
            success=True,
            message="User registered successfully",
            user_id=user_id,
            warnings=steps.warnings or None,
        )

    def sign_in(self, session: Session, email: str, password: str) -> SignInResult:
        """
        Password sign-in. The returned access token becomes the session
        cookie; the redirect follows the resolved profile role.
        """
        try:
            response = supabase_public().auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as exc:
            logger.info("Sign-in failed for %s: %s", email, exc)
            return SignInResult(success=False, error=str(exc))

        auth_session = getattr(response, "session", None)
        token = getattr(auth_session, "access_token", None)
        identity = read_identity(token)
        if identity is None:
            return SignInResult(success=False, error="Sign-in did not return a valid session")

        current = resolve_current_user(
            RequestContext(session=session, identity=identity, access_token=token)
        )
        return SignInResult(
            success=True,
            access_token=token,
            redirect_to=home_for_role(current.role),
        )

    def handle_oauth_callback(
        self,
        session: Session,
        code: str | None,
        user_type: str = "client",
    ) -> OAuthOutcome:
        """
        Exchange the OAuth code and make sure a profile exists.

        `user_type` (from the callback query string) only decides the role
        of a brand-new profile; an existing profile keeps its role.
        """
        user_type = user_type if user_type in ("client", "admin") else "client"
        error_redirect = f"/auth/{user_type}/signin?error=oauth_error"
        if not code:
            return OAuthOutcome(redirect_to=error_redirect)

        try:
            response = supabase_public().auth.exchange_code_for_session({"auth_code": code})
        except Exception as exc:
            logger.error("OAuth callback error: %s", exc)
            return OAuthOutcome(redirect_to=error_redirect)

        user = getattr(response, "user", None)
        token = getattr(getattr(response, "session", None), "access_token", None)
        if user is None:
            return OAuthOutcome(redirect_to=error_redirect)

        user_id = uuid.UUID(str(user.id))
        email = user.email or ""
        role = self._ensure_profile(session, user_id, email, user_type)

        steps = StepSequence("oauth_metadata")
        steps.run(
            "auth_metadata",
            lambda: supabase_admin().auth.admin.update_user_by_id(
                str(user_id), {"app_metadata": {"role": role}}
            ),
            required=False,
        )
        return OAuthOutcome(redirect_to=home_for_role(role), access_token=token)

    def _ensure_profile(
        self,
        session: Session,
        user_id: uuid.UUID,
        email: str,
        role: str,
    ) -> str:
        """Return the effective role, creating the profile when missing."""
        try:
            existing = self.repo.get_by_id(session, user_id)
            if existing is not None:
                return existing.role
            self.repo.create(session, Profile(id=user_id, email=email, role=role))
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error creating profile after OAuth: %s", exc)
        return role
