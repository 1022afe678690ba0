# storecast/services/user_admin_service.py
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from storecast.core.config import get_settings
from storecast.core.steps import StepSequence
from storecast.core.supabase_client import supabase_admin, supabase_public
from storecast.repositories.profile_repo import ProfileRepository
from storecast.schemas.results import ActionResult

logger = logging.getLogger(__name__)


def _site_url(path: str) -> str:
    return f"{get_settings().SITE_URL.rstrip('/')}{path}"


class UserAdminService:
    """
    Account management on top of Supabase Auth.

    Auth is the primary effect of every action here; mirroring the change
    into `profiles` is best effort and reported via `warnings`.
    """

    def __init__(self, repo: ProfileRepository):
        self.repo = repo

    # ----- Email / role -----

    def change_user_email(
        self,
        session: Session,
        user_id: uuid.UUID,
        new_email: str,
    ) -> ActionResult:
        steps = StepSequence("change_user_email", on_failure=session.rollback)

        def update_profile() -> None:
            profile = self.repo.get_by_id(session, user_id)
            if profile is None:
                raise LookupError("Profile not found")
            profile.email = new_email
            self.repo.update(session, profile)

        try:
            steps.run(
                "auth",
                lambda: supabase_admin().auth.admin.update_user_by_id(
                    str(user_id), {"email": new_email}
                ),
            )
        except Exception as exc:
            return ActionResult(
                success=False,
                message="Failed to change user email",
                error=str(exc),
            )

        steps.run("profile", update_profile, required=False)
        return ActionResult(
            success=True,
            message=f"Email successfully changed to {new_email}. User will receive a confirmation email.",
            warnings=steps.warnings or None,
        )

    def switch_user_role(
        self,
        session: Session,
        user_id: uuid.UUID,
        role: str,
    ) -> ActionResult:
        """
        Change the application role, then mirror it into the Auth claims
        so new tokens carry it.
        """
        steps = StepSequence("switch_user_role", on_failure=session.rollback)

        def update_profile() -> None:
            profile = self.repo.get_by_id(session, user_id)
            if profile is None:
                raise LookupError("Profile not found")
            profile.role = role
            self.repo.update(session, profile)

        try:
            steps.run("profile", update_profile)
        except Exception as exc:
            return ActionResult(success=False, message="Failed to update role", error=str(exc))

        steps.run(
            "auth_metadata",
            lambda: self._write_role_claims(user_id, role),
            required=False,
        )
        return ActionResult(
            success=True,
            message=f"Role updated to {role}",
            warnings=steps.warnings or None,
        )

    @staticmethod
    def _write_role_claims(user_id: uuid.UUID, role: str) -> None:
        supabase_admin().auth.admin.update_user_by_id(
            str(user_id),
            {"app_metadata": {"role": role}, "user_metadata": {"role": role}},
        )

    def update_user_app_metadata(self, user_id: uuid.UUID, role: str) -> ActionResult:
        """Rewrite both role claims for a single user."""
        try:
            self._write_role_claims(user_id, role)
        except Exception as exc:
            logger.error("Error updating user app_metadata: %s", exc)
            return ActionResult(
                success=False,
                message="Failed to update user metadata",
                error=str(exc),
            )
        return ActionResult(
            success=True,
            message=f"User metadata successfully updated with role: {role}",
        )

    def sync_all_users_app_metadata(self, session: Session) -> ActionResult:
        """
        Copy every profile role into the Auth claims.

        Individual failures are counted and reported, not fatal.
        """
        try:
            profiles = self.repo.list_all(session)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error fetching profiles: %s", exc)
            return ActionResult(success=False, message="Failed to fetch profiles", error=str(exc))

        if not profiles:
            return ActionResult(success=True, message="No profiles found to sync")

        synced = 0
        errors: list[str] = []
        for profile in profiles:
            try:
                self._write_role_claims(profile.id, profile.role)
                synced += 1
            except Exception as exc:
                errors.append(f"Error updating user {profile.id}: {exc}")

        for error in errors:
            logger.warning(error)
        return ActionResult(
            success=True,
            message=f"Synced metadata for {synced} users. {len(errors)} errors.",
            warnings=errors or None,
        )

    # ----- Account lifecycle -----

    def invite_user(self, email: str, role: str = "client") -> ActionResult:
        try:
            supabase_admin().auth.admin.invite_user_by_email(
                email,
                {
                    "data": {"role": role},
                    "redirect_to": _site_url("/auth/reset-password?source=invite"),
                },
            )
        except Exception as exc:
            logger.error("Error inviting user: %s", exc)
            return ActionResult(success=False, message="Failed to send invitation", error=str(exc))
        return ActionResult(success=True, message=f"Invitation sent successfully to {email}")

    def delete_user(self, user_id: uuid.UUID) -> ActionResult:
        """
        Delete the Auth user. The profile row, stores and content follow
        through the `auth.users` foreign keys in the database.
        """
        try:
            supabase_admin().auth.admin.delete_user(str(user_id))
        except Exception as exc:
            logger.error("Error deleting user: %s", exc)
            return ActionResult(
                success=False,
                message="Failed to delete user account",
                error=str(exc),
            )
        return ActionResult(success=True, message="User account has been successfully deleted")

    def change_password(self, user_id: uuid.UUID, new_password: str) -> ActionResult:
        """Password lives in Supabase Auth only; no profile change."""
        try:
            supabase_admin().auth.admin.update_user_by_id(
                str(user_id), {"password": new_password}
            )
        except Exception as exc:
            logger.error("Error changing password: %s", exc)
            return ActionResult(success=False, message="Failed to change password", error=str(exc))
        return ActionResult(success=True, message="Password updated")

    # ----- Email links -----

    def send_password_reset(self, email: str) -> ActionResult:
        try:
            supabase_public().auth.reset_password_for_email(
                email, {"redirect_to": _site_url("/auth/reset-password")}
            )
        except Exception as exc:
            logger.error("Error sending password reset: %s", exc)
            return ActionResult(
                success=False,
                message="Failed to send password reset email",
                error=str(exc),
            )
        return ActionResult(success=True, message=f"Password reset link has been sent to {email}")

    def _send_otp(self, email: str, create_user: bool) -> None:
        supabase_public().auth.sign_in_with_otp(
            {
                "email": email,
                "options": {
                    "should_create_user": create_user,
                    "email_redirect_to": _site_url("/dashboard"),
                },
            }
        )

    def request_reauthentication(self, email: str) -> ActionResult:
        try:
            self._send_otp(email, create_user=False)
        except Exception as exc:
            logger.error("Error sending reauthentication request: %s", exc)
            return ActionResult(
                success=False,
                message="Failed to send reauthentication link",
                error=str(exc),
            )
        return ActionResult(success=True, message=f"Reauthentication link has been sent to {email}")

    def send_magic_link(self, email: str) -> ActionResult:
        try:
            self._send_otp(email, create_user=True)
        except Exception as exc:
            logger.error("Error sending magic link: %s", exc)
            return ActionResult(success=False, message="Failed to send magic link", error=str(exc))
        return ActionResult(success=True, message=f"Magic link has been sent to {email}")
