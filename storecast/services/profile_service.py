# storecast/services/profile_service.py
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from storecast.repositories.profile_repo import ProfileRepository
from storecast.schemas.profile import ProfileRead
from storecast.schemas.results import ProfileResult, RoleResult

logger = logging.getLogger(__name__)


class ProfileService:
    """
    Read-side profile actions.
    """

    def __init__(self, repo: ProfileRepository):
        self.repo = repo

    def fetch_user_role(self, session: Session, user_id: uuid.UUID) -> RoleResult:
        try:
            role = self.repo.get_role(session, user_id)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error fetching user role: %s", exc)
            return RoleResult(success=False, error=str(exc))
        if role is None:
            return RoleResult(success=False, error="Profile not found")
        return RoleResult(success=True, role=role)

    def fetch_client_profile_by_id(self, session: Session, client_id: uuid.UUID) -> ProfileResult:
        """Client profile by id; admins and unknown ids are not found."""
        try:
            profile = self.repo.get_client(session, client_id)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error fetching client profile: %s", exc)
            return ProfileResult(success=False, error=str(exc))
        if profile is None:
            return ProfileResult(success=False, error="Client not found")
        return ProfileResult(success=True, profile=ProfileRead.model_validate(profile))
