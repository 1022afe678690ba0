# storecast/repositories/profile_repo.py
import uuid

from sqlmodel import Session, select

from storecast.models.profile import Profile
from storecast.repositories.scope import DataScope


class ProfileRepository:
    """
    Data access layer for Profile.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(
        self,
        session: Session,
        profile_id: uuid.UUID,
        scope: DataScope = DataScope.service(),
    ) -> Profile | None:
        """Return a Profile by primary key if visible in `scope`, else None."""
        stmt = scope.apply(select(Profile).where(Profile.id == profile_id), Profile.id)
        return session.exec(stmt).first()

    def get_role(self, session: Session, profile_id: uuid.UUID) -> str | None:
        stmt = select(Profile.role).where(Profile.id == profile_id)
        return session.exec(stmt).first()

    def get_client(self, session: Session, client_id: uuid.UUID) -> Profile | None:
        stmt = select(Profile).where(Profile.id == client_id, Profile.role == "client")
        return session.exec(stmt).first()

    def list_by_role(
        self,
        session: Session,
        role: str,
        limit: int | None = None,
    ) -> list[Profile]:
        """Profiles with `role`, newest first."""
        stmt = (
            select(Profile)
            .where(Profile.role == role)
            .order_by(Profile.created_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(session.exec(stmt).all())

    def list_all(self, session: Session) -> list[Profile]:
        return list(session.exec(select(Profile)).all())

    def create(self, session: Session, profile: Profile) -> Profile:
        """Insert a new Profile and return the persisted row."""
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile

    def upsert(self, session: Session, profile_id: uuid.UUID, email: str, role: str) -> Profile:
        """Insert or overwrite email/role for `profile_id`."""
        profile = session.get(Profile, profile_id)
        if profile is None:
            profile = Profile(id=profile_id, email=email, role=role)
        else:
            profile.email = email
            profile.role = role
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile

    def update(self, session: Session, profile: Profile) -> Profile:
        """Persist changes to an existing Profile."""
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile
