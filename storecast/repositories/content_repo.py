# storecast/repositories/content_repo.py
import uuid
from typing import Iterable

from sqlalchemy import func
from sqlmodel import Session, select

from storecast.models.content import Content
from storecast.models.profile import Profile
from storecast.models.store import Store
from storecast.repositories.scope import DataScope
from storecast.schemas.content import ContentRead
from storecast.schemas.store import StoreSummary


def _to_read(content: Content, store: Store | None, owner_email: str | None) -> ContentRead:
    """Validate a joined row into the read model."""
    summary = None
    if store is not None:
        summary = StoreSummary(
            id=store.id,
            name=store.name,
            brand_company=store.brand_company,
            address=store.address,
        )
    return ContentRead.model_validate(
        {
            **content.model_dump(),
            "store": summary,
            "owner_email": owner_email,
        }
    )


class ContentRepository:
    """
    Data access layer for Content.

    Listing queries join the owning store and profile email so callers
    get `ContentRead` rows ready for filtering and export.
    """

    def _joined(self):
        return (
            select(Content, Store, Profile.email)
            .join(Store, Store.id == Content.store_id, isouter=True)
            .join(Profile, Profile.id == Content.user_id, isouter=True)
        )

    def get_by_id(self, session: Session, content_id: uuid.UUID) -> Content | None:
        return session.get(Content, content_id)

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        scope: DataScope = DataScope.service(),
    ) -> list[ContentRead]:
        stmt = (
            self._joined()
            .where(Content.user_id == user_id)
            .order_by(Content.created_at.desc())
        )
        stmt = scope.apply(stmt, Content.user_id)
        return [_to_read(c, s, e) for c, s, e in session.exec(stmt).all()]

    def list_all(self, session: Session, limit: int | None = None) -> list[ContentRead]:
        stmt = self._joined().order_by(Content.created_at.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return [_to_read(c, s, e) for c, s, e in session.exec(stmt).all()]

    def list_by_ids(self, session: Session, content_ids: Iterable[uuid.UUID]) -> list[ContentRead]:
        ids = list(content_ids)
        if not ids:
            return []
        stmt = (
            self._joined()
            .where(Content.id.in_(ids))
            .order_by(Content.created_at.desc())
        )
        return [_to_read(c, s, e) for c, s, e in session.exec(stmt).all()]

    def list_raw(
        self,
        session: Session,
        user_ids: Iterable[uuid.UUID] | None = None,
    ) -> list[Content]:
        """Unjoined rows, optionally limited to a set of owners (stats)."""
        stmt = select(Content)
        if user_ids is not None:
            ids = list(user_ids)
            if not ids:
                return []
            stmt = stmt.where(Content.user_id.in_(ids))
        return list(session.exec(stmt).all())

    def count(self, session: Session) -> int:
        value = session.exec(select(func.count()).select_from(Content)).one()
        return int(value or 0)

    def create(self, session: Session, content: Content) -> Content:
        session.add(content)
        session.commit()
        session.refresh(content)
        return content

    def delete_by_id(self, session: Session, content_id: uuid.UUID) -> bool:
        """Delete a row; returns False when it did not exist."""
        content = session.get(Content, content_id)
        if content is None:
            return False
        session.delete(content)
        session.commit()
        return True
