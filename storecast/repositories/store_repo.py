# storecast/repositories/store_repo.py
import uuid
from typing import Iterable

from sqlalchemy import func
from sqlmodel import Session, select

from storecast.models.store import Store
from storecast.repositories.scope import DataScope


class StoreRepository:
    """
    Data access layer for Store.
    """

    def list_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        scope: DataScope = DataScope.service(),
    ) -> list[Store]:
        stmt = (
            select(Store)
            .where(Store.user_id == user_id)
            .order_by(Store.created_at.desc())
        )
        stmt = scope.apply(stmt, Store.user_id)
        return list(session.exec(stmt).all())

    def list_for_users(self, session: Session, user_ids: Iterable[uuid.UUID]) -> list[Store]:
        ids = list(user_ids)
        if not ids:
            return []
        stmt = select(Store).where(Store.user_id.in_(ids))
        return list(session.exec(stmt).all())

    def count(self, session: Session) -> int:
        value = session.exec(select(func.count()).select_from(Store)).one()
        return int(value or 0)

    def create(self, session: Session, store: Store) -> Store:
        session.add(store)
        session.commit()
        session.refresh(store)
        return store
