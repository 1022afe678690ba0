# storecast/services/store_service.py
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from storecast.models.store import Store
from storecast.repositories.scope import DataScope
from storecast.repositories.store_repo import StoreRepository
from storecast.schemas.results import StoresResult
from storecast.schemas.store import StoreCreate, StoreRead

logger = logging.getLogger(__name__)


class StoreService:
    """
    Store registration and lookup for clients.
    """

    def __init__(self, repo: StoreRepository):
        self.repo = repo

    def add_store(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: StoreCreate,
    ) -> StoresResult:
        """Register a store owned by `user_id`."""
        try:
            store = self.repo.create(
                session,
                Store(
                    user_id=user_id,
                    name=payload.name,
                    brand_company=payload.brand_company,
                    address=payload.address,
                    latitude=payload.latitude,
                    longitude=payload.longitude,
                ),
            )
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error adding store: %s", exc)
            return StoresResult(success=False, error=str(exc))
        return StoresResult(success=True, stores=[StoreRead.model_validate(store)])

    def fetch_stores_by_user_id(
        self,
        session: Session,
        user_id: uuid.UUID,
        scope: DataScope = DataScope.service(),
    ) -> StoresResult:
        """
        Stores owned by `user_id`, newest first.

        Admin views pass the service scope so they can read any client.
        """
        try:
            stores = self.repo.list_for_user(session, user_id, scope)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error fetching stores: %s", exc)
            return StoresResult(success=False, error=str(exc))
        return StoresResult(
            success=True,
            stores=[StoreRead.model_validate(s) for s in stores],
        )
