# storecast/services/admin_service.py
import logging
import uuid
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from storecast.core.timeutils import parse_instant, utcnow
from storecast.models.content import Content
from storecast.models.profile import Profile
from storecast.models.store import Store
from storecast.repositories.content_repo import ContentRepository
from storecast.repositories.profile_repo import ProfileRepository
from storecast.repositories.store_repo import StoreRepository
from storecast.schemas.admin import (
    AdminContentStats,
    AdminContentStatsResult,
    AdminDashboardData,
    AdminDashboardResult,
    ClientOverviewResult,
    ClientsResult,
    ClientStore,
    ClientSummary,
    OverviewStats,
)
from storecast.schemas.profile import ProfileRead
from storecast.services.content_status import ContentStatus, classify_status

logger = logging.getLogger(__name__)

RECENT_CLIENTS_ON_DASHBOARD = 5
RECENT_CONTENT_ON_DASHBOARD = 10
CLIENTS_IN_OVERVIEW = 6
ACTIVITY_WINDOW = timedelta(days=7)


def _group_stores(stores: Iterable[Store]) -> dict[uuid.UUID, list[ClientStore]]:
    by_client: dict[uuid.UUID, list[ClientStore]] = defaultdict(list)
    for store in stores:
        by_client[store.user_id].append(
            ClientStore(
                id=store.id,
                name=store.name,
                brand_company=store.brand_company,
                address=store.address,
            )
        )
    return by_client


def _group_content(rows: Iterable[Content]) -> dict[uuid.UUID, list[Content]]:
    by_client: dict[uuid.UUID, list[Content]] = defaultdict(list)
    for row in rows:
        by_client[row.user_id].append(row)
    return by_client


def _latest_upload(rows: Sequence[Content]) -> datetime | None:
    stamps = [parse_instant(r.created_at) for r in rows]
    stamps = [s for s in stamps if s is not None]
    return max(stamps) if stamps else None


def _created_since(row: Content, since: datetime) -> bool:
    created = parse_instant(row.created_at)
    return created is not None and created >= since


class AdminService:
    """
    Aggregated read models for the admin area.

    Aggregation happens in memory over a handful of bulk queries
    (profiles, stores, content) rather than one query per client.
    """

    def __init__(
        self,
        profile_repo: ProfileRepository,
        store_repo: StoreRepository,
        content_repo: ContentRepository,
    ):
        self.profile_repo = profile_repo
        self.store_repo = store_repo
        self.content_repo = content_repo

    def fetch_admin_dashboard_data(self, session: Session) -> AdminDashboardResult:
        try:
            clients = self.profile_repo.list_by_role(session, "client")
            total_stores = self.store_repo.count(session)
            total_content = self.content_repo.count(session)
            recent_content = self.content_repo.list_all(
                session, limit=RECENT_CONTENT_ON_DASHBOARD
            )
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Unexpected error fetching admin dashboard data: %s", exc)
            return AdminDashboardResult(success=False, error=str(exc))

        return AdminDashboardResult(
            success=True,
            data=AdminDashboardData(
                total_clients=len(clients),
                total_stores=total_stores,
                total_content=total_content,
                recent_clients=[
                    ProfileRead.model_validate(p)
                    for p in clients[:RECENT_CLIENTS_ON_DASHBOARD]
                ],
                recent_content=recent_content,
            ),
        )

    def fetch_admin_content_stats(
        self,
        session: Session,
        now: datetime | None = None,
    ) -> AdminContentStatsResult:
        try:
            rows = self.content_repo.list_raw(session)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error fetching admin content stats: %s", exc)
            return AdminContentStatsResult(success=False, error=str(exc))

        now = now or utcnow()
        statuses = Counter(classify_status(r.start_date, r.end_date, now) for r in rows)
        return AdminContentStatsResult(
            success=True,
            stats=AdminContentStats(
                total_content=len(rows),
                active_content=statuses[ContentStatus.ACTIVE],
                scheduled_content=statuses[ContentStatus.SCHEDULED],
                archived_content=statuses[ContentStatus.ARCHIVED],
                content_by_type=dict(Counter(r.type for r in rows)),
            ),
        )

    def get_all_clients(self, session: Session) -> ClientsResult:
        """Every client with their stores, upload count and latest upload."""
        try:
            profiles = self.profile_repo.list_by_role(session, "client")
            if not profiles:
                return ClientsResult(success=True, clients=[])
            ids = [p.id for p in profiles]
            stores = self.store_repo.list_for_users(session, ids)
            content = self.content_repo.list_raw(session, ids)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error fetching all clients: %s", exc)
            return ClientsResult(success=False, clients=[], error=str(exc))

        stores_by_client = _group_stores(stores)
        content_by_client = _group_content(content)
        clients = [
            ClientSummary(
                id=p.id,
                email=p.email,
                role=p.role,
                created_at=p.created_at,
                stores=stores_by_client.get(p.id, []),
                content_count=len(content_by_client.get(p.id, [])),
                latest_upload=_latest_upload(content_by_client.get(p.id, [])),
            )
            for p in profiles
        ]
        return ClientsResult(success=True, clients=clients)

    def get_client_overview(
        self,
        session: Session,
        now: datetime | None = None,
    ) -> ClientOverviewResult:
        """
        Most recent clients plus platform-wide activity stats.

        Active clients = distinct uploaders during the last seven days.
        """
        now = now or utcnow()
        try:
            recent: list[Profile] = self.profile_repo.list_by_role(
                session, "client", limit=CLIENTS_IN_OVERVIEW
            )
            all_clients = self.profile_repo.list_by_role(session, "client")
            all_content = self.content_repo.list_raw(session)
            recent_ids = [p.id for p in recent]
            stores = self.store_repo.list_for_users(session, recent_ids)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error fetching client overview: %s", exc)
            return ClientOverviewResult(success=False, error=str(exc))

        stores_by_client = _group_stores(stores)
        content_by_client = _group_content(all_content)

        clients: list[ClientSummary] = []
        for profile in recent:
            items = content_by_client.get(profile.id, [])
            clients.append(
                ClientSummary(
                    id=profile.id,
                    email=profile.email,
                    role=profile.role,
                    created_at=profile.created_at,
                    stores=stores_by_client.get(profile.id, []),
                    content_count=len(items),
                    latest_upload=_latest_upload(items),
                    active_campaigns=sum(
                        1
                        for i in items
                        if classify_status(i.start_date, i.end_date, now) is ContentStatus.ACTIVE
                    ),
                )
            )

        since = now - ACTIVITY_WINDOW
        recent_uploads = [c for c in all_content if _created_since(c, since)]
        stats = OverviewStats(
            total_clients=len(all_clients),
            active_clients=len({c.user_id for c in recent_uploads}),
            total_uploads=len(all_content),
            recent_activity=len(recent_uploads),
        )
        return ClientOverviewResult(success=True, clients=clients, stats=stats)
