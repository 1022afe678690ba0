from datetime import datetime, timedelta, timezone

import pytest

from storecast.repositories.content_repo import ContentRepository
from storecast.repositories.profile_repo import ProfileRepository
from storecast.repositories.store_repo import StoreRepository
from storecast.services.admin_service import AdminService


@pytest.fixture
def service():
    return AdminService(ProfileRepository(), StoreRepository(), ContentRepository())


def test_dashboard_data_counts_and_recent_lists(session, service, make_profile, make_store, make_content):
    base = datetime.now(timezone.utc) - timedelta(days=30)
    clients = [make_profile(email=f"c{i}@example.com", created_at=base + timedelta(days=i)) for i in range(7)]
    make_profile(email="admin@example.com", role="admin")
    store = make_store(clients[0])
    make_store(clients[1])
    for i in range(12):
        make_content(store, title=f"item {i}", created_at=base + timedelta(hours=i))

    result = service.fetch_admin_dashboard_data(session)

    assert result.success is True
    data = result.data
    assert (data.total_clients, data.total_stores, data.total_content) == (7, 2, 12)
    assert [p.email for p in data.recent_clients] == [f"c{i}@example.com" for i in (6, 5, 4, 3, 2)]
    assert len(data.recent_content) == 10
    assert data.recent_content[0].title == "item 11"


def test_content_stats_by_status_and_type(session, service, make_profile, make_store, make_content):
    now = datetime.now(timezone.utc)
    store = make_store(make_profile())
    make_content(store, type="image")
    make_content(store, type="video", start=now + timedelta(days=1), end=now + timedelta(days=2))
    make_content(store, type="video", start=now - timedelta(days=5), end=now - timedelta(days=4))

    result = service.fetch_admin_content_stats(session, now)

    stats = result.stats
    assert (stats.total_content, stats.active_content, stats.scheduled_content, stats.archived_content) == (3, 1, 1, 1)
    assert stats.content_by_type == {"image": 1, "video": 2}


def test_get_all_clients_aggregates_stores_and_uploads(session, service, make_profile, make_store, make_content):
    alice = make_profile(email="alice@example.com")
    make_profile(email="bob@example.com")
    store = make_store(alice, name="Alice's")
    latest = datetime(2024, 5, 1, tzinfo=timezone.utc)
    make_content(store, created_at=latest - timedelta(days=3))
    make_content(store, created_at=latest)

    result = service.get_all_clients(session)

    by_email = {c.email: c for c in result.clients}
    assert set(by_email) == {"alice@example.com", "bob@example.com"}
    assert [s.name for s in by_email["alice@example.com"].stores] == ["Alice's"]
    assert by_email["alice@example.com"].content_count == 2
    assert by_email["alice@example.com"].latest_upload.replace(tzinfo=timezone.utc) == latest
    assert by_email["bob@example.com"].content_count == 0
    assert by_email["bob@example.com"].latest_upload is None


def test_get_all_clients_with_no_clients(session, service, make_profile):
    make_profile(role="admin", email="admin@example.com")
    result = service.get_all_clients(session)
    assert result.success is True
    assert result.clients == []


def test_client_overview_activity_window(session, service, make_profile, make_store, make_content):
    now = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
    active = make_profile(email="active@example.com", created_at=now - timedelta(days=1))
    idle = make_profile(email="idle@example.com", created_at=now - timedelta(days=2))
    for i in range(6):
        make_profile(email=f"old{i}@example.com", created_at=now - timedelta(days=100 + i))

    make_content(make_store(active), created_at=now - timedelta(days=2), start=now - timedelta(days=1), end=now + timedelta(days=1))
    make_content(make_store(idle), created_at=now - timedelta(days=30), start=now - timedelta(days=20), end=now - timedelta(days=10))

    result = service.get_client_overview(session, now)

    assert result.success is True
    assert len(result.clients) == 6
    assert [c.email for c in result.clients[:2]] == ["active@example.com", "idle@example.com"]
    assert result.clients[0].active_campaigns == 1
    assert result.clients[1].active_campaigns == 0
    assert result.stats.total_clients == 8
    assert result.stats.active_clients == 1
    assert result.stats.total_uploads == 2
    assert result.stats.recent_activity == 1
