"""
Shared fixtures.

Settings come from the environment, so it is populated before anything
from `storecast` is imported. The database is a throwaway SQLite file
rebuilt for every test.
"""

import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

TEST_DB = Path(tempfile.mkdtemp(prefix="storecast-tests-")) / "test.db"
JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"

os.environ.update(
    {
        "SUPABASE_URL": "https://example.supabase.co",
        "SUPABASE_KEY": "anon-key",
        "SUPABASE_SERVICE_ROLE_KEY": "service-role-key",
        "SUPABASE_JWT_SECRET": JWT_SECRET,
        "DATABASE_URL": f"sqlite:///{TEST_DB}",
        "SITE_URL": "https://cms.example.com",
        "STORAGE_BUCKET": "content",
    }
)

from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from storecast.core.config import get_settings  # noqa: E402
from storecast.database import get_engine  # noqa: E402
from storecast.models.content import Content  # noqa: E402
from storecast.models.profile import Profile  # noqa: E402
from storecast.models.store import Store  # noqa: E402

get_settings.cache_clear()

STORAGE_PREFIX = "https://example.supabase.co/storage/v1/object/public/content/"


@pytest.fixture(autouse=True)
def fresh_db():
    engine = get_engine()
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    with Session(get_engine()) as s:
        yield s


@pytest.fixture
def client():
    from storecast.main import app

    return TestClient(app)


@pytest.fixture
def mint_token():
    """Build a Supabase-style access token signed with the test secret."""

    def _mint(
        user_id: uuid.UUID,
        email: str = "user@example.com",
        role_claim: str | None = None,
        expires_in: int = 3600,
        secret: str = JWT_SECRET,
    ) -> str:
        metadata = {"role": role_claim} if role_claim else {}
        payload = {
            "sub": str(user_id),
            "email": email,
            "aud": "authenticated",
            "user_metadata": metadata,
            "app_metadata": metadata,
            "exp": int((datetime.now(timezone.utc) + timedelta(seconds=expires_in)).timestamp()),
        }
        return jwt.encode(payload, secret, algorithm="HS256")

    return _mint


@pytest.fixture
def make_profile(session):
    def _make(
        email: str = "client@example.com",
        role: str = "client",
        created_at: datetime | None = None,
    ) -> Profile:
        profile = Profile(
            id=uuid.uuid4(),
            email=email,
            role=role,
            created_at=created_at or datetime.now(timezone.utc),
        )
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile

    return _make


@pytest.fixture
def make_store(session):
    def _make(
        owner: Profile,
        name: str = "Main Street",
        brand_company: str = "Acme",
        address: str = "Berlin, Alexanderplatz 1",
    ) -> Store:
        store = Store(user_id=owner.id, name=name, brand_company=brand_company, address=address)
        session.add(store)
        session.commit()
        session.refresh(store)
        return store

    return _make


@pytest.fixture
def make_content(session):
    def _make(
        store: Store,
        title: str = "Spring promo",
        type: str = "image",
        start: datetime | None = None,
        end: datetime | None = None,
        created_at: datetime | None = None,
        file_size: int = 1024,
    ) -> Content:
        now = datetime.now(timezone.utc)
        content = Content(
            store_id=store.id,
            user_id=store.user_id,
            title=title,
            type=type,
            file_url=f"{STORAGE_PREFIX}content/{uuid.uuid4()}.png",
            file_size=file_size,
            start_date=start or now - timedelta(days=1),
            end_date=end or now + timedelta(days=1),
            created_at=created_at or now,
        )
        session.add(content)
        session.commit()
        session.refresh(content)
        return content

    return _make


@pytest.fixture
def auth_headers(mint_token):
    def _headers(profile: Profile) -> dict[str, str]:
        token = mint_token(profile.id, profile.email)
        return {"Authorization": f"Bearer {token}"}

    return _headers
