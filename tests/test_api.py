"""
JSON API routes under /api plus the OAuth callback.
"""

import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from storecast.core.config import get_settings
from storecast.models.profile import Profile


@pytest.fixture
def storage(monkeypatch):
    uploaded = []

    def fake_upload(path, data, content_type=None):
        uploaded.append(path)
        return f"https://example.supabase.co/storage/v1/object/public/content/{path}"

    monkeypatch.setattr("storecast.services.content_service.upload_to_storage", fake_upload)
    monkeypatch.setattr("storecast.services.content_service.delete_public_url", lambda url: None)
    return uploaded


# -------- Stores --------


def test_client_registers_and_lists_stores(client, make_profile, auth_headers):
    me = make_profile()
    headers = auth_headers(me)

    created = client.post(
        "/api/stores",
        json={"name": " Corner ", "brand_company": "Acme", "address": "Berlin, Street 1"},
        headers=headers,
    )
    assert created.status_code == 201
    assert created.json()["stores"][0]["name"] == "Corner"

    listed = client.get("/api/stores", headers=headers).json()
    assert [s["name"] for s in listed["stores"]] == ["Corner"]


def test_store_validation_and_roles(client, make_profile, auth_headers):
    me = make_profile()
    admin = make_profile(email="admin@example.com", role="admin")

    blank = client.post(
        "/api/stores",
        json={"name": "  ", "brand_company": "Acme", "address": "x"},
        headers=auth_headers(me),
    )
    assert blank.status_code == 422

    as_admin = client.post(
        "/api/stores",
        json={"name": "A", "brand_company": "B", "address": "C"},
        headers=auth_headers(admin),
    )
    assert as_admin.status_code == 403

    peek = client.get(f"/api/stores?user_id={admin.id}", headers=auth_headers(me))
    assert peek.status_code == 403

    as_admin_list = client.get(f"/api/stores?user_id={me.id}", headers=auth_headers(admin))
    assert as_admin_list.json() == {"success": True, "stores": []}


# -------- Content --------


def upload_form(store_id, **extra):
    data = {
        "store_id": str(store_id),
        "start_date": "2024-06-01T00:00:00Z",
        "end_date": "2024-06-30T00:00:00Z",
    }
    data.update(extra)
    return data


def test_upload_content(client, storage, make_profile, make_store, auth_headers):
    me = make_profile()
    store = make_store(me)

    response = client.post(
        "/api/content",
        data=upload_form(store.id, title="Summer"),
        files=[
            ("files", ("a.png", b"png-bytes", "image/png")),
            ("files", ("b.mp4", b"mp4-bytes", "video/mp4")),
        ],
        headers=auth_headers(me),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert {c["type"] for c in body["content"]} == {"image", "video"}
    assert {c["title"] for c in body["content"]} == {"Summer"}
    assert len(storage) == 2


def test_upload_rejects_bad_schedule(client, storage, make_profile, make_store, auth_headers):
    me = make_profile()
    store = make_store(me)

    response = client.post(
        "/api/content",
        data=upload_form(store.id, start_date="2024-07-01T00:00:00Z"),
        files=[("files", ("a.png", b"x", "image/png"))],
        headers=auth_headers(me),
    )

    assert response.status_code == 422
    assert storage == []


def test_upload_without_store_is_refused(client, storage, make_profile, auth_headers):
    me = make_profile()

    response = client.post(
        "/api/content",
        data=upload_form(uuid.uuid4()),
        files=[("files", ("a.png", b"x", "image/png"))],
        headers=auth_headers(me),
    )

    assert response.json()["success"] is False
    assert storage == []


def test_content_listing_and_stats(client, make_profile, make_store, make_content, auth_headers):
    me = make_profile()
    make_content(make_store(me), title="mine")
    make_content(make_store(make_profile(email="x@example.com")), title="theirs")

    listed = client.get("/api/content", headers=auth_headers(me)).json()
    assert [c["title"] for c in listed["content"]] == ["mine"]

    stats = client.get("/api/content/stats", headers=auth_headers(me)).json()
    assert stats["stats"]["total"] == 1

    assert client.get("/api/content/all", headers=auth_headers(me)).status_code == 403


def test_delete_content_permissions(client, storage, make_profile, make_store, make_content, auth_headers):
    owner = make_profile(email="owner@example.com")
    stranger = make_profile(email="stranger@example.com")
    admin = make_profile(email="admin@example.com", role="admin")
    first = make_content(make_store(owner), title="first")
    second = make_content(make_store(owner), title="second")
    first_id, second_id = first.id, second.id

    assert client.delete(f"/api/content/{first_id}", headers=auth_headers(stranger)).status_code == 404

    by_owner = client.delete(f"/api/content/{first_id}", headers=auth_headers(owner))
    assert by_owner.json() == {"success": True, "message": "Content deleted"}

    by_admin = client.delete(f"/api/content/{second_id}", headers=auth_headers(admin))
    assert by_admin.json()["success"] is True


# -------- Profile / user management --------


@pytest.fixture
def supabase_mock(monkeypatch):
    mock = MagicMock()
    monkeypatch.setattr("storecast.services.user_admin_service.supabase_admin", lambda: mock)
    monkeypatch.setattr("storecast.services.user_admin_service.supabase_public", lambda: mock)
    return mock


def test_admin_user_routes_require_admin(client, make_profile, auth_headers, supabase_mock):
    me = make_profile()
    response = client.post("/api/admin/users/sync-metadata", headers=auth_headers(me))
    assert response.status_code == 403
    supabase_mock.auth.admin.update_user_by_id.assert_not_called()


def test_admin_changes_role(client, session, make_profile, auth_headers, supabase_mock):
    admin = make_profile(email="admin@example.com", role="admin")
    customer = make_profile(email="customer@example.com")
    customer_id = customer.id

    response = client.patch(
        f"/api/admin/users/{customer_id}/role",
        json={"role": "admin"},
        headers=auth_headers(admin),
    )

    assert response.json() == {"success": True, "message": "Role updated to admin"}
    session.expire_all()
    assert session.get(Profile, customer_id).role == "admin"


def test_admin_rejects_unknown_role(client, make_profile, auth_headers, supabase_mock):
    admin = make_profile(email="admin@example.com", role="admin")
    response = client.patch(
        f"/api/admin/users/{admin.id}/role",
        json={"role": "superuser"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 422


def test_admin_invites_and_reads_clients(client, make_profile, auth_headers, supabase_mock):
    admin = make_profile(email="admin@example.com", role="admin")
    customer = make_profile(email="customer@example.com")

    invite = client.post(
        "/api/admin/users/invite",
        json={"email": "new@example.com"},
        headers=auth_headers(admin),
    )
    assert invite.json()["success"] is True

    read = client.get(f"/api/admin/users/{customer.id}", headers=auth_headers(admin)).json()
    assert read["profile"]["email"] == "customer@example.com"

    not_client = client.get(f"/api/admin/users/{admin.id}", headers=auth_headers(admin)).json()
    assert not_client == {"success": False, "error": "Client not found"}


def test_change_own_password(client, make_profile, auth_headers, supabase_mock):
    me = make_profile()

    short = client.post("/api/profile/password", json={"password": "short"}, headers=auth_headers(me))
    assert short.status_code == 422

    ok = client.post("/api/profile/password", json={"password": "long-enough"}, headers=auth_headers(me))
    assert ok.json()["success"] is True
    supabase_mock.auth.admin.update_user_by_id.assert_called_once_with(
        str(me.id), {"password": "long-enough"}
    )


# -------- Auth --------


def test_sign_in_sets_session_cookie(client, monkeypatch, make_profile, mint_token):
    me = make_profile(email="me@example.com")
    token = mint_token(me.id, me.email)
    public = MagicMock()
    public.auth.sign_in_with_password.return_value = SimpleNamespace(
        user=SimpleNamespace(id=str(me.id), email=me.email),
        session=SimpleNamespace(access_token=token),
    )
    monkeypatch.setattr("storecast.services.auth_service.supabase_public", lambda: public)

    response = client.post("/api/auth/signin", json={"email": "me@example.com", "password": "pw"})

    assert response.json()["redirect_to"] == "/dashboard"
    assert f"sb-access-token={token}" in response.headers["set-cookie"]


def test_sign_out_clears_cookie(client):
    response = client.post("/api/auth/signout", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/"
    assert "sb-access-token=" in response.headers["set-cookie"]


def test_oauth_callback_redirects(client, monkeypatch):
    public = MagicMock()
    public.auth.exchange_code_for_session.side_effect = RuntimeError("bad code")
    monkeypatch.setattr("storecast.services.auth_service.supabase_public", lambda: public)

    response = client.get("/auth/callback?code=abc&userType=admin", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/auth/admin/signin?error=oauth_error"


def test_oauth_callback_defaults_to_client(client, monkeypatch):
    public = MagicMock()
    public.auth.exchange_code_for_session.side_effect = RuntimeError("bad code")
    monkeypatch.setattr("storecast.services.auth_service.supabase_public", lambda: public)

    response = client.get("/auth/callback?code=abc&type=admin", follow_redirects=False)

    assert response.headers["location"] == "/auth/client/signin?error=oauth_error"


def test_admin_sign_up_can_be_disabled(client, monkeypatch):
    admin = MagicMock()
    monkeypatch.setattr("storecast.services.auth_service.supabase_admin", lambda: admin)
    locked = get_settings().model_copy(update={"ALLOW_ADMIN_SIGNUP": False})
    monkeypatch.setattr("storecast.routers.auth.get_settings", lambda: locked)

    response = client.post(
        "/api/auth/register",
        json={"email": "boss@example.com", "password": "password123", "role": "admin"},
    )

    assert response.status_code == 403
    admin.auth.admin.create_user.assert_not_called()
