import uuid
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from storecast.models.profile import Profile
from storecast.repositories.profile_repo import ProfileRepository
from storecast.services.auth_service import AuthService


@pytest.fixture
def admin_client(monkeypatch):
    mock = MagicMock()
    monkeypatch.setattr("storecast.services.auth_service.supabase_admin", lambda: mock)
    return mock


@pytest.fixture
def public_client(monkeypatch):
    mock = MagicMock()
    monkeypatch.setattr("storecast.services.auth_service.supabase_public", lambda: mock)
    return mock


@pytest.fixture
def service():
    return AuthService(ProfileRepository())


def auth_response(user_id, email, token=None):
    return SimpleNamespace(
        user=SimpleNamespace(id=str(user_id), email=email),
        session=SimpleNamespace(access_token=token) if token else None,
    )


def test_register_creates_auth_user_and_profile(session, service, admin_client):
    user_id = uuid.uuid4()
    admin_client.auth.admin.create_user.return_value = auth_response(user_id, "new@example.com")

    result = service.register_user(session, "new@example.com", "password123", "admin")

    assert result.success is True
    assert result.user_id == user_id
    attributes = admin_client.auth.admin.create_user.call_args.args[0]
    assert attributes["email_confirm"] is True
    assert attributes["app_metadata"] == {"role": "admin"}
    assert session.get(Profile, user_id).role == "admin"


def test_register_auth_failure(session, service, admin_client):
    admin_client.auth.admin.create_user.side_effect = RuntimeError("already registered")

    result = service.register_user(session, "dup@example.com", "password123")

    assert result.success is False
    assert result.error == "already registered"


def test_sign_in_returns_token_and_role_redirect(session, service, public_client, make_profile, mint_token):
    admin = make_profile(email="admin@example.com", role="admin")
    token = mint_token(admin.id, admin.email)
    public_client.auth.sign_in_with_password.return_value = auth_response(admin.id, admin.email, token)

    result = service.sign_in(session, admin.email, "secret")

    assert result.success is True
    assert result.access_token == token
    assert result.redirect_to == "/admin"


def test_sign_in_failure(session, service, public_client):
    public_client.auth.sign_in_with_password.side_effect = RuntimeError("Invalid login credentials")

    result = service.sign_in(session, "x@example.com", "wrong")

    assert result.success is False
    assert result.error == "Invalid login credentials"


def test_oauth_callback_creates_profile_with_requested_type(session, service, public_client, admin_client, mint_token):
    user_id = uuid.uuid4()
    token = mint_token(user_id, "oauth@example.com")
    public_client.auth.exchange_code_for_session.return_value = auth_response(user_id, "oauth@example.com", token)

    outcome = service.handle_oauth_callback(session, "the-code", "client")

    assert outcome.redirect_to == "/dashboard"
    assert outcome.access_token == token
    public_client.auth.exchange_code_for_session.assert_called_once_with({"auth_code": "the-code"})
    assert session.get(Profile, user_id).role == "client"
    admin_client.auth.admin.update_user_by_id.assert_called_once_with(
        str(user_id), {"app_metadata": {"role": "client"}}
    )


def test_oauth_callback_keeps_existing_role(session, service, public_client, admin_client, make_profile):
    admin = make_profile(email="admin@example.com", role="admin")
    public_client.auth.exchange_code_for_session.return_value = auth_response(admin.id, admin.email, "tok")

    outcome = service.handle_oauth_callback(session, "code", "client")

    assert outcome.redirect_to == "/admin"


def test_oauth_metadata_failure_does_not_block(session, service, public_client, admin_client):
    user_id = uuid.uuid4()
    public_client.auth.exchange_code_for_session.return_value = auth_response(user_id, "o@example.com", "tok")
    admin_client.auth.admin.update_user_by_id.side_effect = RuntimeError("auth down")

    outcome = service.handle_oauth_callback(session, "code", "admin")

    assert outcome.redirect_to == "/admin"


@pytest.mark.parametrize("code, user_type, expected", [
    (None, "client", "/auth/client/signin?error=oauth_error"),
    ("", "admin", "/auth/admin/signin?error=oauth_error"),
])
def test_oauth_callback_without_code(session, service, code, user_type, expected):
    assert service.handle_oauth_callback(session, code, user_type).redirect_to == expected


def test_oauth_exchange_failure(session, service, public_client):
    public_client.auth.exchange_code_for_session.side_effect = RuntimeError("bad code")
    outcome = service.handle_oauth_callback(session, "code", "admin")
    assert outcome.redirect_to == "/auth/admin/signin?error=oauth_error"
    assert outcome.access_token is None
