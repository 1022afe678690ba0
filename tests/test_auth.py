"""
Tests for token verification and current-user resolution.
"""

import uuid
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from storecast.core.auth import RequestContext, read_identity, resolve_current_user
from storecast.models.profile import Profile


def test_read_identity_rejects_missing_invalid_and_expired_tokens(mint_token):
    user_id = uuid.uuid4()
    assert read_identity(None) is None
    assert read_identity("not-a-jwt") is None
    assert read_identity(mint_token(user_id, expires_in=-60)) is None
    assert read_identity(mint_token(user_id, secret="some-other-secret")) is None


def test_read_identity_reads_claims(mint_token):
    user_id = uuid.uuid4()
    identity = read_identity(mint_token(user_id, "a@example.com", role_claim="admin"))
    assert identity.id == user_id
    assert identity.email == "a@example.com"
    assert identity.admin_intent is True


def test_no_session_resolves_to_none(session):
    assert resolve_current_user(RequestContext(session=session)) is None


def test_existing_profile_role_wins_over_claims(session, make_profile, mint_token):
    profile = make_profile(email="c@example.com", role="client")
    identity = read_identity(mint_token(profile.id, profile.email, role_claim="admin"))

    user = resolve_current_user(RequestContext(session=session, identity=identity))

    assert user.role == "client"
    assert user.is_admin is False


def test_missing_profile_is_provisioned_as_client(session, mint_token):
    user_id = uuid.uuid4()
    identity = read_identity(mint_token(user_id, "new@example.com"))

    user = resolve_current_user(RequestContext(session=session, identity=identity))

    assert user.role == "client"
    stored = session.get(Profile, user_id)
    assert stored is not None
    assert stored.email == "new@example.com"


def test_missing_profile_with_admin_claim_is_provisioned_as_admin(session, mint_token):
    user_id = uuid.uuid4()
    identity = read_identity(mint_token(user_id, "boss@example.com", role_claim="admin"))

    user = resolve_current_user(RequestContext(session=session, identity=identity))

    assert user.is_admin is True
    assert session.get(Profile, user_id).role == "admin"


@pytest.mark.parametrize("role_claim", [None, "admin"])
def test_resolving_twice_after_provisioning_gives_same_role(session, mint_token, role_claim):
    user_id = uuid.uuid4()
    identity = read_identity(mint_token(user_id, "twice@example.com", role_claim=role_claim))
    context = RequestContext(session=session, identity=identity)

    first = resolve_current_user(context)
    second = resolve_current_user(context)

    assert first.role == second.role
    assert len(session.exec(select(Profile).where(Profile.id == user_id)).all()) == 1


def test_resolving_twice_keeps_profile_role_over_claim(session, make_profile, mint_token):
    profile = make_profile(email="c2@example.com", role="client")
    identity = read_identity(mint_token(profile.id, profile.email, role_claim="admin"))
    context = RequestContext(session=session, identity=identity)

    first = resolve_current_user(context)
    second = resolve_current_user(context)

    assert first.role == second.role == "client"


def test_fetch_failure_falls_back_to_provisioning(session, mint_token):
    user_id = uuid.uuid4()
    identity = read_identity(mint_token(user_id, "x@example.com"))

    with patch(
        "storecast.core.auth.profile_repo.get_by_id",
        side_effect=OperationalError("select", {}, Exception("db down")),
    ):
        user = resolve_current_user(RequestContext(session=session, identity=identity))

    assert user.role == "client"
    assert user.id == user_id


def test_provisioning_failure_still_returns_a_profile(session, mint_token):
    user_id = uuid.uuid4()
    identity = read_identity(mint_token(user_id, "y@example.com", role_claim="admin"))

    with patch(
        "storecast.core.auth.profile_repo.create",
        side_effect=OperationalError("insert", {}, Exception("db down")),
    ):
        user = resolve_current_user(RequestContext(session=session, identity=identity))

    assert user.role == "admin"
    assert user.profile.email == "y@example.com"
    assert session.get(Profile, user_id) is None


def test_api_requires_authentication(client):
    response = client.get("/api/profile/role")
    assert response.status_code == 401


def test_api_accepts_session_cookie(client, make_profile, mint_token):
    profile = make_profile(email="cookie@example.com")
    client.cookies.set("sb-access-token", mint_token(profile.id, profile.email))

    response = client.get("/api/profile/role")

    assert response.status_code == 200
    assert response.json() == {"success": True, "role": "client"}
