"""Tests for the auth endpoints."""

import pytest

from conftest import PASSWORD, bearer


@pytest.mark.asyncio
async def test_signup_returns_session(api):
    """Sign-up should create a non-admin identity and return a token pair."""
    resp = await api.post("/api/auth/signup", json={"email": "Ana@Example.com", "password": PASSWORD})
    assert resp.status_code == 201
    body = resp.json()
    assert body["user"]["email"] == "ana@example.com"
    assert body["user"]["is_admin"] is False
    assert body["access_token"] and body["refresh_token"]
    assert body["expires_in"] > 0


@pytest.mark.asyncio
async def test_signup_duplicate_email(api, register):
    """Registering the same email twice should fail with a readable message."""
    await register("ana@example.com")
    resp = await api.post("/api/auth/signup", json={"email": "ana@example.com", "password": PASSWORD})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "User already registered"


@pytest.mark.asyncio
async def test_signup_short_password(api):
    """Passwords under six characters should be refused."""
    resp = await api.post("/api/auth/signup", json={"email": "ana@example.com", "password": "abc"})
    assert resp.status_code == 400
    assert "at least 6 characters" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_signup_invalid_email(api):
    resp = await api.post("/api/auth/signup", json={"email": "not-an-email", "password": PASSWORD})
    assert resp.status_code == 400
    assert "email" in resp.json()["detail"].lower()


@pytest.mark.asyncio
async def test_signin_success_and_failure(api, register):
    """Correct password signs in; a wrong one gets the generic credentials error."""
    await register("ana@example.com")

    ok = await api.post("/api/auth/signin", json={"email": "ana@example.com", "password": PASSWORD})
    assert ok.status_code == 200
    assert ok.json()["user"]["email"] == "ana@example.com"

    bad = await api.post("/api/auth/signin", json={"email": "ana@example.com", "password": "wrong-one"})
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Invalid login credentials"

    unknown = await api.post("/api/auth/signin", json={"email": "nobody@example.com", "password": PASSWORD})
    assert unknown.status_code == 400


@pytest.mark.asyncio
async def test_session_endpoint(api, register):
    session = await register("ana@example.com")
    resp = await api.get("/api/auth/session", headers=bearer(session))
    assert resp.status_code == 200
    assert resp.json()["id"] == session["user"]["id"]

    anonymous = await api.get("/api/auth/session")
    assert anonymous.status_code == 401


@pytest.mark.asyncio
async def test_refresh_rotates_tokens(api, register):
    """A refresh token should yield a new, usable access token."""
    session = await register("ana@example.com")
    resp = await api.post("/api/auth/token/refresh", json={"refresh_token": session["refresh_token"]})
    assert resp.status_code == 200
    refreshed = resp.json()
    assert refreshed["access_token"] != session["access_token"]

    check = await api.get("/api/auth/session", headers=bearer(refreshed))
    assert check.status_code == 200


@pytest.mark.asyncio
async def test_access_token_not_accepted_as_refresh(api, register):
    session = await register("ana@example.com")
    resp = await api.post("/api/auth/token/refresh", json={"refresh_token": session["access_token"]})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_signout_revokes_refresh_tokens(api, register):
    """After sign-out the old refresh token must no longer work."""
    session = await register("ana@example.com")
    out = await api.post("/api/auth/signout", headers=bearer(session))
    assert out.status_code == 204

    resp = await api.post("/api/auth/token/refresh", json={"refresh_token": session["refresh_token"]})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Refresh token revoked"
