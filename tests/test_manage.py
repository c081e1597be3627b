"""Tests for the out-of-band admin grant."""

import pytest

from conftest import bearer
from manage import set_admin


@pytest.mark.asyncio
async def test_grant_and_revoke_admin(api, register, session_factory):
    session = await register("boss@example.com")

    async with session_factory() as db:
        profile = await set_admin(db, "  BOSS@example.com ", True)
    assert profile is not None and profile.is_admin is True

    listing = await api.get("/api/applications/", headers=bearer(session))
    assert listing.status_code == 200

    async with session_factory() as db:
        await set_admin(db, "boss@example.com", False)
    listing = await api.get("/api/applications/", headers=bearer(session))
    assert listing.status_code == 403


@pytest.mark.asyncio
async def test_role_change_revokes_refresh_tokens(api, register, session_factory):
    """Refresh tokens issued before a role change must not be reused."""
    session = await register("boss@example.com")
    async with session_factory() as db:
        await set_admin(db, "boss@example.com", True)

    resp = await api.post("/api/auth/token/refresh", json={"refresh_token": session["refresh_token"]})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_unknown_email(session_factory):
    async with session_factory() as db:
        assert await set_admin(db, "nobody@example.com", True) is None
