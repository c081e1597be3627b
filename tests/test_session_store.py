"""Tests for the client session store against the real auth endpoints."""

import json

import pytest
import pytest_asyncio

from client.errors import AuthError
from client.session import ANONYMOUS, SessionContext, SessionFile, SessionStore
from conftest import PASSWORD


@pytest.fixture
def session_file(tmp_path):
    return SessionFile(tmp_path / "session.json")


@pytest_asyncio.fixture
async def store(api, session_file):
    return SessionStore(api, storage=session_file)


@pytest.mark.asyncio
async def test_sign_up_sets_identity_and_persists(store, session_file):
    context = await store.sign_up("ana@example.com", PASSWORD)
    assert store.current is context
    assert store.identity.email == "ana@example.com"
    assert store.is_admin is False

    saved = json.loads(session_file.path.read_text())
    assert saved["user"]["email"] == "ana@example.com"
    assert saved["refresh_token"] == context.refresh_token


def test_session_file_is_owner_only(session_file):
    session_file.path.write_text("{}")
    session_file.path.chmod(0o644)
    session_file.save({"refresh_token": "r"})
    assert session_file.path.stat().st_mode & 0o777 == 0o600
    assert session_file.load() == {"refresh_token": "r"}


@pytest.mark.asyncio
async def test_sign_up_errors_are_auth_errors(store):
    with pytest.raises(AuthError, match="at least 6 characters"):
        await store.sign_up("ana@example.com", "abc")

    await store.sign_up("ana@example.com", PASSWORD)
    with pytest.raises(AuthError, match="already registered"):
        await store.sign_up("ana@example.com", PASSWORD)


@pytest.mark.asyncio
async def test_sign_in_bad_credentials(store, register):
    await register("ana@example.com")
    with pytest.raises(AuthError) as exc:
        await store.sign_in("ana@example.com", "wrong-password")
    assert exc.value.message == "Invalid login credentials"
    assert store.current is ANONYMOUS


@pytest.mark.asyncio
async def test_listeners_see_every_change_until_disposed(store, register):
    await register("ana@example.com")
    seen = []
    dispose = store.subscribe(seen.append)

    await store.sign_in("ana@example.com", PASSWORD)
    await store.sign_out()
    dispose()
    await store.sign_in("ana@example.com", PASSWORD)

    assert [c.identity.email if c.identity else None for c in seen] == ["ana@example.com", None]


@pytest.mark.asyncio
async def test_sign_out_clears_session_and_file(store, session_file):
    await store.sign_up("ana@example.com", PASSWORD)
    await store.sign_out()
    assert store.current is ANONYMOUS
    assert not session_file.path.exists()


@pytest.mark.asyncio
async def test_restore_from_file(api, store, session_file):
    """A second store on the same file picks up the persisted session."""
    await store.sign_up("ana@example.com", PASSWORD)

    restored = SessionStore(api, storage=session_file)
    context = await restored.restore()
    assert context.identity == store.identity
    headers = await restored.authorization()
    resp = await api.get("/api/auth/session", headers=headers)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_restore_ignores_corrupt_file(api, session_file):
    session_file.path.write_text("{not json")
    restored = SessionStore(api, storage=session_file)
    assert (await restored.restore()) is ANONYMOUS


@pytest.mark.asyncio
async def test_authorization_refreshes_expiring_token(api, session_file):
    """With a refresh margin larger than the TTL every call rotates the token."""
    eager = SessionStore(api, storage=session_file, refresh_margin_sec=10**9)
    first = await eager.sign_up("ana@example.com", PASSWORD)
    headers = await eager.authorization()
    assert headers["Authorization"] != f"Bearer {first.access_token}"
    assert eager.current.refresh_token != first.refresh_token


@pytest.mark.asyncio
async def test_revoked_refresh_signs_out(api, session_file):
    eager = SessionStore(api, storage=session_file, refresh_margin_sec=10**9)
    first = await eager.sign_up("ana@example.com", PASSWORD)
    # Revoke server-side without touching the local store
    await api.post("/api/auth/signout", headers={"Authorization": f"Bearer {first.access_token}"})

    with pytest.raises(AuthError):
        await eager.authorization()
    assert eager.current is ANONYMOUS


@pytest.mark.asyncio
async def test_authorization_requires_sign_in(store):
    with pytest.raises(AuthError, match="Not signed in"):
        await store.authorization()


def test_context_roundtrip_through_dict():
    context = SessionContext.from_session_payload(
        {
            "access_token": "a",
            "refresh_token": "r",
            "expires_in": 3600,
            "user": {"id": "6f1c2d3e-0000-4000-8000-000000000001", "email": "x@y.z", "is_admin": True},
        },
        now=1000.0,
    )
    assert context.expires_at == 4600.0
    assert context.is_admin is True
    assert SessionContext.from_dict(context.to_dict()) == context
