"""Shared fixtures: in-memory SQLite backend served through httpx's ASGI transport."""

import os
import sys

ROOT = os.path.join(os.path.dirname(__file__), "..")
sys.path.insert(0, ROOT)
sys.path.insert(0, os.path.join(ROOT, "api"))

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("REDIS_URL", "")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

PASSWORD = "secret123"


@pytest_asyncio.fixture
async def session_factory():
    from db.database import Base
    import models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def app(session_factory):
    from db.database import get_db
    from main import app as fastapi_app

    async def _get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = _get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api(app):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def register(api):
    """Sign up an identity and return the session body."""
    async def _register(email: str, password: str = PASSWORD) -> dict:
        resp = await api.post("/api/auth/signup", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _register


@pytest.fixture
def make_admin(session_factory):
    """Grant the administrator flag out-of-band, as the manage command does."""
    from manage import set_admin

    async def _make_admin(email: str):
        async with session_factory() as db:
            return await set_admin(db, email, True)
    return _make_admin


def bearer(session: dict) -> dict:
    return {"Authorization": f"Bearer {session['access_token']}"}


@pytest.fixture
def auth_headers():
    return bearer


@pytest.fixture
def draft_payload():
    return {
        "first_name": "Ana",
        "last_name": "Krasniqi",
        "phone_number": "+355691234567",
        "age": 24,
        "gender": "female",
        "vehicle_type": "scooter",
        "working_hours": "Mon-Fri 9-17",
    }


def client_application(**overrides):
    """A client-side Application as the backend would return it."""
    from client.models import Application

    record = {
        "id": "7d3f0a52-9c1e-4b7a-8f4e-2a6b1c9d0e11",
        "user_id": "1b2c3d4e-5f60-4a7b-8c9d-0e1f2a3b4c5d",
        "first_name": "Ana",
        "last_name": "Krasniqi",
        "phone_number": "+355691234567",
        "age": 24,
        "gender": "female",
        "vehicle_type": "scooter",
        "working_hours": "Mon-Fri 9-17",
        "status": "pending",
        "admin_notes": None,
        "approved_by": None,
        "applied_at": "2026-03-01T09:00:00",
        "updated_at": "2026-03-01T09:00:00",
    }
    record.update(overrides)
    return Application.model_validate(record)


class RecordingNotifier:
    """Notifier that keeps (title, message, severity) tuples."""

    def __init__(self):
        self.calls = []

    def notify(self, title, message, severity="info"):
        self.calls.append((title, message, severity))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def translate():
    from client.i18n import Translator
    return Translator("en")
