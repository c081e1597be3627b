"""
Session Store — the current authenticated identity, kept as an immutable
SessionContext that is replaced (never mutated) on every auth event.

Views receive the store and read ``store.current``; listeners registered with
``subscribe()`` are called with the new context right after each change.
The context is persisted to SESSION_FILE so that a restarted process can
pick it up again with ``restore()``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import httpx

from client.config import settings
from client.errors import AuthError
from client.backend import error_detail

logger = logging.getLogger(__name__)

SessionListener = Callable[["SessionContext"], None]


@dataclass(frozen=True)
class Identity:
    id: uuid.UUID
    email: str
    is_admin: bool = False


@dataclass(frozen=True)
class SessionContext:
    identity: Identity | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: float = 0.0

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def is_admin(self) -> bool:
        return self.identity is not None and self.identity.is_admin

    def expires_within(self, seconds: float) -> bool:
        return self.expires_at - time.time() <= seconds

    def to_dict(self) -> dict:
        return {
            "user": {
                "id": str(self.identity.id),
                "email": self.identity.email,
                "is_admin": self.identity.is_admin,
            },
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_session_payload(cls, payload: dict, now: float | None = None) -> SessionContext:
        """Build a context from a backend SessionResponse body."""
        now = time.time() if now is None else now
        user = payload["user"]
        return cls(
            identity=Identity(id=uuid.UUID(user["id"]), email=user["email"], is_admin=user["is_admin"]),
            access_token=payload["access_token"],
            refresh_token=payload["refresh_token"],
            expires_at=now + payload["expires_in"],
        )

    @classmethod
    def from_dict(cls, data: dict) -> SessionContext:
        user = data["user"]
        return cls(
            identity=Identity(id=uuid.UUID(user["id"]), email=user["email"], is_admin=user["is_admin"]),
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            expires_at=float(data["expires_at"]),
        )


ANONYMOUS = SessionContext()


class SessionFile:
    """JSON file holding the persisted session."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> dict | None:
        try:
            return json.loads(self.path.read_text())
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return None

    def save(self, data: dict) -> None:
        """Write the session readable by the owner only; it holds the refresh token."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(json.dumps(data))
        # O_CREAT mode does not apply to a file that already existed
        os.chmod(self.path, 0o600)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class SessionStore:
    def __init__(
        self,
        http: httpx.AsyncClient,
        storage: SessionFile | None = None,
        refresh_margin_sec: int = settings.TOKEN_REFRESH_MARGIN_SEC,
    ):
        self._http = http
        self._storage = storage or SessionFile(settings.SESSION_FILE)
        self._refresh_margin = refresh_margin_sec
        self._context = ANONYMOUS
        self._listeners: list[SessionListener] = []
        self._refresh_lock = asyncio.Lock()

    # ── State ──────────────────────────────────────────────

    @property
    def current(self) -> SessionContext:
        return self._context

    @property
    def identity(self) -> Identity | None:
        return self._context.identity

    @property
    def is_admin(self) -> bool:
        return self._context.is_admin

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register listener for identity changes; returns its disposer."""
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    def _set(self, context: SessionContext) -> None:
        previous = self._context
        self._context = context
        if context.is_authenticated:
            self._storage.save(context.to_dict())
        else:
            self._storage.clear()
        if previous.identity != context.identity:
            logger.info(
                "Session identity changed: %s -> %s",
                previous.identity.email if previous.identity else None,
                context.identity.email if context.identity else None,
            )
        for listener in list(self._listeners):
            listener(context)

    # ── Auth verbs ─────────────────────────────────────────

    async def _post_credentials(self, endpoint: str, email: str, secret: str) -> SessionContext:
        try:
            resp = await self._http.post(endpoint, json={"email": email, "password": secret})
        except httpx.HTTPError as e:
            logger.error("Auth request failed: %s %s", endpoint, e)
            raise AuthError(f"Unable to reach the server: {e}") from e

        if resp.status_code not in (200, 201):
            raise AuthError(error_detail(resp))
        return SessionContext.from_session_payload(resp.json())

    async def sign_in(self, email: str, secret: str) -> SessionContext:
        context = await self._post_credentials("/api/auth/signin", email, secret)
        self._set(context)
        return context

    async def sign_up(self, email: str, secret: str) -> SessionContext:
        context = await self._post_credentials("/api/auth/signup", email, secret)
        self._set(context)
        return context

    async def sign_out(self) -> None:
        """Revoke the session server-side (best effort) and forget it locally."""
        context = self._context
        if context.access_token:
            try:
                resp = await self._http.post(
                    "/api/auth/signout",
                    headers={"Authorization": f"Bearer {context.access_token}"},
                )
                if resp.status_code != 204:
                    logger.warning("Server sign-out returned %s: %s", resp.status_code, error_detail(resp))
            except httpx.HTTPError as e:
                logger.warning("Server sign-out failed, clearing local session anyway: %s", e)
        self._set(ANONYMOUS)

    async def refresh(self) -> SessionContext:
        """Rotate the token pair using the refresh token."""
        context = self._context
        if not context.refresh_token:
            raise AuthError("Not signed in")
        try:
            resp = await self._http.post(
                "/api/auth/token/refresh",
                json={"refresh_token": context.refresh_token},
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Unable to reach the server: {e}") from e

        if resp.status_code != 200:
            logger.info("Session refresh rejected (%s), signing out locally", resp.status_code)
            self._set(ANONYMOUS)
            raise AuthError(error_detail(resp))

        refreshed = SessionContext.from_session_payload(resp.json())
        self._set(refreshed)
        return refreshed

    async def restore(self) -> SessionContext:
        """Load the persisted session, refreshing it if it is about to expire."""
        data = self._storage.load()
        if not data:
            return self._context
        try:
            context = SessionContext.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding malformed persisted session: %s", e)
            self._storage.clear()
            return self._context

        self._context = context
        if context.expires_within(self._refresh_margin):
            try:
                await self.refresh()
            except AuthError as e:
                logger.info("Persisted session could not be refreshed: %s", e.message)
                return self._context
        else:
            for listener in list(self._listeners):
                listener(context)
        return self._context

    async def authorization(self) -> dict[str, str]:
        """Bearer header for the current session, auto-refreshing the access token."""
        if not self._context.is_authenticated:
            raise AuthError("Not signed in")
        if self._context.expires_within(self._refresh_margin):
            async with self._refresh_lock:
                # Another caller may have refreshed while we waited
                if self._context.expires_within(self._refresh_margin):
                    await self.refresh()
        return {"Authorization": f"Bearer {self._context.access_token}"}
