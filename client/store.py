"""
Application Record Store — the single data-access interface the views use.

Every call carries the session's bearer token; the backend's row-level access
layer decides what the caller may read or write. Any failure (transport,
401/403, 404, 409, 422) is raised as StoreError.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from enum import Enum
from typing import Awaitable, Callable

import httpx

from client.backend import error_detail
from client.config import settings
from client.errors import AuthError, StoreError
from client.models import (
    Application,
    ApplicationDraft,
    ApplicationStatus,
    ApplicationWithEmail,
)
from client.session import SessionStore

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[Application, "Application | None"], None]


class ApplicationStore:
    def __init__(
        self,
        http: httpx.AsyncClient,
        session: SessionStore,
        retry_delay_sec: float = settings.SUBSCRIPTION_RETRY_SEC,
    ):
        self._http = http
        self._session = session
        self._retry_delay = retry_delay_sec

    async def _request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        try:
            headers = await self._session.authorization()
        except AuthError as e:
            raise StoreError(e.message, status_code=401) from e
        try:
            resp = await self._http.request(method, endpoint, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Store request failed: %s %s → %s", method, endpoint, e)
            raise StoreError(f"Unable to reach the server: {e}") from e

        if resp.status_code >= 400:
            logger.warning("Store error: %s %s → %s", method, endpoint, resp.status_code)
            raise StoreError(error_detail(resp), status_code=resp.status_code)
        return resp

    # ── Applicant operations ───────────────────────────────

    async def get_own(self, identity_id: uuid.UUID) -> Application | None:
        """The identity's application, or None. Only the caller's own record is reachable."""
        self._check_own(identity_id)
        resp = await self._request("GET", "/api/applications/own")
        body = resp.json()
        return Application.model_validate(body) if body else None

    async def create(self, draft: ApplicationDraft) -> Application:
        resp = await self._request(
            "POST", "/api/applications/", json=draft.model_dump(mode="json"),
        )
        return Application.model_validate(resp.json())

    async def update(self, identity_id: uuid.UUID, fields: dict) -> Application:
        """Partial update of the identity's own application."""
        self._check_own(identity_id)
        payload = {k: (v.value if isinstance(v, Enum) else v) for k, v in fields.items()}
        resp = await self._request("PATCH", "/api/applications/own", json=payload)
        return Application.model_validate(resp.json())

    # ── Administrator operations ───────────────────────────

    async def list_all(self) -> list[ApplicationWithEmail]:
        resp = await self._request("GET", "/api/applications/")
        return [ApplicationWithEmail.model_validate(row) for row in resp.json()]

    async def set_status(
        self,
        application_id: uuid.UUID,
        status: ApplicationStatus,
        notes: str | None,
    ) -> Application:
        resp = await self._request(
            "PUT",
            f"/api/applications/{application_id}/status",
            json={"status": ApplicationStatus(status).value, "admin_notes": notes},
        )
        return Application.model_validate(resp.json())

    # ── Change subscription ────────────────────────────────

    def subscribe_to_own(self, identity_id: uuid.UUID, on_change: ChangeHandler) -> Callable[[], None]:
        """
        Watch the identity's application for updates.

        Returns a disposer; the caller owns the subscription and must call the
        disposer on teardown. Until then the stream reconnects after
        SUBSCRIPTION_RETRY_SEC whenever it drops, and re-reads the record on
        each reconnect so that an update missed while disconnected is still
        delivered. An event that cannot be parsed or handled is logged and
        skipped.
        """
        task = asyncio.get_running_loop().create_task(
            self._watch(identity_id, on_change),
            name=f"application-watch-{identity_id}",
        )

        def dispose() -> None:
            if not task.done():
                task.cancel()
                logger.info("Application watch disposed: identity_id=%s", identity_id)

        return dispose

    async def _watch(self, identity_id: uuid.UUID, on_change: ChangeHandler) -> None:
        last_seen: Application | None = None

        def deliver(new: Application, old: Application | None) -> None:
            nonlocal last_seen
            last_seen = new
            on_change(new, old)

        async def resync() -> None:
            # Updates published while disconnected are not replayed by the server
            fetched = await self.get_own(identity_id)
            if fetched is None or fetched == last_seen:
                return
            logger.info("Application watch resynced: identity_id=%s, status=%s", identity_id, fetched.status.value)
            try:
                deliver(fetched, last_seen)
            except Exception:
                logger.exception("Change handler failed on resync: identity_id=%s", identity_id)

        on_connect = None
        while True:
            try:
                await self._stream_changes(identity_id, deliver, on_connect)
            except (httpx.HTTPError, StoreError, ValueError) as e:
                logger.warning("Application watch dropped: identity_id=%s, error=%s", identity_id, e)
            on_connect = resync
            await asyncio.sleep(self._retry_delay)

    async def _stream_changes(
        self,
        identity_id: uuid.UUID,
        on_change: ChangeHandler,
        on_connect: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        try:
            headers = await self._session.authorization()
        except AuthError as e:
            raise StoreError(e.message, status_code=401) from e
        headers["Accept"] = "text/event-stream"

        async with self._http.stream(
            "GET",
            "/api/applications/changes",
            params={"user_id": str(identity_id)},
            headers=headers,
            timeout=httpx.Timeout(settings.REQUEST_TIMEOUT_SEC, read=None),
        ) as resp:
            if resp.status_code != 200:
                await resp.aread()
                raise StoreError(error_detail(resp), status_code=resp.status_code)
            logger.info("Application watch connected: identity_id=%s", identity_id)
            if on_connect is not None:
                await on_connect()

            event_type, data_lines = None, []
            async for line in resp.aiter_lines():
                if line.startswith(":"):
                    continue
                if line.startswith("event:"):
                    event_type = line[len("event:"):].strip()
                elif line.startswith("data:"):
                    data_lines.append(line[len("data:"):].strip())
                elif line == "":
                    if event_type == "update" and data_lines:
                        try:
                            self._dispatch("\n".join(data_lines), on_change)
                        except Exception:
                            logger.exception("Skipping change event that could not be handled: identity_id=%s", identity_id)
                    event_type, data_lines = None, []

    @staticmethod
    def _dispatch(data: str, on_change: ChangeHandler) -> None:
        payload = json.loads(data)
        new = Application.model_validate(payload["new"])
        old = Application.model_validate(payload["old"]) if payload.get("old") else None
        on_change(new, old)

    def _check_own(self, identity_id: uuid.UUID) -> None:
        identity = self._session.identity
        if identity is None or identity.id != identity_id:
            raise StoreError("Only your own application can be accessed", status_code=403)
