"""Administrator View — every application, with approve/reject and notes."""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from client.errors import RecruitmentError
from client.models import ApplicationStatus, ApplicationWithEmail
from client.notify import Notifier, Severity
from client.session import SessionStore
from client.store import ApplicationStore

logger = logging.getLogger(__name__)


class AdminView:
    def __init__(
        self,
        session: SessionStore,
        store: ApplicationStore,
        notifier: Notifier,
        translate: Callable[[str], str],
    ):
        self._session = session
        self._store = store
        self._notifier = notifier
        self._t = translate
        self.applications: list[ApplicationWithEmail] = []
        self.notes: dict[uuid.UUID, str] = {}
        self.loading = False
        self._in_flight: set[uuid.UUID] = set()

    async def load(self) -> bool:
        """(Re-)fetch the full list. Non-admin sessions get no data."""
        if not self._session.is_admin:
            self._notifier.notify(self._t("error"), self._t("admin.access.required"), Severity.ERROR)
            return False

        self.loading = True
        try:
            self.applications = await self._store.list_all()
        except RecruitmentError as e:
            self._notifier.notify(self._t("error"), e.message, Severity.ERROR)
            return False
        finally:
            self.loading = False
        return True

    def get(self, application_id: uuid.UUID) -> ApplicationWithEmail | None:
        return next((a for a in self.applications if a.id == application_id), None)

    def set_note(self, application_id: uuid.UUID, text: str) -> None:
        self.notes[application_id] = text

    def actions_for(self, application_id: uuid.UUID) -> tuple[str, ...]:
        application = self.get(application_id)
        if application is None or not application.is_pending or application_id in self._in_flight:
            return ()
        return ("approve", "reject")

    async def approve(self, application_id: uuid.UUID) -> bool:
        return await self._decide(application_id, ApplicationStatus.APPROVED)

    async def reject(self, application_id: uuid.UUID) -> bool:
        return await self._decide(application_id, ApplicationStatus.REJECTED)

    async def _decide(self, application_id: uuid.UUID, status: ApplicationStatus) -> bool:
        if not self.actions_for(application_id):
            return False

        notes = self.notes.get(application_id, "").strip() or None
        self._in_flight.add(application_id)
        try:
            await self._store.set_status(application_id, status, notes)
        except RecruitmentError as e:
            self._notifier.notify(self._t("error"), e.message, Severity.ERROR)
            return False
        finally:
            self._in_flight.discard(application_id)

        logger.info("Application decided: id=%s, status=%s", application_id, status.value)
        self.notes.pop(application_id, None)
        self._notifier.notify(
            self._t("success"),
            f"{self._t(status.value)}: {self._t('application.decision.saved')}",
            Severity.SUCCESS,
        )
        await self.load()
        return True
