"""
Applicant View — the applicant's own application and its review status.

States (see client.states.ApplicantState):

    loading ──► no_application ──► editing ──► viewing
       └──────────────────────────────────────► viewing ──► editing (pending only)

While mounted the view holds a change subscription on its own record. A pushed
update replaces the displayed record in place; a new decision raises exactly
one notification. A decision that lands while the form is open wins: the form
is closed and a conflict notice is shown.
"""

from __future__ import annotations

import logging
from typing import Callable

from client.errors import RecruitmentError
from client.form import ApplicationForm
from client.models import Application, ApplicationStatus
from client.notify import Notifier, Severity
from client.session import SessionStore
from client.states import ApplicantState
from client.store import ApplicationStore

logger = logging.getLogger(__name__)

DECIDED = (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED)


class ApplicantView:
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
        self.state = ApplicantState.LOADING
        self.application: Application | None = None
        self.form: ApplicationForm | None = None
        self._dispose: Callable[[], None] | None = None

    # ── Lifecycle ──────────────────────────────────────────

    async def mount(self) -> None:
        """Fetch the own record and start watching it."""
        identity = self._session.identity
        if identity is None:
            self._notifier.notify(self._t("error"), self._t("login.required"), Severity.ERROR)
            return

        self.state = ApplicantState.LOADING
        try:
            application = await self._store.get_own(identity.id)
        except RecruitmentError as e:
            self._notifier.notify(self._t("error"), e.message, Severity.ERROR)
            return

        self.application = application
        self.state = ApplicantState.VIEWING if application else ApplicantState.NO_APPLICATION
        if self._dispose is None:
            self._dispose = self._store.subscribe_to_own(identity.id, self._on_change)

    def unmount(self) -> None:
        if self._dispose is not None:
            self._dispose()
            self._dispose = None

    # ── Transitions ────────────────────────────────────────

    @property
    def can_edit(self) -> bool:
        return (
            self.state == ApplicantState.VIEWING
            and self.application is not None
            and self.application.is_pending
        )

    def start_application(self) -> bool:
        if self.state != ApplicantState.NO_APPLICATION:
            return False
        self.form = self._new_form(None)
        self.state = ApplicantState.EDITING
        return True

    def edit(self) -> bool:
        """Open the form on the current record; only offered while pending."""
        if not self.can_edit:
            return False
        self.form = self._new_form(self.application)
        self.state = ApplicantState.EDITING
        return True

    def cancel_edit(self) -> None:
        if self.state != ApplicantState.EDITING:
            return
        self.form = None
        self.state = ApplicantState.VIEWING if self.application else ApplicantState.NO_APPLICATION

    async def submit(self) -> Application | None:
        if self.state != ApplicantState.EDITING or self.form is None:
            return None
        saved = await self.form.submit()
        # A pushed decision may have closed the form while the request was in flight
        if saved is None or self.state != ApplicantState.EDITING:
            return saved
        self.application = saved
        self.form = None
        self.state = ApplicantState.VIEWING
        return saved

    # ── Change notifications ───────────────────────────────

    def _on_change(self, new: Application, old: Application | None) -> None:
        previous = self.application or old
        self.application = new
        decided = new.status in DECIDED and (previous is None or previous.status != new.status)

        if self.state == ApplicantState.NO_APPLICATION:
            self.state = ApplicantState.VIEWING

        if not decided:
            return

        logger.info("Application decision received: id=%s, status=%s", new.id, new.status.value)
        if self.state == ApplicantState.EDITING:
            self.form = None
            self.state = ApplicantState.VIEWING
            self._notifier.notify(self._t("error"), self._t("application.edit.conflict"), Severity.ERROR)

        if new.status == ApplicationStatus.APPROVED:
            self._notifier.notify(self._t("success"), self._t("application.approved"), Severity.SUCCESS)
        else:
            self._notifier.notify(self._t("error"), self._t("application.rejected"), Severity.ERROR)

    def _new_form(self, existing: Application | None) -> ApplicationForm:
        return ApplicationForm(self._store, self._session, self._notifier, self._t, existing=existing)
