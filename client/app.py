"""
Application context and view selection.

AppContext is built once per process and handed to every view; nothing reads
session or language state from module globals.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import httpx

from client.backend import create_http_client
from client.config import settings
from client.i18n import Translator, load_language, save_language
from client.notify import LogNotifier, Notifier
from client.session import SessionFile, SessionStore
from client.store import ApplicationStore
from client.views import AdminView, ApplicantView, AuthView


@dataclass(frozen=True)
class AppContext:
    http: httpx.AsyncClient
    session: SessionStore
    store: ApplicationStore
    translator: Translator
    notifier: Notifier
    language_file: Path = settings.LANGUAGE_FILE

    @classmethod
    def create(
        cls,
        http: httpx.AsyncClient | None = None,
        notifier: Notifier | None = None,
        language: str | None = None,
        session_file: SessionFile | None = None,
        language_file: Path | None = None,
    ) -> AppContext:
        http = http or create_http_client()
        language_file = Path(language_file or settings.LANGUAGE_FILE)
        session = SessionStore(http, storage=session_file)
        return cls(
            http=http,
            session=session,
            store=ApplicationStore(http, session),
            translator=Translator(language or load_language(language_file)),
            notifier=notifier or LogNotifier(),
            language_file=language_file,
        )

    def with_language(self, language: str) -> AppContext:
        """A copy of this context translating into another language; the choice is saved."""
        translator = Translator(language)
        save_language(language, self.language_file)
        return AppContext(
            http=self.http,
            session=self.session,
            store=self.store,
            translator=translator,
            notifier=self.notifier,
            language_file=self.language_file,
        )

    async def aclose(self) -> None:
        await self.http.aclose()


def select_view(context: AppContext) -> AuthView | AdminView | ApplicantView:
    """The view the current session is allowed to see."""
    session = context.session
    if not session.current.is_authenticated:
        return AuthView(session, context.notifier, context.translator)
    if session.is_admin:
        return AdminView(session, context.store, context.notifier, context.translator)
    return ApplicantView(session, context.store, context.notifier, context.translator)
