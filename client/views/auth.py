"""Sign-in / sign-up view."""

import logging
from typing import Callable

from client.errors import AuthError
from client.notify import Notifier, Severity
from client.session import SessionStore

logger = logging.getLogger(__name__)


class AuthView:
    def __init__(self, session: SessionStore, notifier: Notifier, translate: Callable[[str], str]):
        self._session = session
        self._notifier = notifier
        self._t = translate
        self.loading = False

    async def sign_in(self, email: str, secret: str) -> bool:
        return await self._attempt(self._session.sign_in, email, secret, "welcome.back")

    async def sign_up(self, email: str, secret: str) -> bool:
        return await self._attempt(self._session.sign_up, email, secret, "account.created")

    async def _attempt(self, action, email: str, secret: str, success_key: str) -> bool:
        if self.loading:
            return False
        self.loading = True
        try:
            await action(email, secret)
        except AuthError as e:
            self._notifier.notify(self._t("error"), e.message, Severity.ERROR)
            return False
        finally:
            self.loading = False
        self._notifier.notify(self._t("success"), self._t(success_key), Severity.SUCCESS)
        return True
