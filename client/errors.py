"""Error taxonomy surfaced to the views."""


class RecruitmentError(Exception):
    """Base class; ``message`` is safe to show to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(RecruitmentError):
    """Bad credentials, weak password, malformed or already registered email."""


class StoreError(RecruitmentError):
    """Transport failure, access denial, uniqueness or decision conflict."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def conflict(self) -> bool:
        return self.status_code == 409

    @property
    def denied(self) -> bool:
        return self.status_code in (401, 403)


class ValidationError(RecruitmentError):
    """A form field failed validation before any network call."""

    def __init__(self, message: str, fields: list[str]):
        super().__init__(message)
        self.fields = fields
