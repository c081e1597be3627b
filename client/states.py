"""View state machines."""

from enum import Enum


class ApplicantState(str, Enum):
    """Applicant view: loading → no_application | viewing ⇄ editing."""
    LOADING = "loading"
    NO_APPLICATION = "no_application"
    EDITING = "editing"
    VIEWING = "viewing"
