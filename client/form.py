"""
Intake/Edit Form: field values, validation and the create-or-update submit.

The same form serves the first submission and later edits: when it was loaded
from an existing application, submit() updates that record; otherwise it
creates one.
"""

from __future__ import annotations

import logging
from typing import Callable

from client.errors import RecruitmentError, ValidationError
from client.models import Application, ApplicationDraft, Gender, VehicleType
from client.notify import Notifier, Severity
from client.session import SessionStore
from client.store import ApplicationStore

logger = logging.getLogger(__name__)

FIELDS = (
    "first_name", "last_name", "phone_number", "age",
    "gender", "vehicle_type", "working_hours",
)
TEXT_FIELDS = ("first_name", "last_name", "phone_number", "working_hours")
MIN_AGE = 18
MAX_AGE = 70

GENDERS = {g.value for g in Gender}
VEHICLE_TYPES = {v.value for v in VehicleType}


class ApplicationForm:
    def __init__(
        self,
        store: ApplicationStore,
        session: SessionStore,
        notifier: Notifier,
        translate: Callable[[str], str],
        existing: Application | None = None,
    ):
        self._store = store
        self._session = session
        self._notifier = notifier
        self._t = translate
        self.values: dict[str, str] = {field: "" for field in FIELDS}
        self.existing: Application | None = None
        self.submitting = False
        if existing is not None:
            self.load(existing)

    @property
    def is_update(self) -> bool:
        return self.existing is not None

    @property
    def submit_label(self) -> str:
        return self._t("update.application" if self.is_update else "submit.application")

    def load(self, existing: Application) -> None:
        """Pre-fill every field from an existing application."""
        self.existing = existing
        self.values = {
            "first_name": existing.first_name or "",
            "last_name": existing.last_name or "",
            "phone_number": existing.phone_number or "",
            "age": str(existing.age) if existing.age is not None else "",
            "gender": existing.gender.value if existing.gender else "",
            "vehicle_type": existing.vehicle_type.value if existing.vehicle_type else "",
            "working_hours": existing.working_hours or "",
        }

    def set(self, field: str, value: str) -> None:
        if field not in FIELDS:
            raise KeyError(field)
        self.values[field] = value

    def validate(self) -> ApplicationDraft:
        """
        Check the raw values and build a draft.

        Raises:
            ValidationError: blank required field, unselected gender/vehicle
                type, or age that is not a whole number in 18–70.
        """
        missing = [f for f in TEXT_FIELDS if not self.values[f].strip()]
        if self.values["gender"] not in GENDERS:
            missing.append("gender")
        if self.values["vehicle_type"] not in VEHICLE_TYPES:
            missing.append("vehicle_type")
        if not self.values["age"].strip():
            missing.append("age")
        if missing:
            raise ValidationError(self._t("form.required.fields"), missing)

        try:
            age = int(self.values["age"].strip())
        except ValueError:
            raise ValidationError(self._t("form.age.range"), ["age"])
        if not MIN_AGE <= age <= MAX_AGE:
            raise ValidationError(self._t("form.age.range"), ["age"])

        return ApplicationDraft(
            first_name=self.values["first_name"].strip(),
            last_name=self.values["last_name"].strip(),
            phone_number=self.values["phone_number"].strip(),
            age=age,
            gender=Gender(self.values["gender"]),
            vehicle_type=VehicleType(self.values["vehicle_type"]),
            working_hours=self.values["working_hours"].strip(),
        )

    async def submit(self) -> Application | None:
        """
        Validate, then create or update.

        Returns the saved application, or None when the submit was ignored
        (already in flight) or failed; failures are shown as notifications.
        """
        if self.submitting:
            logger.debug("Submit ignored: previous submit still in flight")
            return None

        identity = self._session.identity
        if identity is None:
            self._notifier.notify(self._t("error"), self._t("login.required"), Severity.ERROR)
            return None

        try:
            draft = self.validate()
        except ValidationError as e:
            self._notifier.notify(self._t("error"), e.message, Severity.ERROR)
            return None

        self.submitting = True
        try:
            if self.is_update:
                saved = await self._store.update(identity.id, draft.model_dump())
                message = self._t("application.updated")
            else:
                saved = await self._store.create(draft)
                message = self._t("application.submitted")
        except RecruitmentError as e:
            self._notifier.notify(self._t("error"), e.message, Severity.ERROR)
            return None
        finally:
            self.submitting = False

        logger.info("Application %s: id=%s", "updated" if self.is_update else "submitted", saved.id)
        self.existing = saved
        self._notifier.notify(self._t("success"), message, Severity.SUCCESS)
        return saved
