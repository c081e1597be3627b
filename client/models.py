"""Client-side records returned by the backend."""

from __future__ import annotations
import uuid
from datetime import datetime
from enum import Enum
from pydantic import BaseModel


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"


class VehicleType(str, Enum):
    BICYCLE = "bicycle"
    MOTORCYCLE = "motorcycle"
    CAR = "car"
    SCOOTER = "scooter"
    E_BIKE = "e-bike"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApplicationDraft(BaseModel):
    """Mutable applicant fields, as sent on create/update."""
    first_name: str
    last_name: str
    phone_number: str
    age: int
    gender: Gender
    vehicle_type: VehicleType
    working_hours: str


class Application(ApplicationDraft):
    id: uuid.UUID
    user_id: uuid.UUID
    status: ApplicationStatus = ApplicationStatus.PENDING
    admin_notes: str | None = None
    approved_by: uuid.UUID | None = None
    applied_at: datetime
    updated_at: datetime

    @property
    def is_pending(self) -> bool:
        return self.status == ApplicationStatus.PENDING


class ApplicationWithEmail(Application):
    email: str | None = None
