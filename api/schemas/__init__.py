"""Pydantic schemas for API request/response models."""

from __future__ import annotations
from enum import Enum


# ── Enums ──────────────────────────────────────────────────

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


class Decision(str, Enum):
    """Statuses an administrator may set."""
    APPROVED = "approved"
    REJECTED = "rejected"
