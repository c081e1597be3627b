"""Pydantic schemas for courier application endpoints."""

from __future__ import annotations
import uuid
from datetime import datetime
from pydantic import BaseModel, Field

from schemas import ApplicationStatus, Decision, Gender, VehicleType

MIN_AGE = 18
MAX_AGE = 70


class ApplicationCreate(BaseModel):
    """Schema for an applicant's first submission."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone_number: str = Field(..., min_length=1, max_length=30)
    age: int = Field(..., ge=MIN_AGE, le=MAX_AGE)
    gender: Gender
    vehicle_type: VehicleType
    working_hours: str = Field(..., min_length=1)


class ApplicationUpdate(BaseModel):
    """Partial update of the applicant-owned fields."""
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone_number: str | None = Field(None, min_length=1, max_length=30)
    age: int | None = Field(None, ge=MIN_AGE, le=MAX_AGE)
    gender: Gender | None = None
    vehicle_type: VehicleType | None = None
    working_hours: str | None = Field(None, min_length=1)


class ApplicationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    first_name: str
    last_name: str
    phone_number: str
    age: int
    gender: Gender
    vehicle_type: VehicleType
    working_hours: str
    status: ApplicationStatus
    admin_notes: str | None
    approved_by: uuid.UUID | None
    applied_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ApplicationWithEmail(ApplicationResponse):
    """Admin listing row: the application plus the applicant's email."""
    email: str | None = None


class StatusUpdate(BaseModel):
    """Schema for approving or rejecting an application."""
    status: Decision
    admin_notes: str | None = None


class ApplicationChange(BaseModel):
    """Payload of one change-feed update event."""
    new: ApplicationResponse
    old: ApplicationResponse | None = None
