"""Pydantic schemas for the auth endpoints."""

from __future__ import annotations
import uuid
from pydantic import BaseModel


class Credentials(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class IdentityResponse(BaseModel):
    id: uuid.UUID
    email: str
    is_admin: bool

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: IdentityResponse
