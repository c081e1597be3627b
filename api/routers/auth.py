"""Auth API — sign-up, sign-in, token refresh, sign-out and session lookup."""

import logging
import re
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from db.database import get_db
from models.profile import Profile
from schemas.auth import Credentials, IdentityResponse, RefreshRequest, SessionResponse
from services.access import get_current_profile
from services.security import (
    REFRESH,
    TokenError,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)

router = APIRouter()
logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")


def _issue_session(profile: Profile) -> SessionResponse:
    return SessionResponse(
        access_token=create_access_token(profile.id, profile.is_admin),
        refresh_token=create_refresh_token(profile.id, profile.token_version),
        expires_in=settings.ACCESS_TOKEN_TTL_SEC,
        user=IdentityResponse.model_validate(profile),
    )


async def _get_by_email(db: AsyncSession, email: str) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.email == email))
    return result.scalar_one_or_none()


# ── POST /api/auth/signup ────────────────────────────────

@router.post("/signup", response_model=SessionResponse, status_code=201)
async def sign_up(data: Credentials, db: AsyncSession = Depends(get_db)):
    """Create a new identity and return its first session."""
    email = data.email.strip().lower()
    if not EMAIL_RE.match(email):
        raise HTTPException(status_code=400, detail="Unable to validate email address: invalid format")
    if len(data.password) < settings.MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password should be at least {settings.MIN_PASSWORD_LENGTH} characters",
        )

    if await _get_by_email(db, email):
        raise HTTPException(status_code=400, detail="User already registered")

    profile = Profile(email=email, password_hash=hash_password(data.password))
    db.add(profile)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="User already registered")
    await db.refresh(profile)

    logger.info("Profile created: id=%s, email=%s", profile.id, email)
    return _issue_session(profile)


# ── POST /api/auth/signin ────────────────────────────────

@router.post("/signin", response_model=SessionResponse)
async def sign_in(data: Credentials, db: AsyncSession = Depends(get_db)):
    """Password sign-in."""
    profile = await _get_by_email(db, data.email.strip().lower())
    if not profile or not verify_password(data.password, profile.password_hash):
        logger.info("Sign-in failed: email=%s", data.email)
        raise HTTPException(status_code=400, detail="Invalid login credentials")

    logger.info("Sign-in: profile_id=%s", profile.id)
    return _issue_session(profile)


# ── POST /api/auth/token/refresh ─────────────────────────

@router.post("/token/refresh", response_model=SessionResponse)
async def refresh_session(data: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Exchange a refresh token for a fresh token pair."""
    try:
        payload = decode_token(data.refresh_token, REFRESH)
    except TokenError as e:
        raise HTTPException(status_code=401, detail=str(e))

    result = await db.execute(
        select(Profile).where(Profile.id == uuid.UUID(payload["sub"]))
    )
    profile = result.scalar_one_or_none()
    if not profile or payload.get("ver") != profile.token_version:
        raise HTTPException(status_code=401, detail="Refresh token revoked")

    return _issue_session(profile)


# ── POST /api/auth/signout ───────────────────────────────

@router.post("/signout", status_code=204)
async def sign_out(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    """Revoke every outstanding refresh token of the caller."""
    profile.token_version += 1
    await db.commit()
    logger.info("Sign-out: profile_id=%s", profile.id)


# ── GET /api/auth/session ────────────────────────────────

@router.get("/session", response_model=IdentityResponse)
async def current_session(profile: Profile = Depends(get_current_profile)):
    """Identity behind the bearer token."""
    return profile
