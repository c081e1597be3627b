"""
Row-level access layer.

Every request to a protected endpoint resolves the calling profile from its
bearer token. Applicants may only read and write the row whose user_id is
their own id; administrators may read and write any row.
"""

import logging
import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_db
from models.profile import Profile
from services.security import ACCESS, TokenError, decode_token

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


async def get_current_profile(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """Resolve the authenticated profile from the Authorization header."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    try:
        payload = decode_token(credentials.credentials, ACCESS)
    except TokenError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    result = await db.execute(
        select(Profile).where(Profile.id == uuid.UUID(payload["sub"]))
    )
    profile = result.scalar_one_or_none()
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return profile


async def require_admin(profile: Profile = Depends(get_current_profile)) -> Profile:
    if not profile.is_admin:
        logger.warning("Admin-only access denied: profile_id=%s", profile.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return profile


def ensure_can_read(profile: Profile, owner_id: uuid.UUID) -> None:
    """Owner or administrator; anything else is a 403."""
    if profile.is_admin or profile.id == owner_id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access to this application is not allowed",
    )
