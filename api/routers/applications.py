"""Courier Application API — submission, own-record access, admin review and change feed."""

import asyncio
import json
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from db.database import get_db
from models.application import Application
from models.profile import Profile
from schemas import ApplicationStatus
from schemas.application import (
    ApplicationChange,
    ApplicationCreate,
    ApplicationResponse,
    ApplicationUpdate,
    ApplicationWithEmail,
    StatusUpdate,
)
from services.access import ensure_can_read, get_current_profile, require_admin
from services.change_feed import broadcast_application_update, feed, group_name

router = APIRouter()
logger = logging.getLogger(__name__)


def _serialize(application: Application | dict) -> dict:
    return ApplicationResponse.model_validate(application).model_dump(mode="json")


async def _get_by_owner(db: AsyncSession, user_id: uuid.UUID) -> Application | None:
    result = await db.execute(
        select(Application).where(Application.user_id == user_id)
    )
    return result.scalar_one_or_none()


# ── GET /api/applications/own ────────────────────────────

@router.get("/own", response_model=ApplicationResponse | None)
async def get_own_application(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    """The caller's application, or null if none was submitted yet."""
    return await _get_by_owner(db, profile.id)


# ── POST /api/applications ───────────────────────────────

@router.post("/", response_model=ApplicationResponse, status_code=201)
async def create_application(
    data: ApplicationCreate,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    """Submit the caller's first application."""
    if await _get_by_owner(db, profile.id):
        raise HTTPException(
            status_code=409,
            detail="An application already exists for this account",
        )

    application = Application(
        user_id=profile.id,
        first_name=data.first_name,
        last_name=data.last_name,
        phone_number=data.phone_number,
        age=data.age,
        gender=data.gender.value,
        vehicle_type=data.vehicle_type.value,
        working_hours=data.working_hours,
    )
    db.add(application)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race against a concurrent insert for the same profile
        await db.rollback()
        raise HTTPException(
            status_code=409,
            detail="An application already exists for this account",
        )
    await db.refresh(application)

    logger.info(
        "Application created: user_id=%s, name=%s %s, id=%s",
        profile.id,
        data.first_name,
        data.last_name,
        application.id,
    )
    return application


# ── PATCH /api/applications/own ──────────────────────────

@router.patch("/own", response_model=ApplicationResponse)
async def update_own_application(
    data: ApplicationUpdate,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    """Partial update of the caller's own application."""
    application = await _get_by_owner(db, profile.id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")

    if settings.LOCK_REVIEWED_APPLICATIONS and application.status != ApplicationStatus.PENDING.value:
        raise HTTPException(
            status_code=409,
            detail=f"Application already reviewed (status: {application.status})",
        )

    changes = data.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    if not changes:
        return application

    old = application.snapshot()
    for field, value in changes.items():
        setattr(application, field, value)
    await db.commit()
    await db.refresh(application)

    logger.info("Application updated by owner: id=%s, fields=%s", application.id, sorted(changes))
    await broadcast_application_update(application.user_id, _serialize(application), _serialize(old))
    return application


# ── GET /api/applications ────────────────────────────────

@router.get("/", response_model=list[ApplicationWithEmail])
async def list_applications(
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Every application with the applicant's email, newest first."""
    result = await db.execute(
        select(Application, Profile.email)
        .join(Profile, Application.user_id == Profile.id)
        .order_by(Application.applied_at.desc())
    )
    return [
        ApplicationWithEmail(**_serialize(application), email=email)
        for application, email in result.all()
    ]


# ── PUT /api/applications/{id}/status ────────────────────

@router.put("/{application_id}/status", response_model=ApplicationResponse)
async def set_application_status(
    application_id: uuid.UUID,
    data: StatusUpdate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Approve or reject an application.

    Status, notes and approving admin are written in one update. Repeating the
    same decision overwrites the notes; switching a decided application to the
    other decision is refused.
    """
    result = await db.execute(
        select(Application).where(Application.id == application_id)
    )
    application = result.scalar_one_or_none()
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")

    if application.status not in (ApplicationStatus.PENDING.value, data.status.value):
        raise HTTPException(
            status_code=409,
            detail=f"Application already reviewed (status: {application.status})",
        )

    old = application.snapshot()
    application.status = data.status.value
    application.admin_notes = data.admin_notes
    application.approved_by = admin.id
    await db.commit()
    await db.refresh(application)

    logger.info(
        "Application %s: id=%s, user_id=%s, admin=%s, note=%s",
        data.status.value.upper(),
        application.id,
        application.user_id,
        admin.id,
        data.admin_notes,
    )
    await broadcast_application_update(application.user_id, _serialize(application), _serialize(old))
    return application


# ── GET /api/applications/changes ────────────────────────

@router.get("/changes")
async def stream_application_changes(
    request: Request,
    user_id: uuid.UUID = Query(..., description="Owner of the watched application"),
    profile: Profile = Depends(get_current_profile),
):
    """
    Server-Sent Events stream of update events on one profile's application.

    Each event is ``event: update`` with a JSON ``{"new": ..., "old": ...}``
    body. A comment line is sent every SSE_HEARTBEAT_SEC to keep proxies from
    closing an idle connection.
    """
    ensure_can_read(profile, user_id)
    group = group_name(user_id)
    queue = feed.subscribe(group)

    async def event_stream():
        try:
            yield ": connected\n\n"
            while True:
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=settings.SSE_HEARTBEAT_SEC)
                except asyncio.TimeoutError:
                    if await request.is_disconnected():
                        break
                    yield ": heartbeat\n\n"
                    continue
                change = ApplicationChange(new=event["new"], old=event["old"])
                yield f"event: {event['type']}\ndata: {json.dumps(change.model_dump(mode='json'))}\n\n"
        finally:
            feed.unsubscribe(group, queue)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
