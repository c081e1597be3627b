"""
Courier Recruitment — FastAPI Backend
Auth, courier applications with row-level access, and a live change feed.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from db.database import engine, init_db
from routers import applications, auth
from services.change_feed import close_redis, relay_from_redis

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    await init_db()
    relay = asyncio.create_task(relay_from_redis()) if settings.REDIS_URL else None
    logger.info("Courier Recruitment API starting...")
    yield
    # Shutdown
    if relay is not None:
        relay.cancel()
        await asyncio.gather(relay, return_exceptions=True)
        await close_redis()
    await engine.dispose()
    logger.info("Courier Recruitment API shut down.")


app = FastAPI(
    title="Courier Recruitment API",
    description="Courier applications, review workflow and change notifications",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ───────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ────────────────────────────────────────────────
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(applications.router, prefix="/api/applications", tags=["Applications"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "Courier Recruitment API"}


@app.get("/health/db")
async def health_db():
    """Verify DB connection and report how many applications are stored."""
    from sqlalchemy import text
    try:
        async with engine.connect() as conn:
            count_row = (await conn.execute(text("SELECT COUNT(*) FROM applications"))).first()
            application_count = count_row[0] if count_row else 0
        return {
            "status": "ok",
            "dialect": engine.dialect.name,
            "applications_count": application_count,
        }
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        return {"status": "error", "detail": str(e)}
