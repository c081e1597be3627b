import os
from functools import lru_cache

from pydantic import BaseModel


class Settings(BaseModel):
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql+asyncpg://recruit:recruit@db:5432/recruit",
    )
    JWT_SECRET: str = os.getenv("JWT_SECRET", "changeme")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_TTL_SEC: int = int(os.getenv("ACCESS_TOKEN_TTL_SEC", "3600"))
    REFRESH_TOKEN_TTL_SEC: int = int(os.getenv("REFRESH_TOKEN_TTL_SEC", str(30 * 24 * 3600)))
    MIN_PASSWORD_LENGTH: int = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))
    SSE_HEARTBEAT_SEC: float = float(os.getenv("SSE_HEARTBEAT_SEC", "15"))
    CHANGE_QUEUE_SIZE: int = int(os.getenv("CHANGE_QUEUE_SIZE", "32"))
    # Empty: single process, change events stay in memory
    REDIS_URL: str = os.getenv("REDIS_URL", "")
    # Refuse applicant edits once a decision has been recorded
    LOCK_REVIEWED_APPLICATIONS: bool = os.getenv("LOCK_REVIEWED_APPLICATIONS", "false").lower() == "true"
    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
