"""Client configuration from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    API_BASE_URL: str = "http://api:8000"
    REQUEST_TIMEOUT_SEC: float = 15.0
    SESSION_FILE: Path = Path.home() / ".courier_recruit" / "session.json"
    LANGUAGE_FILE: Path = Path.home() / ".courier_recruit" / "language"
    DEFAULT_LANGUAGE: str = "en"
    # Refresh the access token when it expires within this window
    TOKEN_REFRESH_MARGIN_SEC: int = 60
    SUBSCRIPTION_RETRY_SEC: float = 3.0

    class Config:
        env_file = ".env"
        env_prefix = "RECRUIT_"
        extra = "allow"


settings = Settings()
