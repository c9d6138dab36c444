from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Talent Hub"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite://"
    DATABASE_ECHO: bool = False
    SEED_DEMO_DATA: bool = True

    # Feedback
    FEEDBACK_SEND_DELAY_SECONDS: float = 1.0
    FEEDBACK_TEMPLATES_PER_ACTION: int = 3
    FEEDBACK_SENT_BY: str = "Recruitment Team"
    BATCH_IDLE_TIMEOUT_SECONDS: int = 1800

    # Listing
    DEFAULT_PAGE_SIZE: int = 10
    WAVE_PAGE_SIZE: int = 5

    # Sentry
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = "development"

    # App
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
