from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import os

def _coerce_asyncpg_url(url: str) -> str:
    """Convert common Postgres URLs to asyncpg DSN for SQLAlchemy."""
    if not url:
        return url
    # Heroku provides postgres:// or postgresql://
    if url.startswith("postgres://"):
        return "postgresql+asyncpg://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://"):]
    return url


class Settings(BaseSettings):
    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------
    ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------
    # Optional here to allow Heroku-style DATABASE_URL fallback.
    DB_URL: Optional[str] = None  # resolved at runtime if missing
    DB_ECHO: bool = False
    RUN_DDL_ON_START: bool = True  # run create_all on startup (disable in prod)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------
    CORS_ORIGINS: List[str] = ["*"]  # the admin UI is served from another origin
    DEFAULT_PAGE_SIZE: int = 10

    # ------------------------------------------------------------------
    # Model configuration
    # ------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # ignore any unrecognized vars instead of erroring
    )


DEFAULT_DB_URL = "sqlite+aiosqlite:///./bidmarket.db"


def load_settings(**overrides) -> Settings:
    """Build settings and normalize the DB URL."""
    s = Settings(**overrides)

    # Fallback: allow DATABASE_URL and coerce to asyncpg
    if not s.DB_URL:
        s.DB_URL = os.getenv("DATABASE_URL", "") or DEFAULT_DB_URL

    # Also coerce explicit DB_URL if it was provided in sync form
    s.DB_URL = _coerce_asyncpg_url(s.DB_URL)
    return s


# create global settings instance
settings = load_settings()
