import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# 🌱 Load environment variables
load_dotenv()

DEFAULT_JWT_SECRET = "fallback-secret-change-in-production"
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def to_async_url(url: str) -> str:
    """Point a plain postgres URL at the asyncpg driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


@dataclass
class Settings:
    database_url: str
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_expires_days: int = 7
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_timeout_seconds: float = 30.0
    gemini_temperature: float = 0.7
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        database_url = os.getenv("DATABASE_URL_ASYNC") or os.getenv("DATABASE_URL")
        if not database_url:
            logger.error("❌ DATABASE_URL environment variable not set!")
            raise ValueError("DATABASE_URL is required")

        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            logger.warning("⚠️ JWT_SECRET not set - using the development fallback secret")
            jwt_secret = DEFAULT_JWT_SECRET

        origins = os.getenv("CORS_ORIGINS")
        cors_origins = (
            [o.strip() for o in origins.split(",") if o.strip()]
            if origins
            else list(DEFAULT_CORS_ORIGINS)
        )

        return cls(
            database_url=to_async_url(database_url),
            jwt_secret=jwt_secret,
            jwt_expires_days=int(os.getenv("JWT_EXPIRES_DAYS", 7)),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-1.5-flash"),
            gemini_timeout_seconds=float(os.getenv("GEMINI_TIMEOUT_SECONDS", 30)),
            gemini_temperature=float(os.getenv("GEMINI_TEMPERATURE", 0.7)),
            cors_origins=cors_origins,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
