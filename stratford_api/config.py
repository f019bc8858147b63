"""
Process configuration.

Settings are read once from the environment (and an optional .env file)
when the gateway starts, then handed to `create_app`. Nothing downstream
reads the environment directly.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_TOKEN_EXPIRATION_MINUTES = 1440  # 24 hours
DEFAULT_RATE_LIMIT = "100 per 15 minutes"  # per client IP


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    jwt_secret: str
    token_expiration_minutes: int = DEFAULT_TOKEN_EXPIRATION_MINUTES
    database_url: str = "sqlite:///stratford.db"
    cors_origin: str = "http://localhost:3000"
    environment: str = "development"
    log_level: str = "INFO"
    version: str = "1.0.0"
    port: int = 3001
    rate_limit: str = DEFAULT_RATE_LIMIT
    rate_limit_enabled: bool = True


def load_settings() -> Settings:
    """
    Build Settings from the process environment.

    Returns:
        Settings: The loaded configuration.

    Raises:
        RuntimeError: If JWT_SECRET is missing. The service cannot sign or
            verify tokens without it, so this is a fatal startup error.
    """
    load_dotenv()

    jwt_secret = (os.getenv("JWT_SECRET") or "").strip()
    if not jwt_secret:
        raise RuntimeError("JWT_SECRET is missing. Set it in .env")

    return Settings(
        jwt_secret=jwt_secret,
        token_expiration_minutes=int(
            os.getenv("TOKEN_EXPIRATION_MINUTES", DEFAULT_TOKEN_EXPIRATION_MINUTES)
        ),
        database_url=os.getenv("DATABASE_URL", "sqlite:///stratford.db"),
        cors_origin=os.getenv("CORS_ORIGIN", "http://localhost:3000"),
        environment=os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development",
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        version=os.getenv("APP_VERSION", "1.0.0"),
        port=int(os.getenv("PORT", 3001)),
        rate_limit=os.getenv("RATE_LIMIT", DEFAULT_RATE_LIMIT),
        rate_limit_enabled=(
            os.getenv("RATE_LIMIT_ENABLED", "true").strip().lower() not in ("0", "false", "no")
        ),
    )
