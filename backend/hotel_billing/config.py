"""Runtime configuration read from environment variables."""

import logging
import os


DATABASE_URL = os.getenv("APP_DATABASE_URL", "sqlite:///hotel_billing.db")
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sqlalchemy").lower()  # sqlalchemy | memory
USE_ALEMBIC = os.getenv("USE_ALEMBIC", "false").lower() == "true"

# Bill numbers reset at midnight in this timezone
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "Asia/Kolkata")

# Operator id that logs in with the admin role
ADMIN_CODE = os.getenv("ADMIN_CODE", "SHI").strip().upper()

SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))

# Open billing sessions idle longer than this are dropped (defaults to the token lifetime)
SESSION_IDLE_MINUTES = int(os.getenv("SESSION_IDLE_MINUTES", str(ACCESS_TOKEN_EXPIRE_MINUTES)))
MAX_OPEN_SESSIONS = int(os.getenv("MAX_OPEN_SESSIONS", "500"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging once for the service and scripts."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
