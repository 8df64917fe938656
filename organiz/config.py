"""
Service configuration.

Settings are read once from the environment (and a local .env file) at
startup and frozen. The app factory stores them in app.config["SETTINGS"];
handlers read them through get_settings().
"""

import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv
from flask import current_app

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5MB
DEFAULT_UPLOAD_TYPES = ("jpeg", "jpg", "png", "pdf")


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    database_url: str
    upload_dir: str = "uploads"
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    allowed_upload_types: Tuple[str, ...] = DEFAULT_UPLOAD_TYPES
    db_pool_max_connections: int = 10
    cors_origins: str = "*"


def load_settings() -> Settings:
    """
    Build Settings from environment variables.

    Raises:
        RuntimeError: If JWT_SECRET or DATABASE_URL is not set.
    """
    load_dotenv()

    jwt_secret = os.getenv("JWT_SECRET")
    if not jwt_secret:
        raise RuntimeError("JWT_SECRET is missing. Set it in .env")

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set. Please set the environment variable.")

    types_raw = os.getenv("ALLOWED_UPLOAD_TYPES", ",".join(DEFAULT_UPLOAD_TYPES))
    allowed = tuple(t.strip().lower().lstrip(".") for t in types_raw.split(",") if t.strip())

    return Settings(
        jwt_secret=jwt_secret,
        database_url=database_url,
        upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
        max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)),
        allowed_upload_types=allowed,
        db_pool_max_connections=int(os.getenv("DB_POOL_MAX_CONNECTIONS", 10)),
        cors_origins=os.getenv("CORS_ORIGINS", "*"),
    )


def get_settings() -> Settings:
    """Return the Settings of the running Flask app."""
    return current_app.config["SETTINGS"]
