"""
Configuration settings for the Users Backend
"""

import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)

# How POST /users treats a body without "age"
MISSING_AGE_DEFAULT = "default"  # leave the column out so the schema default (18) applies
MISSING_AGE_REJECT = "reject"    # answer 400
MISSING_AGE_POLICIES = (MISSING_AGE_DEFAULT, MISSING_AGE_REJECT)


@dataclass(frozen=True)
class Settings:
    """Database credentials and server options read from the environment"""
    db_user: str
    db_password: str
    db_name: str
    db_port: int = 5432
    db_host: str = "localhost"
    http_port: int = 8080
    missing_age_policy: str = MISSING_AGE_DEFAULT
    log_level: str = "INFO"

    @property
    def database_url(self) -> str:
        user = quote(self.db_user, safe="")
        password = quote(self.db_password, safe="")
        return (
            f"postgresql://{user}:{password}@{self.db_host}:{self.db_port}/"
            f"{quote(self.db_name, safe='')}?sslmode=disable"
        )


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables

    USER, PASSWORD, DBNAME and PORT describe the database. DBHOST, HTTP_PORT,
    MISSING_AGE_POLICY and LOG_LEVEL are optional.

    Raises:
        ValueError: when a required variable is missing or a value is invalid
    """
    if env is None:
        env = os.environ

    db_user = env.get("USER")
    db_name = env.get("DBNAME")

    # Validate required environment variables
    if not db_user:
        raise ValueError("USER environment variable is required")
    if not db_name:
        raise ValueError("DBNAME environment variable is required")

    policy = env.get("MISSING_AGE_POLICY", MISSING_AGE_DEFAULT).strip().lower()
    if policy not in MISSING_AGE_POLICIES:
        raise ValueError(
            f"MISSING_AGE_POLICY must be one of {', '.join(MISSING_AGE_POLICIES)}, got {policy!r}"
        )

    settings = Settings(
        db_user=db_user,
        db_password=env.get("PASSWORD", ""),
        db_name=db_name,
        db_port=_int_env(env, "PORT", 5432),
        db_host=env.get("DBHOST") or "localhost",
        http_port=_int_env(env, "HTTP_PORT", 8080),
        missing_age_policy=policy,
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )

    if not settings.db_password:
        logger.warning("PASSWORD not set - connecting without a database password")
    logger.info(f"Database target: {settings.db_host}:{settings.db_port}/{settings.db_name}")
    return settings
