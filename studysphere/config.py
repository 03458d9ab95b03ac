"""
StudySphere Configuration
Environment is read once into an explicit settings object
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_timeout_seconds: float = 30.0
    mongo_url: str = "mongodb://localhost:27017"
    db_name: str = "studysphere"
    jwt_secret_key: Optional[str] = None
    frontend_url: str = "http://localhost:5173"
    app_env: str = "development"
    inngest_signing_key: Optional[str] = None  # background-job dev server only
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


def load_settings() -> Settings:
    """Build settings from the process environment"""
    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        gemini_timeout_seconds=float(os.getenv("GEMINI_TIMEOUT_SECONDS", "30")),
        mongo_url=os.getenv("MONGO_URL", "mongodb://localhost:27017"),
        db_name=os.getenv("DB_NAME", "studysphere"),
        jwt_secret_key=os.getenv("JWT_SECRET_KEY"),
        frontend_url=os.getenv("FRONTEND_URL", "http://localhost:5173"),
        app_env=os.getenv("APP_ENV", "development"),
        inngest_signing_key=os.getenv("INNGEST_SIGNING_KEY"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


@lru_cache
def get_settings() -> Settings:
    """Settings dependency (cached for the process lifetime)"""
    return load_settings()
