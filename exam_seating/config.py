from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import Any, List
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from a JSON list or a comma-separated string"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # Application
    APP_NAME: str = "Exam Seating API"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # Server
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite:///./exam_seating.db"
    DB_ECHO: bool = False

    # Auth (tokens are issued by the auth service, we only verify them)
    JWT_SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # Seating
    DEFAULT_BENCH_CAPACITY: int = 2
    SEATING_LINK: str = "/my-seating"
    NOTIFICATIONS_ENABLED: bool = True
    EXPORT_DIR: str = "./exports"

    CORS_ORIGINS: Any = ["http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def validate_cors_origins(cls, v):
        return parse_cors_origins(v)

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
