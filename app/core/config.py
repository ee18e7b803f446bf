from pydantic_settings import BaseSettings
from typing import List, Optional
from pathlib import Path


class Settings(BaseSettings):
    # Database - local SQLite file by default, override with environment variable for production
    DATABASE_URL: str = "sqlite:///./expense_tracker.db"

    # JWT
    SECRET_KEY: str = "your-secret-key-here"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Redis (alert store backend and Celery broker)
    REDIS_URL: str = "redis://localhost:6379"

    # Email (Resend); alert e-mails are skipped while no API key is set
    RESEND_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "Expense Tracker <alerts@expense-tracker.local>"

    # Budget alerts
    ALERT_STORE_BACKEND: str = "memory"  # memory | redis
    ALERT_STORE_TTL_SECONDS: int = 0  # 0 => pending alerts never expire

    # App Settings
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    SEED_ON_STARTUP: bool = True
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    class Config:
        env_file = Path(__file__).parent.parent.parent / ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"


settings = Settings()
