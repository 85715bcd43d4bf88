# backend/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    PASSWORD_TOKEN_EXPIRE_MINUTES: int = 10
    DATABASE_URL: str = "sqlite:///./database_storefront.db"

    # Origin of the storefront frontend, used for links in emails and CORS
    FRONTEND_URL: str = "http://localhost:5173"
    ENVIRONMENT: str = "development"

    # SMTP delivery; without SMTP_HOST emails are only logged
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    MAIL_FROM: Optional[str] = None

    UPLOAD_DIR: str = "static/uploads"
    MAX_IMAGE_SIZE: int = 1024 * 1024

    # Mounts /auth/test-register and /auth/test-forgot-password which expose raw tokens
    ENABLE_TEST_ROUTES: bool = False
    LOG_LEVEL: str = "INFO"

    @property
    def secure_cookies(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
