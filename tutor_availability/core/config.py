from pydantic_settings import BaseSettings
from typing import List
import os


class Settings(BaseSettings):
    # App Configuration
    APP_NAME: str = "Tutor Availability API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS
    ALLOWED_HOSTS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./tutor_availability.db")
    DATABASE_ECHO: bool = False

    # Availability resolution
    SLOT_INCREMENT_MINUTES: int = 30
    DEFAULT_WINDOW_DAYS: int = 30
    MIN_WINDOW_DAYS: int = 1
    MAX_WINDOW_DAYS: int = 60
    DEFAULT_TIMEZONE: str = "UTC"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create settings instance
settings = Settings()

# Update allowed hosts for production
if os.getenv("ENVIRONMENT") == "production":
    settings.ALLOWED_HOSTS.extend([
        "https://tutors.vercel.app"
    ])
