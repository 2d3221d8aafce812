from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, SecretStr
from typing import List, Optional


DEFAULT_TIME_SLOTS = [
    "8:00 AM - 9:00 AM",
    "9:00 AM - 10:00 AM",
    "10:00 AM - 11:00 AM",
    "11:00 AM - 12:00 PM",
    "12:00 PM - 1:00 PM",
    "1:00 PM - 2:00 PM",
    "2:00 PM - 3:00 PM",
    "3:00 PM - 4:00 PM",
    "4:00 PM - 5:00 PM",
    "5:00 PM - 6:00 PM",
    "6:00 PM - 7:00 PM",
]


class Settings(BaseSettings):
    PROJECT_NAME: str = "Library Room Booking"
    DATABASE_URL: str = "sqlite+aiosqlite:///./library_booking.db"
    SECRET_KEY: SecretStr = SecretStr("change-me-in-production")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # Bookable hourly slots, in display order
    TIME_SLOTS: List[str] = Field(default_factory=lambda: list(DEFAULT_TIME_SLOTS))

    # Telegram bot used for admin / owner booking notifications
    TELEGRAM_BOT_TOKEN: SecretStr | None = None
    TELEGRAM_ADMIN_CHAT_ID: Optional[str] = None
    TELEGRAM_API_BASE: str = "https://api.telegram.org"
    TELEGRAM_TIMEOUT_SECONDS: float = 10.0

    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

settings = Settings()
