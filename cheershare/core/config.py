# cheershare/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import AliasChoices, Field
from pydantic_settings import SettingsConfigDict
from typing import Optional, List
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application Settings
    APP_NAME: str = "Cheershare API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 4000))
    SHUTDOWN_GRACE_SECONDS: int = 5

    # Database Settings
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///./cheershare.db")
    DB_TIMEOUT_SECONDS: int = 3
    DB_POOL_SIZE: int = 25

    # Cache Settings (pending OTPs)
    REDIS_URL: str = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
    CACHE_TIMEOUT_SECONDS: int = 5
    OTP_TTL_SECONDS: int = 5 * 60
    OTP_KEY_PREFIX: str = "otp:"

    # Token Settings
    TOKEN_TTL_HOURS: int = 48

    # Twilio Settings (TWILIO_SID / TWILIO_API_KEY accepted for older deployments)
    TWILIO_ACCOUNT_SID: str = Field(default="", validation_alias=AliasChoices("TWILIO_ACCOUNT_SID", "TWILIO_SID"))
    TWILIO_AUTH_TOKEN: str = Field(default="", validation_alias=AliasChoices("TWILIO_AUTH_TOKEN", "TWILIO_API_KEY"))
    TWILIO_PHONE_NUMBER: str = os.environ.get("TWILIO_PHONE_NUMBER", "")
    SMS_COUNTRY_CODE: str = "+91"
    SMS_TIMEOUT_SECONDS: int = 15
    SMS_MAX_ATTEMPTS: int = 3
    SMS_RETRY_DELAY_SECONDS: float = 2.0

    # Background work (SMS dispatch)
    BACKGROUND_WORKERS: int = 4

    # CORS Settings
    ALLOWED_ORIGINS: str = os.environ.get("ALLOWED_ORIGINS", "*")
    ALLOWED_METHODS: str = os.environ.get("ALLOWED_METHODS", "GET,POST,OPTIONS")
    ALLOWED_HEADERS: str = os.environ.get("ALLOWED_HEADERS", "*")
    CORS_ALLOW_CREDENTIALS: bool = True

    # File Upload Settings
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_IMAGE_EXTENSIONS: List[str] = [".jpg", ".jpeg", ".png", ".gif"]
    UPLOAD_DIR: str = "uploads"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Helper methods for list envs
    def _split_csv(self, value: Optional[str]) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def allowed_methods_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_METHODS)

    @property
    def allowed_headers_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_HEADERS)

@lru_cache()
def get_settings() -> Settings:
    s = Settings()
    # Normalize ALLOWED_ORIGINS if provided as comma-separated string env var CORS_ORIGINS
    cors_env = os.environ.get("CORS_ORIGINS")
    if cors_env:
        s.ALLOWED_ORIGINS = cors_env
    return s

settings: Settings = get_settings()
