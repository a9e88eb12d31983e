import logging
from typing import List, Optional, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv
import secrets

load_dotenv()


class Settings(BaseSettings):
    # ============================================================
    # APPLICATION INFO
    # ============================================================
    PROJECT_NAME: str = "Ranner Flights API"
    VERSION: str = "1.0.0"
    ENVIRONMENT: Literal["development", "test", "staging", "production"] = "development"
    DEBUG: bool = False

    # ============================================================
    # FLIGHT PROVIDER (AMADEUS SELF-SERVICE)
    # ============================================================
    AMADEUS_API_KEY: str = ""
    AMADEUS_API_SECRET: str = ""
    AMADEUS_BASE_URL: str = "https://test.api.amadeus.com"
    AMADEUS_TOKEN_PATH: str = "/v1/security/oauth2/token"
    PROVIDER_TIMEOUT_S: float = 20.0
    DEFAULT_CURRENCY: str = "USD"

    # ============================================================
    # DATABASE (MySQL)
    # ============================================================
    DATABASE_URL: Optional[str] = None
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: Optional[int] = 3306
    DB_NAME: Optional[str] = None

    @property
    def get_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL

        if all([self.DB_USER, self.DB_PASSWORD, self.DB_HOST, self.DB_NAME]):
            return f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

        raise ValueError("DATABASE_URL or DB_* variables must be set")

    # ============================================================
    # SECURITY (JWT)
    # ============================================================
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days
    ALGORITHM: str = "HS256"

    # ============================================================
    # FRONTEND / CORS
    # ============================================================
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # ============================================================
    # LOGGING
    # ============================================================
    LOG_LEVEL: str = "INFO"

    # ============================================================
    # PYDANTIC CONFIG
    # ============================================================
    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


# ============================================================
# GLOBAL INSTANCE
# ============================================================
settings = Settings()


# ============================================================
# VALIDATION
# ============================================================
def validate_required_settings():
    missing = []

    if not settings.AMADEUS_API_KEY:
        missing.append("AMADEUS_API_KEY")
    if not settings.AMADEUS_API_SECRET:
        missing.append("AMADEUS_API_SECRET")

    if missing:
        raise ValueError(f"Missing required env vars: {', '.join(missing)}")


try:
    validate_required_settings()
except ValueError as e:
    logging.warning(f"Config warning: {e}")
