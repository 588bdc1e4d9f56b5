from decimal import Decimal
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # API Settings
    PROJECT_NAME: str = "Parking Commission API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Parking payment ledger and commission reporting API"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Storage: "mongo" or "memory"
    STORAGE_BACKEND: str = "mongo"

    # MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "parking_commissions"

    # Commission
    COMMISSION_RATE: Decimal = Field(default=Decimal("0.10"), gt=0, lt=1)
    CURRENCY: str = "PHP"

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
