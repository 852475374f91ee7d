# storefront/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    # Remote authority
    API_BASE_URL: str = "http://localhost:3001/api"
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    # Identity bootstrap
    ADMIN_USERNAME: str = "admin"
    BOT_USERNAME: str = "ResellHubBot"
    ENVIRONMENT: str = "development"
    TELEGRAM_INIT_DATA: Optional[str] = None
    TELEGRAM_BOT_TOKEN: Optional[str] = None

    # Refetch the catalog after an order confirmation removes products locally
    REFRESH_CATALOG_AFTER_CONFIRM: bool = False

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

settings = Settings()
