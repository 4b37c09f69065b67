from functools import lru_cache
from typing import List, Optional
import logging
import os

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class ApimSettings(BaseSettings):
    """Settings for the remote API gateway fronting the product service."""

    BASE_URL: str = ""
    # Raw Authorization header value, e.g. "Basic dXNlcjpwYXNz"
    BASIC_AUTH: Optional[str] = None
    USERNAME: Optional[str] = None
    PASSWORD: Optional[str] = None
    SUBSCRIPTION_KEY: Optional[str] = None
    TRACE: Optional[str] = None
    TIMEOUT: float = 10.0  # seconds
    ENTITY_SET: str = "Products"
    PAGE_SIZE: int = 10

    model_config = SettingsConfigDict(
        env_prefix="APIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application configuration settings loaded from environment variables."""

    # API settings
    PROJECT_NAME: str = "Product Portal"
    DEBUG: bool = False

    # CORS settings
    # Comma separated list of allowed origins
    BACKEND_CORS_ORIGINS: str = "*"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    ENABLE_STRUCTURED_LOGGING: bool = True

    # Gateway settings
    apim: ApimSettings = Field(default_factory=ApimSettings)

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from the comma separated setting."""
        return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


def load_env_file(env_file: str = ".env") -> None:
    """
    Load environment variables from specified .env file.

    Args:
        env_file: Path to the .env file. Defaults to ".env".
    """
    env_path = os.path.join(os.getcwd(), env_file)
    if os.path.exists(env_path):
        load_dotenv(env_path)
    else:
        logger.debug(f"Environment file {env_path} not found, using process environment")


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings, built once per process.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
