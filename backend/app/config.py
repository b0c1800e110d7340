"""Application configuration using Pydantic settings."""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    db_statement_timeout_ms: int = 5000
    db_pool_timeout_seconds: int = 10

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    environment: str = "development"
    log_level: Optional[str] = None

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Daily AI generation quota
    daily_credit_limit: int = 10

    # Bounded retries for transient storage failures (handler side)
    storage_retry_attempts: int = 3
    storage_retry_delay_seconds: float = 0.2

    # AI edit generator
    edit_generator_url: Optional[str] = None
    edit_generator_timeout_seconds: float = 120.0

    # Image search (Pexels)
    pexels_api_key: Optional[str] = None
    pexels_api_url: str = "https://api.pexels.com/v1"

    # Administrative operations (quota reset)
    admin_api_key: Optional[str] = None

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
