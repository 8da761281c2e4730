"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost/mealcart"

    # Redis (Celery broker)
    redis_url: str = "redis://localhost:6379/0"

    # Shopping lists
    shopping_list_retention_weeks: int = 5  # Lists kept per user, newest weeks first
    max_weeks_ahead: int = 4  # Furthest week a list can be looked up for

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def sync_database_url(self) -> str:
        """Database URL for the synchronous driver used by the Celery result backend."""
        return self.database_url.replace("+asyncpg", "")

    @property
    def origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
