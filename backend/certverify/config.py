"""Application configuration management."""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./certificates.db"
    DB_CONNECT_TIMEOUT: int = 5  # Seconds before a connection attempt is abandoned

    @property
    def async_database_url(self) -> str:
        """Get DATABASE_URL with an async driver for SQLAlchemy.

        Converts postgresql:// to postgresql+asyncpg:// automatically.
        """
        if self.DATABASE_URL.startswith("postgresql://"):
            return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)
        return self.DATABASE_URL

    @property
    def is_sqlite(self) -> bool:
        return self.async_database_url.startswith("sqlite")

    # Application
    ENVIRONMENT: str = "development"  # development, staging, or production
    DEBUG: bool = False
    SECRET_KEY: str = "change-me"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    ISSUER_NAME: str = "STEM CS Club"

    # JWT
    JWT_SECRET_KEY: str = ""  # If empty, uses SECRET_KEY
    JWT_REFRESH_SECRET_KEY: str = ""  # If empty, derived from the access key
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    @property
    def jwt_access_key(self) -> str:
        return self.JWT_SECRET_KEY or self.SECRET_KEY

    @property
    def jwt_refresh_key(self) -> str:
        return self.JWT_REFRESH_SECRET_KEY or f"{self.jwt_access_key}refresh"

    # Login lockout
    MAX_FAILED_LOGINS: int = 5
    LOCKOUT_MINUTES: int = 30

    # Rate limiting (slowapi limit strings)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/15 minutes"
    RATE_LIMIT_AUTH: str = "5/15 minutes"

    # Default Admin (optional - for automatic bootstrapping on startup)
    ADMIN_USERNAME: str = ""  # If set, creates a super admin when none exists
    ADMIN_EMAIL: str = ""
    ADMIN_PASSWORD: str = ""
    ADMIN_FULL_NAME: str = "Administrator"

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_version() -> str:
    """Get application version string (e.g. "v1.0.0")."""
    from certverify.version import VERSION

    return f"v{VERSION}"
