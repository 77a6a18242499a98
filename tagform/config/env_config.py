from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database Configuration
    DB_DRIVER: str = "postgresql+psycopg2"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "tagform"
    DATABASE_URL: Optional[str] = None  # Full URL, overrides the individual parts
    DB_ECHO: bool = False

    @property
    def database_url(self) -> str:
        """Construct database URL from individual components"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"{self.DB_DRIVER}://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # JWT Configuration
    ACCESS_TOKEN_EXP_TIME: int = 60
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    REFRESH_TOKEN_EXP_TIME: int = 60 * 24 * 7
    REFRESH_SECRET_KEY: str
    BCRYPT_ROUNDS: int = 12

    # Outgoing email webhook (welcome mail after registration)
    EMAIL_WEBHOOK_WELCOME: str = "http://localhost:5678/webhook/welcome-email"
    EMAIL_WEBHOOK_TIMEOUT: float = 10.0

    # Google OAuth
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_AUTH_URL: str = "https://accounts.google.com/o/oauth2/v2/auth"

    # Frontend URL, used for OAuth callbacks
    CLIENT_URL: str = "http://localhost:3000"
    CORS_ORIGINS: List[str] = ["*"]

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Slug generation retries when a concurrent insert wins the race
    SLUG_MAX_RETRIES: int = 3

    # Number of most frequent answers kept per text question
    ANALYTICS_TOP_RESPONSES: int = 10

    # Logging Configuration
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_TO_FILE: bool = True
    LOG_DIR: str = "logs"


# Global settings instance
settings = Settings()
