from pydantic_settings import BaseSettings
from typing import List, Union, Optional
from pydantic import field_validator


class Settings(BaseSettings):
    # Database
    POSTGRES_USER: str = "mediahub"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "mediahub"
    DATABASE_URL: Optional[str] = None  # Full URL override (e.g. sqlite:///./mediahub.db)

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Return DATABASE_URL if set, otherwise construct it from components."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Application
    SECRET_KEY: str
    DEBUG: bool = False
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Split by comma or keep as single item
            return [origin.strip() for origin in v.split(",")]
        return v

    # Storage (physical files live elsewhere; only metadata is stored here)
    MAX_FILE_SIZE: int = 100 * 1024 * 1024  # 100MB per file

    # Slugs
    TAG_SLUG_MAX_LENGTH: int = 50
    PUBLICATION_SLUG_MAX_LENGTH: int = 191  # Matches the VARCHAR(191) slug column

    # Category deletion: what to do when the publication-count check itself fails.
    # True keeps the legacy behavior (log and allow the delete).
    CATEGORY_DELETE_FAIL_OPEN: bool = True

    # Listing
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/minute"
    RATE_LIMIT_ENGAGEMENT: str = "30/minute"  # likes, comments, views

    # View tracking
    VIEWER_COOKIE_NAME: str = "mh_viewer"

    # Cookie Security
    COOKIE_SECURE: bool = True
    ENABLE_HSTS: bool = True
    HSTS_MAX_AGE: int = 31536000  # 1 year in seconds

    @property
    def is_production(self) -> bool:
        """Detect if running in production environment."""
        return self.COOKIE_SECURE and not self.DEBUG

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
