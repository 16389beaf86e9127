from typing import Final

from pydantic import Field, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_PORT
from .domain.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env files."""

    # Server configuration
    debug: bool = Field(default=True, description="Enable debug mode")
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Server port")

    # Database configuration
    database_url: str = Field(
        default="sqlite:///./lms_activity.db", description="Database connection URL"
    )
    db_name: str = Field(default="lms_activity", description="Database name for SQLite")

    # Application configuration
    app_name: str = Field(default="LMS Activity", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")

    # Activity log listing
    default_page_limit: int = Field(
        default=DEFAULT_PAGE_LIMIT, ge=1, description="Logs per page when not given"
    )
    max_page_limit: int = Field(
        default=MAX_PAGE_LIMIT, ge=1, description="Upper bound for logs per page"
    )

    # Logging configuration
    log_to_file: bool = Field(
        default=False, description="Force logging to file even in debug mode"
    )

    # Pydantic Settings configuration
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @model_validator(mode="after")
    def validate_page_limits(self) -> "Settings":
        """Keep the default page size within the allowed maximum."""
        if self.default_page_limit > self.max_page_limit:
            raise ValueError(
                "default_page_limit cannot be larger than max_page_limit "
                f"({self.default_page_limit} > {self.max_page_limit})"
            )
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.debug

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not self.debug

    @computed_field  # type: ignore[prop-decorator]
    @property
    def effective_database_url(self) -> str:
        """Get the effective database URL, handling SQLite with db_name."""
        if (
            self.database_url == "sqlite:///./lms_activity.db"
            and self.db_name != "lms_activity"
        ):
            return f"sqlite:///./{self.db_name}.db"
        return self.database_url


# Global settings instance
settings: Final = Settings()
