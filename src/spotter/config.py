"""Configuration management for Spotter."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = Field(
        default="sqlite+aiosqlite:///spotter.db",
        description="SQLAlchemy async database URL",
    )
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Max overflow connections")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")


class CatalogConfig(BaseModel):
    """System exercise catalog source."""

    source: str = Field(
        default="http://localhost:5173/exercises/systemExercises.json",
        description="HTTP(S) URL or local file path of the catalog JSON",
    )
    timeout: float = Field(default=10.0, description="Request timeout in seconds")
    retry_attempts: int = Field(
        default=3, description="Attempts on transport errors before falling back"
    )
    preview_chars: int = Field(
        default=200, description="Response preview length in load diagnostics"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Log level"
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )


class Config(BaseSettings):
    """Main application configuration."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Application settings
    debug: bool = Field(default=False, description="Enable debug mode")
    environment: Literal["development", "production"] = Field(
        default="development", description="Application environment"
    )

    class Config:
        env_nested_delimiter = "__"
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global configuration instance
config = Config()
