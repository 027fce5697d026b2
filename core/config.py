"""Runtime settings for depscout using Pydantic Settings.

Environment variables (prefix ``DEPSCOUT_``):
    DEPSCOUT_REGISTRY_TIMEOUT: Seconds allowed per registry request
    DEPSCOUT_MAX_CONCURRENCY: Parallel registry lookups
    DEPSCOUT_COMMAND_TIMEOUT: Seconds allowed for version lookup commands
    DEPSCOUT_INSTALL_TIMEOUT: Seconds allowed per install/update command
    DEPSCOUT_CLI_FALLBACK: Ask the package manager CLI when a registry fails
    DEPSCOUT_LOG_LEVEL: Logging level
    DEPSCOUT_LOG_JSON: Emit NDJSON log records
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for registry lookups and package manager invocations."""

    model_config = SettingsConfigDict(
        env_prefix="DEPSCOUT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    registry_timeout: float = Field(default=10.0, gt=0, description="Registry request timeout in seconds")
    max_concurrency: int = Field(default=6, ge=1, le=32, description="Maximum concurrent registry lookups")
    command_timeout: float = Field(default=60.0, gt=0, description="Timeout for version lookup commands")
    install_timeout: float = Field(default=300.0, gt=0, description="Timeout for each install command")
    cli_fallback: bool = Field(default=True, description="Fall back to package manager CLIs")
    user_agent: str = Field(default="depscout/0.1.0 (dependency checker)")

    npm_registry_url: str = "https://registry.npmjs.org"
    crates_registry_url: str = "https://crates.io/api/v1/crates"
    pypi_registry_url: str = "https://pypi.org/pypi"
    go_proxy_url: str = "https://proxy.golang.org"
    rubygems_registry_url: str = "https://rubygems.org/api/v1/gems"

    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Emit NDJSON log records")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings loaded from the environment."""
    return Settings()
