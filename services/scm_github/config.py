"""
Configuration management for the SCM adapter.

Non-secret configuration loaded from YAML file, secrets from environment variables.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = "/etc/scm-github/config.yaml"


def yaml_config_settings_source() -> dict[str, Any]:
    """Load configuration from YAML file."""
    config_path = Path(os.environ.get("SCM_GITHUB_CONFIG_FILE", DEFAULT_CONFIG_PATH))
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


# --- Provider Configuration ---


class GitHubConfig(BaseModel):
    """GitHub REST API and webhook configuration."""

    api_url: str = Field(default="https://api.github.com", description="GitHub API base URL")
    user_agent: str = Field(default="scm-github")
    webhook_secret: str = Field(
        default="",
        description="Webhook secret for HMAC signature validation (optional)",
    )


# --- Resilience Configuration ---


class RetryConfig(BaseModel):
    """Retry policy for transient provider failures."""

    retries: int = Field(default=5, ge=0, description="Extra attempts after the first")
    factor: float = Field(default=2.0, ge=1.0, description="Exponential backoff factor")
    min_timeout: float = Field(
        default=1.0, ge=0, description="Delay in seconds before the first retry"
    )
    max_timeout: float = Field(default=30.0, ge=0, description="Upper bound on a single delay")


class BreakerConfig(BaseModel):
    """Circuit breaker and per-attempt timeout configuration."""

    max_failures: int = Field(
        default=5, ge=1, description="Consecutive failed calls before the breaker opens"
    )
    reset_timeout: float = Field(
        default=30.0,
        ge=0,
        description="Seconds the breaker stays open before admitting a trial call",
    )
    timeout: float | None = Field(
        default=10.0, description="Per-attempt timeout in seconds (None disables)"
    )


class ScmOptions(BaseModel):
    """Options accepted by GithubScm."""

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    breaker: BreakerConfig = Field(default_factory=BreakerConfig)


# --- Main Settings ---


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SCM_GITHUB_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="scm-github")
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True, description="JSON logging in production")

    # Provider and resilience
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    breaker: BreakerConfig = Field(default_factory=BreakerConfig)

    # API
    api_prefix: str = Field(default="/v1")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings sources: env vars override YAML config."""
        return (
            init_settings,
            env_settings,
            yaml_config_settings_source,
            dotenv_settings,
            file_secret_settings,
        )

    def scm_options(self) -> ScmOptions:
        return ScmOptions(github=self.github, retry=self.retry, breaker=self.breaker)


# Global settings instance
settings = Settings()
