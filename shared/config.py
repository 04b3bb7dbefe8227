"""
Shared configuration management for the access-rules evaluator.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AccessRulesSettings(BaseSettings):
    """Settings read from the environment (prefix ``ACCESS_RULES_``)."""

    model_config = SettingsConfigDict(
        env_prefix="ACCESS_RULES_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    log_json: bool = Field(default=True)

    # Role under which inherited and role-less definitions are stored
    inherited_role: str = Field(default="inherited")

    # Observability
    metrics_enabled: bool = Field(default=True)


@lru_cache(maxsize=1)
def get_settings() -> AccessRulesSettings:
    """Get the process-wide settings."""
    return AccessRulesSettings()
