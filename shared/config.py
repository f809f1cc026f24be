"""
Shared configuration management for the IP whitelist access layer.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="WHITELIST_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class WhitelistConfig(BaseConfig):
    """Engine settings for the dual whitelist.

    Only behaviour is configured here; whitelist entries themselves are
    managed by the embedding service through the ACL API.
    """

    # Serialization
    json_format: str = Field(default="compatibility", pattern="^(compatibility|new)$")

    # Evaluation
    launch_policy: str = Field(default="sequenced", pattern="^(sequenced|concurrent)$")
    # The concurrent policy runs two checks at once
    max_workers: int = Field(default=4, ge=2)
    stubbed: bool = Field(default=False)

    # Gateway middleware
    client_ip_header: Optional[str] = Field(default=None)
    allow_paths: List[str] = Field(default_factory=lambda: ["/healthz"])


def get_config(**overrides) -> WhitelistConfig:
    """Get whitelist configuration, environment first, then overrides."""
    return WhitelistConfig(**overrides)
