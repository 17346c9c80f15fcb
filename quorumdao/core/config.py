"""
Configuration management for quorumdao.
"""
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Chain Configuration
    chain_id: int = 1

    # Digest domain separation
    protocol_tag: str = "quorumdao.transaction.v1"
    batch_protocol_tag: str = "quorumdao.batch.v1"

    # Organization defaults
    default_quorum: int = 51

    # Off-chain proposer key used by the CLI ``sign`` command
    proposer_private_key: Optional[str] = None

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "text"
    log_file_enabled: bool = False
    log_file_path: str = "./logs/quorumdao.log"

    @field_validator("default_quorum")
    @classmethod
    def validate_quorum(cls, v):
        """Quorum is a percentage of total voting weight."""
        if not 1 <= v <= 100:
            raise ValueError("Quorum must be between 1 and 100")
        return v

    @field_validator("chain_id")
    @classmethod
    def validate_chain_id(cls, v):
        """Validate chain id is a positive integer."""
        if v <= 0:
            raise ValueError("Chain id must be positive")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Only structured JSON and plain text output are supported."""
        v = v.lower()
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @field_validator("proposer_private_key")
    @classmethod
    def validate_private_key(cls, v):
        """Validate private key format if provided."""
        if v and not (isinstance(v, str) and len(v) in [64, 66]):
            raise ValueError("Private key must be 64 or 66 characters long")
        return v

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "env_prefix": "QUORUMDAO_",
        "extra": "ignore",
    }


# Create global settings instance
settings = Settings()


def get_settings() -> Settings:
    return settings
