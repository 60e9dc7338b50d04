"""
Configuration management for the batch codec.

Supports configuration via environment variables and .env files.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BatchConfig(BaseSettings):
    """
    Configuration settings for batch encoding and decoding.
    
    All settings can be configured via environment variables with the ODATA_BATCH_ prefix.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="ODATA_BATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )
    
    # Decoder settings
    max_nesting_depth: int = Field(
        default=8,
        ge=1,
        description="Deepest multipart nesting the decoder will follow (top level is 1)"
    )
    strict_content_types: bool = Field(
        default=False,
        description="Raise on parts that are neither multipart/mixed nor application/http"
    )
    
    # Encoder settings
    boundary_prefix: str = Field(
        default="batch_",
        description="Prefix for generated top-level boundary tokens"
    )
    
    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )


# Global config instance
_config: Optional[BatchConfig] = None


def get_config() -> BatchConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = BatchConfig()
    return _config


def set_config(config: Optional[BatchConfig]) -> None:
    """Set the global configuration instance (None resets to defaults on next access)."""
    global _config
    _config = config
