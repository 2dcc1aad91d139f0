"""
Configuration management for multifeed.

Encoder defaults (CDATA policy, indentation, extra XML namespaces) and
application metadata are loaded from environment variables, an optional
.env file, and defaults.

Responsibility: Centralized, read-only configuration for the encoders
"""

from typing import Optional, Dict
import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class AppConfig(BaseSettings):
    """Application metadata"""

    app_name: str = Field(default="multifeed")
    app_version: str = Field(default="1.0.0")

    # Logging
    log_level: str = Field(default="WARNING")

    model_config = SettingsConfigDict(
        env_prefix="MULTIFEED_APP_",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def parse_log_level(cls, v):
        """Normalize the level name and reject names logging does not know"""
        level = str(v).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


class EncoderConfig(BaseSettings):
    """Encoder configuration shared by all output formats"""

    # Default CDATA flag for XML targets; a "_xml:cdata" node overrides it per scope
    use_cdata: bool = Field(default=True)

    # Writer settings
    pretty_print: bool = Field(default=True)
    json_indent: int = Field(default=2, ge=0)

    # RSS <generator> when no "_rss:generator" node is given
    generator: Optional[str] = Field(default=None)

    # Additional prefix -> namespace URI mappings for extension nodes
    extra_namespaces: Dict[str, str] = Field(
        default_factory=dict,
        description="Extra namespaces (JSON object or comma-separated prefix=uri in env)"
    )

    model_config = SettingsConfigDict(
        env_prefix="MULTIFEED_",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("extra_namespaces", mode="before")
    @classmethod
    def parse_extra_namespaces(cls, v):
        """Parse namespaces from a JSON object or comma-separated prefix=uri pairs"""
        if isinstance(v, dict):
            return v
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return {}
            # Try parsing as JSON first
            if v.startswith("{"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Fall back to comma-separated
            pairs = {}
            for chunk in v.split(","):
                prefix, sep, uri = chunk.partition("=")
                if sep and prefix.strip() and uri.strip():
                    pairs[prefix.strip()] = uri.strip()
            return pairs
        return v


class Settings(BaseSettings):
    """
    Global settings container.

    Loads configuration from:
    1. Environment variables
    2. .env file
    3. Default values

    Example:
        # Disable CDATA wrapping everywhere unless a feed opts back in
        settings = Settings(encoder=EncoderConfig(use_cdata=False))
    """

    app: AppConfig = Field(default_factory=AppConfig)
    encoder: EncoderConfig = Field(default_factory=EncoderConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
