"""Application configuration management."""

import logging
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from seedream_mcp.core.errors import ConfigurationError
from seedream_mcp.core.models import ModelVersion

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    These settings are read once from the .env file or environment variables
    at startup and are not changed afterwards.

    Attributes:
        replicate_api_token: Replicate API token; without it every call fails
        seedream_model_version: Which SeedDream variant to serve (v3 or v4)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        max_concurrent_requests: Declared concurrency hint, not enforced
        request_timeout: Upstream call timeout in milliseconds
        output_dir: Directory generated images are saved to
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    # API Keys
    replicate_api_token: Optional[str] = None

    # Model Configuration
    seedream_model_version: ModelVersion = ModelVersion.V4

    # Application Settings
    log_level: str = "INFO"
    max_concurrent_requests: int = 3
    request_timeout: int = 300000
    output_dir: str = "images"

    @field_validator("log_level", mode="before")
    @classmethod
    def _known_log_level(cls, value):
        level = str(value).upper()
        if level == "WARN":
            level = "WARNING"
        if level not in LOG_LEVELS:
            logger.warning(f"Unknown LOG_LEVEL {value!r}, falling back to INFO")
            return "INFO"
        return level

    @field_validator("seedream_model_version", mode="before")
    @classmethod
    def _known_model_version(cls, value):
        if isinstance(value, str):
            version = value.strip().lower()
            if version not in {v.value for v in ModelVersion}:
                logger.warning(f"Unknown SEEDREAM_MODEL_VERSION {value!r}, falling back to v4")
                return ModelVersion.V4
            return version
        return value

    def validate_required_keys(self) -> None:
        """Validate that required API keys are present.

        Raises:
            ConfigurationError: If the Replicate token is missing
        """
        if not self.replicate_api_token:
            raise ConfigurationError(
                "REPLICATE_API_TOKEN environment variable is required. "
                "Please set it in your .env file or environment variables. "
                "Get your token from: https://replicate.com/account/api-tokens"
            )


# Global settings instance
settings = Settings()
