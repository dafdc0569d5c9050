"""Runtime configuration: env-driven via pydantic-settings.

Reads from a .env file and EVOLVECHAIN_* environment variables.  Only
the CLI builds an ``EvolveConfig``; library components receive
``ClientConfig`` / ``PipelineConfig`` objects built from it.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from evolvechain.bridge.publisher import DEFAULT_GATEWAY, DEFAULT_STORAGE_ENDPOINT
from evolvechain.bridge.transform import DEFAULT_TRANSFORM_ENDPOINT
from evolvechain.models.config import ClientConfig, PipelineConfig


class EvolveConfig(BaseSettings):
    """Runtime configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export EVOLVECHAIN_TRANSFORM_API_KEY=hf_...
        export EVOLVECHAIN_STORAGE_API_KEY=eyJ...
        export EVOLVECHAIN_LOG_LEVEL=DEBUG

    Or via .env file::

        EVOLVECHAIN_DEFAULT_STAGE_COUNT=3
        EVOLVECHAIN_MAX_ATTEMPTS=2
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="EVOLVECHAIN_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"

    # Image transformation backend
    transform_endpoint: str = DEFAULT_TRANSFORM_ENDPOINT
    transform_api_key: SecretStr = SecretStr("")
    transform_timeout_seconds: float = 120.0

    # Content storage backend
    storage_endpoint: str = DEFAULT_STORAGE_ENDPOINT
    storage_api_key: SecretStr = SecretStr("")
    storage_timeout_seconds: float = 60.0
    ipfs_gateway: str = DEFAULT_GATEWAY
    local_store_path: Path = Path(".evolvechain/store")

    # Generation policy
    default_stage_count: int = 5
    max_attempts: int = 1
    name_prefix: str = "Evolving NFT"
    min_strength: float = 0.0
    max_strength: float = 1.0

    def transform_client_config(self) -> ClientConfig:
        """Build the injected config for the image transformation client."""
        return ClientConfig(
            endpoint_url=self.transform_endpoint,
            api_key_provider=self.transform_api_key.get_secret_value,
            timeout=self.transform_timeout_seconds,
        )

    def storage_client_config(self) -> ClientConfig:
        """Build the injected config for the storage publisher."""
        return ClientConfig(
            endpoint_url=self.storage_endpoint,
            api_key_provider=self.storage_api_key.get_secret_value,
            timeout=self.storage_timeout_seconds,
        )

    def pipeline_config(self) -> PipelineConfig:
        """Build the generation policy for an EvolutionPipeline."""
        return PipelineConfig(
            name_prefix=self.name_prefix,
            max_attempts=self.max_attempts,
            min_strength=self.min_strength,
            max_strength=self.max_strength,
        )
