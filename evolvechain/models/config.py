"""Client and pipeline configuration models.

Credentials are injected through these objects at construction time;
no component reads process-wide state for its API keys.
"""

from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field, model_validator


def static_key(value: str) -> Callable[[], str]:
    """Wrap a fixed API key as a key provider."""

    def _provider() -> str:
        return value

    return _provider


class ClientConfig(BaseModel):
    """Connection settings for a remote backend client.

    ``api_key_provider`` is called once per request, so rotating keys
    take effect without rebuilding the client.
    """

    model_config = ConfigDict(frozen=True)

    endpoint_url: str
    api_key_provider: Callable[[], str] = Field(default=static_key(""), repr=False)
    timeout: float = Field(default=60.0, gt=0)


class PipelineConfig(BaseModel):
    """Per-pipeline generation policy."""

    model_config = ConfigDict(frozen=True)

    name_prefix: str = "Evolving NFT"
    max_attempts: int = Field(default=1, ge=1)  # 1 means no retry
    min_strength: float = 0.0
    max_strength: float = 1.0

    @model_validator(mode="after")
    def _check_strength_range(self) -> PipelineConfig:
        if self.min_strength > self.max_strength:
            raise ValueError(
                f"min_strength {self.min_strength} exceeds max_strength {self.max_strength}"
            )
        return self

    def clamp_strength(self, strength: float) -> float:
        """Clamp a composed strength into the backend's valid range."""
        return max(self.min_strength, min(strength, self.max_strength))
