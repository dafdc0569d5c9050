"""Image transformation bridge: wraps the remote img2img backend.

Bridge boundary
---------------
The pipeline depends on the ``ImageTransformer`` protocol only.  The
``ImageTransformClient`` implementation posts each request to a Hugging
Face inference-style endpoint with ``httpx`` and returns the raw image
bytes of the response.

The client does not retry.  Retry policy belongs to the orchestrator.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from evolvechain.models.config import ClientConfig

logger = logging.getLogger(__name__)

NEGATIVE_PROMPT = "blurry, low quality, distorted"

DEFAULT_TRANSFORM_ENDPOINT = (
    "https://api-inference.huggingface.co/models/"
    "stabilityai/stable-diffusion-xl-refiner-1.0"
)


class TransformError(RuntimeError):
    """Raised when the remote image generation fails.

    ``status_code`` is set when the backend answered with an error status.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@runtime_checkable
class ImageTransformer(Protocol):
    """Protocol for image transformation backends."""

    def transform(self, source_image: bytes, prompt: str, strength: float) -> bytes:
        """Return a new image derived from *source_image* toward *prompt*."""
        ...


def build_transform_payload(
    source_image: bytes, prompt: str, strength: float
) -> dict[str, Any]:
    """Build the JSON body for one img2img request."""
    return {
        "inputs": {
            "image": base64.b64encode(source_image).decode("ascii"),
            "prompt": prompt,
            "negative_prompt": NEGATIVE_PROMPT,
            "denoising_strength": strength,
        }
    }


class ImageTransformClient:
    """Blocking img2img client for the remote generation backend.

    Parameters
    ----------
    config:
        Endpoint, key provider and timeout for the backend.
    transport:
        Optional ``httpx`` transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    @property
    def endpoint_url(self) -> str:
        return self._config.endpoint_url

    def transform(self, source_image: bytes, prompt: str, strength: float) -> bytes:
        """Send one transformation request and return the generated image.

        Raises
        ------
        TransformError
            On a non-success status, transport failure, timeout, or an
            empty response body.
        """
        headers = {
            "Authorization": f"Bearer {self._config.api_key_provider()}",
            "Accept": "image/*",
        }
        payload = build_transform_payload(source_image, prompt, strength)

        logger.info(
            "Transform request: strength=%.2f prompt=%s...",
            strength,
            prompt[:60],
        )
        try:
            with httpx.Client(
                timeout=self._config.timeout, transport=self._transport
            ) as client:
                response = client.post(
                    self._config.endpoint_url, json=payload, headers=headers
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = exc.response.text[:200]
            logger.warning(
                "Transform backend returned %d: %s", exc.response.status_code, detail
            )
            raise TransformError(
                f"Image backend error {exc.response.status_code}: {detail}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.TimeoutException as exc:
            logger.warning("Transform request timed out after %ss", self._config.timeout)
            raise TransformError(
                f"Image backend timed out after {self._config.timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Transform transport failure: %s", exc)
            raise TransformError(f"Cannot reach image backend: {exc}") from exc

        if not response.content:
            raise TransformError(
                "Image backend returned an empty body",
                status_code=response.status_code,
            )
        return response.content
