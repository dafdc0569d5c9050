"""Content publishing bridge: stores stage images and metadata documents.

Two backends satisfy the ``ContentPublisher`` protocol:

1. **NFTStoragePublisher**: a single multipart ``/store`` call to an
   NFT.Storage-compatible service.  The service links the uploaded image
   into the metadata document and returns the IPFS root id, from which a
   gateway URI is built.
2. **LocalPublisher**: a SHA-256 content-addressed directory store.  The
   image and the metadata document are both blobs; the returned
   reference is the ``file://`` URI of the metadata blob.

Either way a reference is returned only after both the image and the
metadata are stored.  Neither backend retries.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx

from evolvechain.core.hasher import canonical_json_bytes
from evolvechain.core.store import ArtifactIntegrityError, ContentAddressedStore
from evolvechain.models.config import ClientConfig
from evolvechain.models.metadata import MetadataRecord

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_ENDPOINT = "https://api.nft.storage"
DEFAULT_GATEWAY = "ipfs.io"


class PublishError(RuntimeError):
    """Raised when a stage could not be stored; no reference is usable."""


@runtime_checkable
class ContentPublisher(Protocol):
    """Protocol for content-addressed publishing backends."""

    def publish(self, image: bytes, metadata: MetadataRecord) -> str:
        """Store *image* and *metadata*; return the metadata reference."""
        ...


def gateway_metadata_uri(gateway: str, root_id: str) -> str:
    """Build the dereferenceable metadata URI for an IPFS root id."""
    host = gateway.removeprefix("https://").removeprefix("http://").rstrip("/")
    return f"https://{host}/ipfs/{root_id}/metadata.json"


# ---------------------------------------------------------------------------
# Remote backend
# ---------------------------------------------------------------------------


class NFTStoragePublisher:
    """Publishes stages to an NFT.Storage-compatible ``/store`` endpoint.

    Parameters
    ----------
    config:
        Endpoint, key provider and timeout for the storage service.
    gateway:
        IPFS gateway host used to build returned references.
    transport:
        Optional ``httpx`` transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        gateway: str = DEFAULT_GATEWAY,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._gateway = gateway
        self._transport = transport

    @property
    def store_url(self) -> str:
        return f"{self._config.endpoint_url.rstrip('/')}/store"

    def publish(self, image: bytes, metadata: MetadataRecord) -> str:
        """Upload the image and its linked metadata in one request.

        Raises
        ------
        PublishError
            On a non-success status, an ``ok: false`` body, a missing root
            id, a transport failure, or a timeout.
        """
        # image=None marks the slot the service fills with the uploaded asset
        meta = metadata.to_document(image_ref=None)
        files = {
            "image": (metadata.asset_name, image, metadata.asset_content_type),
        }
        headers = {"Authorization": f"Bearer {self._config.api_key_provider()}"}

        logger.info("Publishing %s (%d bytes)", metadata.name, len(image))
        try:
            with httpx.Client(
                timeout=self._config.timeout, transport=self._transport
            ) as client:
                response = client.post(
                    self.store_url,
                    data={"meta": json.dumps(meta)},
                    files=files,
                    headers=headers,
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as exc:
            detail = exc.response.text[:200]
            logger.warning(
                "Storage backend returned %d: %s", exc.response.status_code, detail
            )
            raise PublishError(
                f"Storage error {exc.response.status_code}: {detail}"
            ) from exc
        except httpx.TimeoutException as exc:
            raise PublishError(
                f"Storage request timed out after {self._config.timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise PublishError(f"Cannot reach storage backend: {exc}") from exc
        except ValueError as exc:
            raise PublishError(f"Storage backend returned invalid JSON: {exc}") from exc

        root_id = self._extract_root_id(body)
        reference = gateway_metadata_uri(self._gateway, root_id)
        logger.info("Published %s -> %s", metadata.name, reference)
        return reference

    @staticmethod
    def _extract_root_id(body: Any) -> str:
        if not isinstance(body, dict) or not body.get("ok", False):
            error = body.get("error") if isinstance(body, dict) else body
            raise PublishError(f"Storage backend rejected the upload: {error}")
        value = body.get("value") or {}
        root_id = value.get("ipnft") if isinstance(value, dict) else None
        if not root_id:
            raise PublishError("Storage backend response carried no root id")
        return str(root_id)


# ---------------------------------------------------------------------------
# Local backend
# ---------------------------------------------------------------------------


class LocalPublisher:
    """Publishes stages into a local content-addressed store.

    Parameters
    ----------
    store:
        The blob store holding images and metadata documents.
    """

    def __init__(self, store: ContentAddressedStore) -> None:
        self._store = store

    @classmethod
    def at(cls, base_path: Path) -> LocalPublisher:
        """Create a publisher over a store rooted at *base_path*."""
        return cls(ContentAddressedStore(base_path))

    @property
    def store(self) -> ContentAddressedStore:
        return self._store

    def publish(self, image: bytes, metadata: MetadataRecord) -> str:
        """Store the image, then the metadata document linking to it."""
        try:
            image_address = self._store.store(image)
            image_uri = self._uri_for(image_address)
            document = metadata.to_document(image_ref=image_uri)
            doc_address = self._store.store(canonical_json_bytes(document))
        except (OSError, ArtifactIntegrityError) as exc:
            raise PublishError(f"Local store write failed: {exc}") from exc

        reference = self._uri_for(doc_address)
        logger.info("Published %s -> %s", metadata.name, reference)
        return reference

    def resolve(self, reference: str) -> dict[str, Any]:
        """Load and integrity-check the metadata document at *reference*."""
        address = self._address_from_uri(reference)
        if not self._store.verify(address):
            raise PublishError(f"Reference {reference} is missing or corrupted")
        try:
            document = json.loads(self._store.retrieve(address))
        except ValueError as exc:
            raise PublishError(
                f"Reference {reference} is not a metadata document: {exc}"
            ) from exc
        if not isinstance(document, dict):
            raise PublishError(f"Reference {reference} is not a metadata document")
        return document

    def load_image(self, image_uri: str) -> bytes:
        """Read the image blob a metadata document links to."""
        address = self._address_from_uri(image_uri)
        if not self._store.verify(address):
            raise PublishError(f"Image {image_uri} is missing or corrupted")
        return self._store.retrieve(address)

    def history(self, reference: str) -> list[dict[str, Any]]:
        """Walk ``previous_stage`` links from *reference* back to genesis.

        Returns the documents ordered genesis first.
        """
        documents: list[dict[str, Any]] = []
        seen: set[str] = set()
        current: str | None = reference
        while current is not None:
            if current in seen:
                raise PublishError(f"Cycle in evolution history at {current}")
            seen.add(current)
            document = self.resolve(current)
            documents.append(document)
            current = document.get("previous_stage")
        documents.reverse()
        return documents

    def _uri_for(self, address: str) -> str:
        return self._store.path_for(address).resolve().as_uri()

    @staticmethod
    def _address_from_uri(uri: str) -> str:
        parsed = urlparse(uri)
        if parsed.scheme != "file":
            raise PublishError(f"Not a local reference: {uri}")
        path = Path(url2pathname(parsed.path))
        return f"sha256:{path.stem}"
