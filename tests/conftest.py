"""Shared test fixtures for evolvechain."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from evolvechain.bridge.publisher import LocalPublisher, PublishError
from evolvechain.bridge.transform import TransformError
from evolvechain.core.store import ContentAddressedStore
from evolvechain.models.metadata import MetadataRecord

BASE_IMAGE = b"\x89PNG\r\n\x1a\nbase-image"


# ---------------------------------------------------------------------------
# Test doubles for the remote backends
# ---------------------------------------------------------------------------


class FakeTransformer:
    """Deterministic transformer recording every call.

    Fails with ``TransformError`` on the call numbers listed in *fail_on*
    (1-based).
    """

    def __init__(self, fail_on: set[int] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.calls: list[tuple[bytes, str, float]] = []

    def transform(self, source_image: bytes, prompt: str, strength: float) -> bytes:
        self.calls.append((source_image, prompt, strength))
        if len(self.calls) in self.fail_on:
            raise TransformError(f"backend outage on call {len(self.calls)}")
        return source_image + f"|s{len(self.calls)}".encode("ascii")


class RecordingPublisher:
    """In-memory publisher returning gateway-style references.

    Fails with ``PublishError`` on the call numbers listed in *fail_on*
    (1-based).
    """

    def __init__(self, fail_on: set[int] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.published: list[tuple[bytes, MetadataRecord]] = []
        self.attempts = 0

    def publish(self, image: bytes, metadata: MetadataRecord) -> str:
        self.attempts += 1
        if self.attempts in self.fail_on:
            raise PublishError(f"storage quota exceeded on call {self.attempts}")
        self.published.append((image, metadata))
        return f"https://ipfs.io/ipfs/bafy{self.attempts:04d}/metadata.json"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def content_store(tmp_dir: Path) -> ContentAddressedStore:
    """Provide a fresh ContentAddressedStore in a temp directory."""
    return ContentAddressedStore(tmp_dir / "store")


@pytest.fixture
def local_publisher(content_store: ContentAddressedStore) -> LocalPublisher:
    """Provide a LocalPublisher backed by the test store."""
    return LocalPublisher(content_store)


@pytest.fixture
def base_image() -> bytes:
    return BASE_IMAGE


@pytest.fixture
def make_transformer() -> Callable[..., FakeTransformer]:
    """Factory fixture: build a FakeTransformer failing on given calls."""

    def _factory(*fail_on: int) -> FakeTransformer:
        return FakeTransformer(set(fail_on))

    return _factory


@pytest.fixture
def make_publisher() -> Callable[..., RecordingPublisher]:
    """Factory fixture: build a RecordingPublisher failing on given calls."""

    def _factory(*fail_on: int) -> RecordingPublisher:
        return RecordingPublisher(set(fail_on))

    return _factory


@pytest.fixture
def sample_record() -> MetadataRecord:
    """A stage 1 metadata record with a previous-stage link."""
    from evolvechain.core.attributes import derive_attributes

    return MetadataRecord(
        name="Evolving NFT - Stage 1",
        description="a fox - Now evolved to stage 1 through ApeChain interactions!",
        attributes=derive_attributes(1),
        previous_ref="https://ipfs.io/ipfs/bafygenesis/metadata.json",
        asset_name="evolution_stage_1.jpeg",
    )
