"""Tests for the content publishers: remote multipart store and local store."""

from __future__ import annotations

import httpx
import pytest

from evolvechain.bridge.publisher import (
    ContentPublisher,
    LocalPublisher,
    NFTStoragePublisher,
    PublishError,
    gateway_metadata_uri,
)
from evolvechain.core.store import ContentAddressedStore
from evolvechain.models.config import ClientConfig, static_key
from evolvechain.models.metadata import MetadataRecord

STORAGE = "https://storage.test"


def _remote(handler, *, gateway: str = "ipfs.io") -> NFTStoragePublisher:
    config = ClientConfig(endpoint_url=STORAGE, api_key_provider=static_key("nft_key"), timeout=5.0)
    return NFTStoragePublisher(config, gateway=gateway, transport=httpx.MockTransport(handler))


def _ok(root_id: str = "bafyroot") -> httpx.Response:
    return httpx.Response(200, json={"ok": True, "value": {"ipnft": root_id}})


class TestGatewayUri:
    def test_bare_host(self):
        assert gateway_metadata_uri("ipfs.io", "bafy1") == "https://ipfs.io/ipfs/bafy1/metadata.json"

    def test_scheme_and_slash_stripped(self):
        assert (
            gateway_metadata_uri("https://gw.example/", "bafy1")
            == "https://gw.example/ipfs/bafy1/metadata.json"
        )


class TestNFTStoragePublisher:
    def test_satisfies_protocol(self):
        assert isinstance(_remote(lambda r: _ok()), ContentPublisher)

    def test_publish_returns_gateway_reference(self, sample_record: MetadataRecord):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = request.read()
            return _ok("bafyabc")

        ref = _remote(handler).publish(b"image-bytes", sample_record)

        assert ref == "https://ipfs.io/ipfs/bafyabc/metadata.json"
        assert seen["url"] == f"{STORAGE}/store"
        assert seen["auth"] == "Bearer nft_key"
        body = seen["body"]
        assert b'name="meta"' in body
        assert b'filename="evolution_stage_1.jpeg"' in body
        assert b"image-bytes" in body
        assert b'"previous_stage": "https://ipfs.io/ipfs/bafygenesis/metadata.json"' in body
        assert b'"image": null' in body

    def test_custom_gateway(self, sample_record: MetadataRecord):
        ref = _remote(lambda r: _ok("bafyx"), gateway="gw.example").publish(b"i", sample_record)
        assert ref == "https://gw.example/ipfs/bafyx/metadata.json"

    @pytest.mark.parametrize("status", [401, 413, 500])
    def test_error_status_raises(self, status: int, sample_record: MetadataRecord):
        with pytest.raises(PublishError, match=str(status)):
            _remote(lambda r: httpx.Response(status, text="nope")).publish(b"i", sample_record)

    def test_not_ok_body_raises(self, sample_record: MetadataRecord):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ok": False, "error": {"message": "quota"}})

        with pytest.raises(PublishError, match="quota"):
            _remote(handler).publish(b"i", sample_record)

    def test_missing_root_id_raises(self, sample_record: MetadataRecord):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ok": True, "value": {}})

        with pytest.raises(PublishError, match="root id"):
            _remote(handler).publish(b"i", sample_record)

    def test_invalid_json_raises(self, sample_record: MetadataRecord):
        with pytest.raises(PublishError, match="invalid JSON"):
            _remote(lambda r: httpx.Response(200, text="<html>")).publish(b"i", sample_record)

    def test_timeout_raises(self, sample_record: MetadataRecord):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.WriteTimeout("slow", request=request)

        with pytest.raises(PublishError, match="timed out"):
            _remote(handler).publish(b"i", sample_record)


class TestLocalPublisher:
    def test_satisfies_protocol(self, local_publisher: LocalPublisher):
        assert isinstance(local_publisher, ContentPublisher)

    def test_publish_and_resolve(self, local_publisher: LocalPublisher, sample_record: MetadataRecord):
        ref = local_publisher.publish(b"image-bytes", sample_record)
        assert ref.startswith("file://")

        doc = local_publisher.resolve(ref)
        assert doc["name"] == sample_record.name
        assert doc["previous_stage"] == sample_record.previous_ref
        assert local_publisher.load_image(doc["image"]) == b"image-bytes"

    def test_publish_is_content_addressed(self, local_publisher: LocalPublisher, sample_record: MetadataRecord):
        assert local_publisher.publish(b"x", sample_record) == local_publisher.publish(b"x", sample_record)

    def test_history_walks_to_genesis(self, local_publisher: LocalPublisher):
        genesis = MetadataRecord(name="Stage 0", description="d")
        ref0 = local_publisher.publish(b"g", genesis)
        ref1 = local_publisher.publish(
            b"one", MetadataRecord(name="Stage 1", description="d", previous_ref=ref0)
        )
        ref2 = local_publisher.publish(
            b"two", MetadataRecord(name="Stage 2", description="d", previous_ref=ref1)
        )
        names = [doc["name"] for doc in local_publisher.history(ref2)]
        assert names == ["Stage 0", "Stage 1", "Stage 2"]

    def test_history_rejects_image_reference(
        self, local_publisher: LocalPublisher, sample_record: MetadataRecord
    ):
        ref = local_publisher.publish(b"\x89PNG\r\n\x1a\nraw", sample_record)
        image_uri = local_publisher.resolve(ref)["image"]
        with pytest.raises(PublishError, match="not a metadata document"):
            local_publisher.history(image_uri)

    def test_resolve_rejects_non_object_json(
        self, local_publisher: LocalPublisher, content_store: ContentAddressedStore
    ):
        address = content_store.store(b"[1, 2, 3]")
        uri = content_store.path_for(address).resolve().as_uri()
        with pytest.raises(PublishError, match="not a metadata document"):
            local_publisher.resolve(uri)

    def test_resolve_rejects_non_local_reference(self, local_publisher: LocalPublisher):
        with pytest.raises(PublishError, match="Not a local reference"):
            local_publisher.resolve("https://ipfs.io/ipfs/bafy/metadata.json")

    def test_resolve_detects_corruption(
        self,
        local_publisher: LocalPublisher,
        content_store: ContentAddressedStore,
        sample_record: MetadataRecord,
    ):
        ref = local_publisher.publish(b"img", sample_record)
        doc_path = next(
            p for p in content_store.base_path.rglob("*.dat")
            if p.resolve().as_uri() == ref
        )
        doc_path.write_bytes(b'{"name": "forged"}')
        with pytest.raises(PublishError, match="corrupted"):
            local_publisher.resolve(ref)

    def test_write_failure_raises_publish_error(self, tmp_path, sample_record: MetadataRecord):
        store = ContentAddressedStore(tmp_path / "store")
        publisher = LocalPublisher(store)
        # Replace the store root with a file so writes fail
        store_root = tmp_path / "store"
        for child in store_root.iterdir():
            child.rmdir()
        store_root.rmdir()
        store_root.write_bytes(b"not a directory")
        with pytest.raises(PublishError, match="Local store write failed"):
            publisher.publish(b"img", sample_record)
