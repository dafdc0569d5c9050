"""Content-addressed, immutable blob store backing the local publisher.

Storage layout: {base_path}/{sha256[0:2]}/{sha256[2:4]}/{sha256}.dat
No delete method; blobs are immutable once stored.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from evolvechain.core.hasher import sha256_hex


class ArtifactIntegrityError(RuntimeError):
    """Raised when a stored blob's hash does not match its address."""


class ContentAddressedStore:
    """SHA-256 keyed, immutable blob store.

    Every blob is stored under its SHA-256 digest. Storing the same
    content twice is a no-op (idempotent). There is no update or delete.

    Parameters
    ----------
    base_path:
        Root directory for blob storage.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    @staticmethod
    def extract_digest(address: str) -> str:
        """Strip the ``sha256:`` prefix from a content address, if present."""
        return address.removeprefix("sha256:")

    def path_for(self, address: str) -> Path:
        """Compute the storage path for a content address or bare digest."""
        digest = self.extract_digest(address)
        return self._base / digest[:2] / digest[2:4] / f"{digest}.dat"

    def store(self, data: bytes) -> str:
        """Store data and return its ``sha256:<hex>`` content address.

        If the content already exists, verifies integrity and leaves the
        existing blob in place.  New blobs are written to a temporary file
        and renamed, so a reader never observes a half-written blob.
        """
        digest = sha256_hex(data)
        path = self.path_for(digest)

        if path.exists():
            if not self.verify(digest):
                raise ArtifactIntegrityError(
                    f"Existing blob at {digest} failed integrity check"
                )
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

        return f"sha256:{digest}"

    def retrieve(self, address: str) -> bytes:
        """Retrieve blob bytes by content address.

        Parameters
        ----------
        address:
            Either "sha256:<hex>" or just the hex digest.
        """
        path = self.path_for(address)
        if not path.exists():
            raise FileNotFoundError(f"Blob not found: {address}")
        return path.read_bytes()

    def exists(self, address: str) -> bool:
        """Check if a blob exists in the store."""
        return self.path_for(address).exists()

    def verify(self, address: str) -> bool:
        """Re-hash stored data and compare against the content address."""
        path = self.path_for(address)
        if not path.exists():
            return False
        return sha256_hex(path.read_bytes()) == self.extract_digest(address)
