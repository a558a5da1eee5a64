import secrets
import time
from pathlib import Path, PurePosixPath

from docvault.storage.base import BaseBlobStore


def blob_relative_path(user_id: str, file_name: str) -> PurePosixPath:
    """Build {user_id}/{millis}-{token}.{ext} for a new blob."""
    suffix = PurePosixPath(file_name).suffix.lower() or ".bin"
    token = secrets.token_hex(4)
    return PurePosixPath(str(user_id)) / f"{int(time.time() * 1000)}-{token}{suffix}"


class LocalBlobStore(BaseBlobStore):
    """Keeps encrypted blobs on the local filesystem under one root."""

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT

    def put(self, user_id: str, file_name: str, ciphertext: bytes) -> str:
        relative = blob_relative_path(user_id, file_name)
        target = self._files_root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(ciphertext)
        return str(relative)

    def get(self, path: str) -> bytes:
        """Read a blob.

        Raises:
            FileNotFoundError: if the blob does not exist or lies outside the root.
        """
        target = self._resolve(path)
        if not target.exists():
            raise FileNotFoundError(f"Blob not found: {path}")
        return target.read_bytes()

    def delete(self, path: str) -> None:
        self._resolve(path).unlink(missing_ok=True)

    def _resolve(self, path: str) -> Path:
        root = self._files_root.resolve()
        target = (root / path).resolve()
        if root not in target.parents:
            raise FileNotFoundError(f"Blob not found: {path}")
        return target
