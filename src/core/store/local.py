"""Directory-backed blob store for local development and tests."""

from collections.abc import Iterator
from pathlib import Path

from core.errors import StorageFailure

from .interface import JSON_CONTENT_TYPE, BlobStore


class LocalBlobStore(BlobStore):
    def __init__(self, root: Path | str, namespace: str = "bookings"):
        self._root = Path(root) / namespace

    def _path(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if self._root.resolve() not in path.parents:
            raise StorageFailure(f"Key escapes store root: {key}")
        return path

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_bytes()

    def set(self, key: str, data: bytes, content_type: str = JSON_CONTENT_TYPE) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageFailure(f"set {key} failed: {e}") from e

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def list(self, prefix: str = "") -> Iterator[str]:
        if not self._root.is_dir():
            return
        keys = (p.relative_to(self._root).as_posix() for p in self._root.rglob("*") if p.is_file())
        for key in sorted(keys):
            if key.startswith(prefix):
                yield key
