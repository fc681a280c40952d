import json
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any

JSON_CONTENT_TYPE = "application/json"


class BlobStore(ABC):
    """Flat key -> bytes store with prefix listing."""

    @abstractmethod
    def get(self, key: str) -> bytes | None: ...

    @abstractmethod
    def set(self, key: str, data: bytes, content_type: str = JSON_CONTENT_TYPE) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    @abstractmethod
    def list(self, prefix: str = "") -> Iterator[str]: ...

    def get_json(self, key: str) -> Any:
        """Return the decoded document at ``key`` or None when absent.

        Raises json.JSONDecodeError for a document that is not valid JSON.
        """
        data = self.get(key)
        if data is None:
            return None
        return json.loads(data)

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value, ensure_ascii=False).encode("utf-8"))
