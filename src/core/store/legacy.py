"""Read-only access to booking documents written under pre-`records/` key layouts.

Only the display read path goes through here. Writes always target the
canonical `records/<refId>.json` key, so a legacy document is promoted the
first time it is viewed.
"""

from typing import Any

from .interface import BlobStore

LEGACY_KEY_TEMPLATES = ("main@{ref_id}.json", "main@/{ref_id}.json")


def record_key(ref_id: str) -> str:
    return f"records/{ref_id}.json"


class LegacyKeyReader:
    def __init__(self, store: BlobStore, templates: tuple[str, ...] = LEGACY_KEY_TEMPLATES):
        self._store = store
        self._templates = templates

    def candidates(self, ref_id: str) -> list[str]:
        return [record_key(ref_id), *(t.format(ref_id=ref_id) for t in self._templates)]

    def find(self, ref_id: str) -> tuple[str, dict[str, Any]] | None:
        """Return (key, document) for the first layout holding ``ref_id``."""
        for key in self.candidates(ref_id):
            doc = self._store.get_json(key)
            if isinstance(doc, dict):
                return key, doc
        return None
