"""Denormalised booking listing kept in a single `index.json` blob.

The index is a cache, not a source of truth. It is written after the record
it summarises and never in the same operation, so a failure between the two
writes leaves it stale. Readers tolerate that: an absent or empty index falls
back to a full scan of `records/`, and `rebuild()` is the repair path.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from core.models import BookingRecord, IndexEntry
from core.store import BlobStore

logger = logging.getLogger(__name__)

INDEX_KEY = "index.json"
RECORDS_PREFIX = "records/"
DEFAULT_LIMIT = 200
MAX_LIMIT = 1000


def ref_id_from_key(key: str) -> str:
    return key.removeprefix(RECORDS_PREFIX).removesuffix(".json")


def parse_record(doc: dict[str, Any], ref_id: str) -> BookingRecord:
    """Validate a stored document, filling in the id and timestamp old documents lack."""
    return BookingRecord.model_validate({**doc, "refId": doc.get("refId") or ref_id, "ts": doc.get("ts") or ""})


def clamp_limit(raw: Any, default: int = DEFAULT_LIMIT) -> int:
    try:
        value = int(raw) if raw not in (None, "") else default
    except (TypeError, ValueError):
        value = default
    return min(MAX_LIMIT, max(1, value))


class BookingIndex:
    def __init__(self, store: BlobStore):
        self._store = store

    def read(self) -> list[IndexEntry]:
        raw = self._store.get(INDEX_KEY)
        if raw is None:
            return []
        try:
            rows = json.loads(raw)
        except ValueError:
            logger.warning("index.json is malformed; treating as empty")
            return []
        if not isinstance(rows, list):
            return []

        entries = []
        for row in rows:
            try:
                entries.append(IndexEntry.model_validate(row))
            except PydanticValidationError:
                logger.warning("Skipping malformed index row: %r", row)
        return entries

    def write(self, entries: list[IndexEntry]) -> None:
        self._store.set_json(INDEX_KEY, [e.model_dump(mode="json") for e in entries])

    def upsert(self, entry: IndexEntry) -> None:
        entries = self.read()
        for i, existing in enumerate(entries):
            if existing.id == entry.id:
                entries[i] = entry
                break
        else:
            entries.append(entry)
        self.write(entries)

    def sync(self, record: BookingRecord) -> bool:
        """Best-effort upsert of the record's summary row. Never raises."""
        try:
            self.upsert(IndexEntry.from_record(record))
            return True
        except Exception:
            logger.warning("Index sync failed for %s; index is stale until rebuilt", record.ref_id, exc_info=True)
            return False

    def iter_records(self) -> list[BookingRecord]:
        """Load every parseable record under `records/`."""
        records = []
        for key in self._store.list(RECORDS_PREFIX):
            if not key.endswith(".json"):
                continue
            try:
                doc = self._store.get_json(key)
                if not isinstance(doc, dict):
                    continue
                records.append(parse_record(doc, ref_id_from_key(key)))
            except (ValueError, PydanticValidationError):
                logger.warning("Skipping unreadable record %s", key)
        return records

    def scan(self) -> list[IndexEntry]:
        entries = [IndexEntry.from_record(r) for r in self.iter_records()]
        entries.sort(key=lambda e: e.ts, reverse=True)
        return entries

    def rebuild(self) -> int:
        entries = self.scan()
        self.write(entries)
        logger.info("Rebuilt index.json with %d entries", len(entries))
        return len(entries)

    def entries(self) -> list[IndexEntry]:
        entries = self.read()
        if entries:
            return entries
        return self.scan()

    def search(self, query: str = "", limit: int | str | None = DEFAULT_LIMIT) -> list[IndexEntry]:
        q = query.strip().lower()
        rows = self.entries()
        if q:
            rows = [r for r in rows if any(q in v.lower() for v in (r.id, r.name, r.email) if v)]
        return rows[: clamp_limit(limit)]
