"""Booking record repository: merge-on-write persistence over the blob store.

Every write here is two-phase. Phase one stores the record under its
canonical key and propagates storage failures. Phase two syncs the summary
row in `index.json`; it is best-effort and its failures are only logged
(see core.services.index for the consistency contract).

There is no locking around read-modify-write: two concurrent writers to the
same refId race and the later one wins, including for the `events` list.
"""

import hashlib
import json
import logging
from collections.abc import Callable

from pydantic import ValidationError as PydanticValidationError

from core.errors import ErrorCode, NotFound, PayloadTooLarge, RecordLocked, StorageFailure, ValidationError
from core.models import Actor, BookingEvent, BookingRecord, BookingSubmission, EventType
from core.services.index import BookingIndex, parse_record
from core.store import BlobStore, LegacyKeyReader, record_key
from core.timestamps import now_iso

logger = logging.getLogger(__name__)

MAX_PAYLOAD_BYTES = 2 * 1024 * 1024


def parse_submission(raw: str | bytes | None) -> BookingSubmission:
    """Decode a submitted booking body, enforcing the size ceiling before parsing."""
    data = raw.encode("utf-8") if isinstance(raw, str) else (raw or b"{}")
    if len(data) > MAX_PAYLOAD_BYTES:
        raise PayloadTooLarge(f"Payload too large ({len(data)} bytes)")

    try:
        payload = json.loads(data)
    except ValueError as e:
        raise ValidationError("Invalid JSON", code=ErrorCode.INVALID_REQUEST) from e
    if not isinstance(payload, dict):
        raise ValidationError("Booking payload must be a JSON object", code=ErrorCode.INVALID_REQUEST)
    if not str(payload.get("refId") or "").strip():
        raise ValidationError("Missing refId")

    try:
        return BookingSubmission.model_validate(payload)
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ValidationError(f"Invalid booking payload: {fields}") from e


def truncate_ip(ip: str) -> str | None:
    if not ip:
        return None
    parts = ip.split(".")
    return f"{parts[0]}.{parts[1]}.{parts[2]}.x" if len(parts) == 4 else ip


def hash_ip(ip: str, salt: str) -> str | None:
    if not ip or not salt:
        return None
    return hashlib.sha256(f"{ip}|{salt}".encode("utf-8")).hexdigest()


class BookingRepository:
    def __init__(
        self,
        store: BlobStore,
        index: BookingIndex | None = None,
        clock: Callable[[], str] = now_iso,
    ):
        self._store = store
        self._index = index or BookingIndex(store)
        self._legacy = LegacyKeyReader(store)
        self._clock = clock

    @property
    def index(self) -> BookingIndex:
        return self._index

    def _read(self, key: str, ref_id: str) -> BookingRecord | None:
        try:
            doc = self._store.get_json(key)
        except ValueError as e:
            raise StorageFailure(f"Record at {key} is not valid JSON") from e
        if not isinstance(doc, dict):
            return None
        try:
            return parse_record(doc, ref_id)
        except PydanticValidationError as e:
            raise StorageFailure(f"Record at {key} does not match the booking schema") from e

    def find(self, ref_id: str) -> BookingRecord | None:
        return self._read(record_key(ref_id), ref_id)

    def load(self, ref_id: str) -> BookingRecord:
        record = self.find(ref_id)
        if record is None:
            raise NotFound(f"No booking {ref_id}")
        return record

    def commit(self, record: BookingRecord) -> bool:
        """Store the record, then best-effort sync its index row.

        Returns whether the index sync succeeded.
        """
        self._store.set_json(record_key(record.ref_id), record.to_document())
        return self._index.sync(record)

    def save(self, submission: BookingSubmission, *, is_admin: bool = False, ip: str | None = None) -> BookingRecord:
        existing = self.find(submission.ref_id)
        if existing is not None and existing.locked and not is_admin:
            raise RecordLocked(f"Booking {submission.ref_id} is locked")

        now = self._clock()
        base = existing.to_document() if existing else {}
        incoming = submission.model_dump(mode="json", by_alias=True, exclude_unset=True)
        event = BookingEvent(
            type=EventType.UPDATE if existing else EventType.CREATE,
            ts=now,
            actor=Actor.ADMIN if is_admin else Actor.USER,
            ip=ip or None,
        )

        merged = {**base, **incoming}
        merged["ts"] = (existing.ts if existing else "") or submission.ts or now
        merged["locked"] = existing.locked if existing else False
        merged["version"] = (existing.version if existing else 0) + 1
        merged["metrics"] = base.get("metrics") or {"views": 0}
        merged["events"] = [*base.get("events", []), event.model_dump(mode="json", by_alias=True)]
        record = BookingRecord.model_validate(merged)

        self.commit(record)
        logger.info("Saved booking %s v%d (%s)", record.ref_id, record.version, event.type.value)
        return record

    def record_view(self, ref_id: str, *, ip: str, salt: str = "") -> BookingRecord:
        """Load a booking for display, counting the view.

        Falls back to legacy key layouts. View tracking is best-effort: if it
        fails the untracked record is still returned.
        """
        try:
            found = self._legacy.find(ref_id)
        except ValueError as e:
            raise StorageFailure(f"Booking {ref_id} is not valid JSON") from e
        if found is None:
            raise NotFound(f"No booking {ref_id}")
        key, doc = found
        try:
            record = parse_record(doc, ref_id)
        except PydanticValidationError as e:
            raise StorageFailure(f"Record at {key} does not match the booking schema") from e

        tracked = record.model_copy(deep=True)
        tracked.metrics.views += 1
        tracked.version += 1
        tracked.events.append(
            BookingEvent(
                type=EventType.VIEW,
                ts=self._clock(),
                actor=Actor.USER,
                ip_hash=hash_ip(ip, salt),
                ip_trunc=truncate_ip(ip),
            )
        )
        try:
            self.commit(tracked)
        except Exception:
            logger.warning("View tracking failed for %s", ref_id, exc_info=True)
            return record
        if key != record_key(ref_id):
            logger.info("Promoted legacy booking %s from %s", ref_id, key)
        return tracked

    def record_print(self, ref_id: str) -> BookingRecord:
        record = self.load(ref_id)
        tracked = record.model_copy(deep=True)
        tracked.version += 1
        tracked.events.append(BookingEvent(type=EventType.PRINT, ts=self._clock(), actor=Actor.USER))
        try:
            self.commit(tracked)
        except Exception:
            logger.warning("Print tracking failed for %s", ref_id, exc_info=True)
            return record
        return tracked

    def set_locked(self, ref_id: str, locked: bool, *, ip: str | None = None) -> BookingRecord:
        record = self.load(ref_id)
        now = self._clock()
        record.locked = locked
        if locked:
            record.locked_at = now
        else:
            record.unlocked_at = now
        record.version += 1
        record.events.append(
            BookingEvent(
                type=EventType.LOCK if locked else EventType.UNLOCK,
                ts=now,
                actor=Actor.ADMIN,
                ip=ip or None,
            )
        )
        self.commit(record)
        logger.info("Booking %s %s by admin", ref_id, "locked" if locked else "unlocked")
        return record
