"""Pydantic models for the denormalised booking listing and CSV export."""

from typing import Any

from pydantic import BaseModel

from core.models.booking import BookingRecord


def _dig(data: dict[str, Any], *path: str) -> str:
    node: Any = data
    for part in path:
        if not isinstance(node, dict):
            return ""
        node = node.get(part)
    return "" if node is None else str(node)


class IndexEntry(BaseModel):
    id: str
    ts: str = ""
    name: str = ""
    email: str = ""
    date: str = ""
    time: str = ""
    locked: bool = False
    version: int = 0
    views: int = 0
    last_event: str = ""

    @classmethod
    def from_record(cls, record: BookingRecord) -> "IndexEntry":
        return cls(**_summary_fields(record))


class ExportRow(IndexEntry):
    phone: str = ""
    notes: str = ""

    @classmethod
    def from_record(cls, record: BookingRecord) -> "ExportRow":
        return cls(
            **_summary_fields(record),
            phone=_dig(record.form, "requester", "phone"),
            notes=_dig(record.form, "special", "details"),
        )


def _summary_fields(record: BookingRecord) -> dict[str, Any]:
    form = record.form
    return {
        "id": record.ref_id,
        "ts": record.ts,
        "name": _dig(form, "requester", "company"),
        "email": _dig(form, "requester", "email"),
        "date": _dig(form, "meta", "auditDate") or _dig(form, "meta", "windowStart"),
        "time": _dig(form, "meta", "time"),
        "locked": record.locked,
        "version": record.version,
        "views": record.metrics.views,
        "last_event": record.last_event,
    }
