"""CSV export of bookings."""

import csv
import io
import logging
from collections.abc import Iterable

from core.errors import StorageFailure
from core.models import ExportRow, IndexEntry
from core.services.index import BookingIndex
from core.services.repository import BookingRepository

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "id",
    "ts",
    "name",
    "email",
    "phone",
    "date",
    "time",
    "notes",
    "locked",
    "version",
    "views",
    "last_event",
]


def collect_export_rows(repo: BookingRepository, index: BookingIndex) -> list[ExportRow]:
    """Rows for every booking, enriched from the live records.

    Uses index.json for the id list and order; falls back to scanning
    `records/` when the index is absent or yields nothing.
    """
    rows = []
    for entry in index.read():
        try:
            record = repo.find(entry.id)
        except StorageFailure:
            logger.warning("Skipping unreadable record %s in export", entry.id)
            continue
        if record is not None:
            rows.append(ExportRow.from_record(record))
    if rows:
        return rows

    logger.info("index.json empty; exporting via full records scan")
    records = sorted(index.iter_records(), key=lambda r: r.ts, reverse=True)
    return [ExportRow.from_record(r) for r in records]


def _cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def rows_to_csv(rows: Iterable[IndexEntry]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for row in rows:
        data = row.model_dump()
        writer.writerow([_cell(data.get(col)) for col in CSV_COLUMNS])
    return buf.getvalue()
