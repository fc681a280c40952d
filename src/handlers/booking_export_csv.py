"""CSV export of every booking."""

from typing import Any

from core.http import http_handler, require_method, response
from core.services.export import collect_export_rows, rows_to_csv
from core.services.repository import BookingRepository
from core.store import get_blob_store


@http_handler("booking-export-csv")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    require_method(event, "GET")

    repo = BookingRepository(get_blob_store())
    rows = collect_export_rows(repo, repo.index)
    return response(
        200,
        rows_to_csv(rows),
        "text/csv; charset=utf-8",
        {"Content-Disposition": 'attachment; filename="bookings.csv"'},
    )
