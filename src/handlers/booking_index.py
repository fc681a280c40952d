"""Admin booking listing, as JSON or CSV."""

from typing import Any

from core.auth import require_admin
from core.http import http_handler, json_response, query_param, response
from core.services.export import rows_to_csv
from core.services.index import BookingIndex
from core.store import get_blob_store


@http_handler("booking-index")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    require_admin(event.get("headers"))

    index = BookingIndex(get_blob_store())
    rows = index.search(query_param(event, "q"), query_param(event, "limit"))

    if query_param(event, "format", "json").lower() == "csv":
        return response(
            200,
            rows_to_csv(rows),
            "text/csv; charset=utf-8",
            {"Content-Disposition": "inline; filename=index.csv"},
        )
    return json_response(200, [r.model_dump(mode="json") for r in rows])
