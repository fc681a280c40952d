"""Admin index rebuild. Full scan of records/ into index.json."""

from typing import Any

from core.auth import require_admin
from core.http import http_handler, json_response
from core.services.index import BookingIndex
from core.store import get_blob_store


@http_handler("rebuild-index")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    require_admin(event.get("headers"))

    count = BookingIndex(get_blob_store()).rebuild()
    return json_response(200, {"ok": True, "count": count})
