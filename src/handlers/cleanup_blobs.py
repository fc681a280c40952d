"""Admin cleanup of an old blob namespace. Dry run unless told otherwise."""

from typing import Any

from core.auth import require_admin
from core.http import flag, http_handler, json_response, parse_body, require_method
from core.services.maintenance import cleanup_blobs
from core.store import get_blob_store

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}

DEFAULT_STORE_NAME = "site:bookings"


@http_handler("cleanup-blobs", headers=CORS_HEADERS)
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    if (event.get("httpMethod") or "").upper() == "OPTIONS":
        return json_response(200, {"ok": True}, CORS_HEADERS)
    require_admin(event.get("headers"))
    require_method(event, "POST")

    body = parse_body(event)
    store_name = str(body.get("storeName") or DEFAULT_STORE_NAME)
    result = cleanup_blobs(
        get_blob_store(store_name),
        str(body.get("prefix") or ""),
        dry_run=flag(body.get("dryRun"), True),
    )
    return json_response(200, {"ok": True, "storeName": store_name, **result}, CORS_HEADERS)
