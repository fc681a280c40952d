"""Admin bulk rename of keys from one prefix to another."""

from typing import Any

from core.auth import require_admin
from core.http import flag, http_handler, json_response, parse_body, require_method
from core.services.maintenance import migrate_blobs
from core.store import get_blob_store


@http_handler("migrate-blobs")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    require_admin(event.get("headers"))
    require_method(event, "POST")

    body = parse_body(event)
    store = get_blob_store(body.get("storeName") or None)
    result = migrate_blobs(
        store,
        str(body.get("oldPrefix") or ""),
        str(body.get("newPrefix") or ""),
        dry_run=flag(body.get("dryRun"), True),
        delete_source=flag(body.get("deleteSource"), False),
    )
    return json_response(200, {"ok": True, **result})
