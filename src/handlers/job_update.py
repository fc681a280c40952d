"""Admin stage update handler.

Accepts ref/refId, stage and dueAt from a JSON body, a form-encoded body or
the query string, in that order of preference.
"""

from typing import Any

from core.auth import require_admin
from core.errors import RateLimited, ValidationError
from core.http import RATE_KEY_UNKNOWN, client_ip, http_handler, json_response, parse_body, query_param, require_method
from core.services.rate_guard import RateGuard
from core.services.repository import BookingRepository
from core.services.workflow import set_stage
from core.store import get_blob_store

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, X-Admin-Key",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

rate_guard = RateGuard(limit=30, window_seconds=60)


def _field(body: dict[str, Any], event: dict[str, Any], *names: str) -> str:
    for name in names:
        if body.get(name):
            return str(body[name]).strip()
    for name in names:
        value = query_param(event, name).strip()
        if value:
            return value
    return ""


@http_handler("job-update", headers=CORS_HEADERS)
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    if (event.get("httpMethod") or "").upper() == "OPTIONS":
        return json_response(200, {"ok": True}, CORS_HEADERS)
    require_method(event, "POST")
    require_admin(event.get("headers"))
    if not rate_guard.check(client_ip(event) or RATE_KEY_UNKNOWN):
        raise RateLimited("Too many requests")

    body = parse_body(event)
    ref_id = _field(body, event, "ref", "refId")
    stage = _field(body, event, "stage")
    due_at = _field(body, event, "dueAt") or None
    if not ref_id:
        raise ValidationError("Missing ref")

    job, history = set_stage(BookingRepository(get_blob_store()), ref_id, stage, due_at)
    return json_response(
        200,
        {"ok": True, "job": job.model_dump(mode="json"), "history": [h.model_dump(mode="json") for h in history]},
        CORS_HEADERS,
    )
