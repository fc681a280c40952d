"""Admin-only lock/unlock handler."""

from typing import Any

from core.auth import require_admin
from core.errors import RateLimited, ValidationError
from core.http import RATE_KEY_UNKNOWN, client_ip, http_handler, json_response, parse_body, require_method
from core.services.rate_guard import RateGuard
from core.services.repository import BookingRepository
from core.store import get_blob_store

ACTIONS = ("lock", "unlock")

rate_guard = RateGuard(limit=30, window_seconds=60)


@http_handler("booking-admin", headers={"Allow": "POST"})
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    ip = client_ip(event)
    if not rate_guard.check(ip or RATE_KEY_UNKNOWN):
        raise RateLimited("Too many requests")
    require_method(event, "POST")
    require_admin(event.get("headers"))

    body = parse_body(event)
    ref_id = str(body.get("refId") or "").strip()
    action = str(body.get("action") or "").strip()
    if not ref_id or not action:
        raise ValidationError("refId and action are required")
    if action not in ACTIONS:
        raise ValidationError("action must be lock|unlock")

    repo = BookingRepository(get_blob_store())
    record = repo.set_locked(ref_id, action == "lock", ip=ip)
    return json_response(200, {"ok": True, "id": record.ref_id, "locked": record.locked, "version": record.version})
