"""Booking form submit handler. Creates or updates a booking."""

from typing import Any

from core.auth import is_admin
from core.errors import RateLimited
from core.http import RATE_KEY_UNKNOWN, client_ip, http_handler, json_response, raw_body, require_method
from core.services.rate_guard import RateGuard
from core.services.repository import BookingRepository, parse_submission
from core.store import get_blob_store

rate_guard = RateGuard(limit=20, window_seconds=60)


@http_handler("save-booking")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    require_method(event, "POST")
    ip = client_ip(event)
    if not rate_guard.check(ip or RATE_KEY_UNKNOWN):
        raise RateLimited("Too many requests")

    submission = parse_submission(raw_body(event))
    repo = BookingRepository(get_blob_store())
    record = repo.save(submission, is_admin=is_admin(event.get("headers")), ip=ip)

    return json_response(
        200,
        {"ok": True, "id": record.ref_id, "version": record.version, "locked": record.locked},
    )
