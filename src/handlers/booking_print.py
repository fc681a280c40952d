"""Print view handler: static HTML with an embedded QR code."""

from datetime import datetime, timezone
from typing import Any

from core.config import get_config
from core.errors import ValidationError
from core.http import http_handler, query_param, response
from core.services.printing import booking_url, make_qr_data_url, render_booking_html
from core.services.repository import BookingRepository
from core.store import get_blob_store


@http_handler("booking-print")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    ref_id = query_param(event, "ref").strip()
    if not ref_id:
        raise ValidationError("Missing ref")

    record = BookingRepository(get_blob_store()).record_print(ref_id)
    qr_data_url = make_qr_data_url(booking_url(get_config().public_base_url, ref_id))
    html = render_booking_html(record, qr_data_url, datetime.now(timezone.utc))
    return response(200, html, "text/html; charset=utf-8")
