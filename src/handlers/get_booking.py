"""Booking fetch handler; returns the record and counts the view."""

from typing import Any

from core.config import get_config
from core.errors import ValidationError
from core.http import client_ip, http_handler, json_response, query_param
from core.services.repository import BookingRepository
from core.store import get_blob_store


@http_handler("get-booking")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    ref_id = query_param(event, "ref").strip()
    if not ref_id:
        raise ValidationError("Missing ref parameter")

    repo = BookingRepository(get_blob_store())
    record = repo.record_view(ref_id, ip=client_ip(event), salt=get_config().log_salt)
    return json_response(200, record.to_document())
