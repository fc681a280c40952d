"""Job status handler: current workflow stage and history for a booking."""

from typing import Any

from core.errors import ValidationError
from core.http import http_handler, json_response, query_param
from core.services.repository import BookingRepository
from core.services.workflow import get_job
from core.store import get_blob_store


@http_handler("job")
def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    ref_id = query_param(event, "ref").strip()
    if not ref_id:
        raise ValidationError("Missing ref")

    job, history = get_job(BookingRepository(get_blob_store()), ref_id)
    return json_response(
        200,
        {"job": job.model_dump(mode="json"), "history": [h.model_dump(mode="json") for h in history]},
    )
