"""Helpers for API Gateway proxy events and responses."""

import base64
import functools
import json
import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import parse_qsl

from core.errors import BookingServiceError, ErrorCode, MethodNotAllowed, USER_MESSAGES, ValidationError

logger = logging.getLogger(__name__)

JSON_TYPE = "application/json; charset=utf-8"
NO_STORE = {"Cache-Control": "no-store"}
# Rate-guard bucket shared by requests with no known client IP.
RATE_KEY_UNKNOWN = "unknown"

Handler = Callable[[dict[str, Any], Any], dict[str, Any]]


def response(status: int, body: str, content_type: str, headers: dict[str, str] | None = None) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": content_type, **NO_STORE, **(headers or {})},
        "body": body,
    }


def json_response(status: int, body: Any, headers: dict[str, str] | None = None) -> dict[str, Any]:
    return response(status, json.dumps(body, ensure_ascii=False), JSON_TYPE, headers)


def error_response(err: BookingServiceError, headers: dict[str, str] | None = None) -> dict[str, Any]:
    # Internal details stay in the logs for 5xx.
    message = err.message if err.status_code < 500 else err.user_message
    return json_response(err.status_code, {"error": message, "code": err.code.value}, headers)


def header(event: dict[str, Any], name: str) -> str:
    name = name.lower()
    for key, value in (event.get("headers") or {}).items():
        if key.lower() == name:
            return str(value or "")
    return ""


def query_param(event: dict[str, Any], name: str, default: str = "") -> str:
    params = event.get("queryStringParameters") or {}
    value = params.get(name)
    return default if value is None else str(value)


def client_ip(event: dict[str, Any]) -> str:
    forwarded = header(event, "x-forwarded-for").split(",")[0].strip()
    if forwarded:
        return forwarded
    for name in ("x-nf-client-connection-ip", "client-ip"):
        value = header(event, name).strip()
        if value:
            return value
    identity = (event.get("requestContext") or {}).get("identity") or {}
    return identity.get("sourceIp") or ""


def raw_body(event: dict[str, Any]) -> str:
    body = event.get("body") or ""
    if event.get("isBase64Encoded") and body:
        try:
            return base64.b64decode(body, validate=True).decode("utf-8")
        except ValueError as e:
            raise ValidationError("Invalid request body", code=ErrorCode.INVALID_REQUEST) from e
    return body


def parse_body(event: dict[str, Any]) -> dict[str, Any]:
    """JSON object body, falling back to form-encoded; {} when neither parses."""
    body = raw_body(event)
    if not body:
        return {}
    try:
        data = json.loads(body)
        if isinstance(data, dict):
            return data
    except ValueError:
        pass
    return dict(parse_qsl(body))


def flag(value: Any, default: bool) -> bool:
    """Interpret a JSON or form-encoded boolean."""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def require_method(event: dict[str, Any], *methods: str) -> None:
    if (event.get("httpMethod") or "").upper() not in methods:
        raise MethodNotAllowed(f"Method not allowed; use {', '.join(methods)}")


def http_handler(name: str, headers: dict[str, str] | None = None) -> Callable[[Handler], Handler]:
    """Turn raised errors into JSON error responses for a Lambda handler."""

    def decorate(fn: Handler) -> Handler:
        @functools.wraps(fn)
        def wrapper(event: dict[str, Any], context: Any) -> dict[str, Any]:
            try:
                return fn(event, context)
            except BookingServiceError as e:
                if e.status_code >= 500:
                    logger.exception("%s failed: %s", name, e.message)
                return error_response(e, headers)
            except Exception:
                logger.exception("%s failed", name)
                body = {"error": USER_MESSAGES[ErrorCode.INTERNAL_ERROR], "code": ErrorCode.INTERNAL_ERROR.value}
                return json_response(500, body, headers)

        return wrapper

    return decorate
