import hmac
from collections.abc import Mapping

from core.errors import Unauthorized

ADMIN_HEADER = "x-admin-key"


def _header(headers: Mapping[str, str] | None, name: str) -> str:
    for key, value in (headers or {}).items():
        if key.lower() == name:
            return value or ""
    return ""


def is_admin(headers: Mapping[str, str] | None, admin_key: str | None = None) -> bool:
    """True when the X-Admin-Key header equals the configured admin key exactly."""
    if admin_key is None:
        from core.config import get_config

        admin_key = get_config().admin_key
    supplied = _header(headers, ADMIN_HEADER)
    if not admin_key or not supplied:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), admin_key.encode("utf-8"))


def require_admin(headers: Mapping[str, str] | None, admin_key: str | None = None) -> None:
    if not is_admin(headers, admin_key):
        raise Unauthorized("Admin key missing or invalid")
