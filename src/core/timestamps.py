from datetime import datetime, timezone


def now_iso() -> str:
    """UTC now as ``2025-08-17T09:30:00.000Z``; string order equals time order."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
