import tempfile
from os import environ
from pathlib import Path

import boto3
from pydantic import BaseModel, ConfigDict

_cached_admin_key: str | None = None


def _resolve_admin_key() -> str:
    """Fetch the admin shared secret at runtime, with caching."""
    global _cached_admin_key
    if _cached_admin_key is not None:
        return _cached_admin_key

    # Local dev: use env var directly
    direct = environ.get("ADMIN_KEY", "")
    if direct:
        _cached_admin_key = direct
        return direct

    # Deployed: fetch from Secrets Manager by ARN
    arn = environ.get("ADMIN_KEY_SECRET_ARN", "")
    if not arn:
        return ""

    client = boto3.client("secretsmanager")
    _cached_admin_key = client.get_secret_value(SecretId=arn)["SecretString"]
    return _cached_admin_key


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    aws_region: str
    environment: str
    s3_endpoint: str | None = None
    bookings_bucket: str
    store_name: str
    local_store_dir: str
    admin_key: str = ""
    log_salt: str = ""
    public_base_url: str


_cached_config: Config | None = None


def _reset_config() -> None:
    """Reset cached config (tests only)."""
    global _cached_config, _cached_admin_key
    _cached_config = None
    _cached_admin_key = None


def get_config() -> Config:
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    _cached_config = Config(
        aws_region=environ.get("AWS_REGION", "us-east-1"),
        environment=environ.get("ENVIRONMENT", "local"),
        s3_endpoint=environ.get("S3_ENDPOINT"),
        bookings_bucket=environ.get("BOOKINGS_BUCKET", "greenleaf-bookings"),
        store_name=environ.get("STORE_NAME", "bookings"),
        local_store_dir=environ.get(
            "LOCAL_STORE_DIR", str(Path(tempfile.gettempdir()) / "greenleaf-bookings")
        ),
        admin_key=_resolve_admin_key(),
        log_salt=environ.get("LOG_SALT", ""),
        public_base_url=environ.get("PUBLIC_BASE_URL", "https://booking.greenleafassurance.com"),
    )
    return _cached_config
