"""Shared test fixtures for Greenleaf Bookings."""

import json
import os
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env file for test configuration
load_dotenv()

# Unset AWS_PROFILE for local testing (the local S3 endpoint doesn't need it)
if "AWS_PROFILE" in os.environ:
    del os.environ["AWS_PROFILE"]

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def blob_store(tmp_path):
    """Directory-backed store, empty per test."""
    from core.store import LocalBlobStore

    return LocalBlobStore(tmp_path, "bookings")


@pytest.fixture
def repo(blob_store):
    from core.services.repository import BookingRepository

    return BookingRepository(blob_store)


@pytest.fixture
def booking_index(blob_store):
    from core.services.index import BookingIndex

    return BookingIndex(blob_store)


@pytest.fixture
def admin_env(monkeypatch):
    """Configure the admin key and reset cached config around the test."""
    from core.config import _reset_config

    monkeypatch.setenv("ADMIN_KEY", ADMIN_KEY)
    monkeypatch.delenv("ADMIN_KEY_SECRET_ARN", raising=False)
    _reset_config()
    yield ADMIN_KEY
    _reset_config()


@pytest.fixture
def make_submission():
    from core.models import BookingSubmission

    def _make(ref_id="GLB-25-000001-AB12", email="a@x.com", **extra):
        payload = {
            "refId": ref_id,
            "form": {
                "requester": {"company": "Acme Textiles", "email": email, "phone": "+880 1711 000000"},
                "meta": {"auditDate": "2025-09-01", "time": "09:00"},
            },
            "terms": {"accepted": True, "version": "2025-08-17", "url": "https://greenleafassurance.com/policies/terms-of-service"},
            **extra,
        }
        return BookingSubmission.model_validate(payload)

    return _make


@pytest.fixture
def api_event():
    """Build an API Gateway proxy event."""

    def _event(method="GET", body=None, query=None, headers=None, ip="203.0.113.7"):
        return {
            "httpMethod": method,
            "headers": {"X-Forwarded-For": ip, **(headers or {})},
            "queryStringParameters": query,
            "body": json.dumps(body) if isinstance(body, (dict, list)) else body,
            "isBase64Encoded": False,
        }

    return _event


# S3 fixtures
@pytest.fixture
def s3_store():
    """Provide an S3BlobStore against the local S3 endpoint for integration tests."""
    import uuid

    import boto3

    from core.config import get_config
    from core.store import S3BlobStore

    config = get_config()
    if not config.s3_endpoint:
        pytest.skip("S3_ENDPOINT not set")

    client = boto3.client(
        "s3",
        endpoint_url=config.s3_endpoint,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )
    store = S3BlobStore(client, config.bookings_bucket, f"test-{uuid.uuid4().hex[:8]}")
    yield store

    # Cleanup: delete every key written under the test namespace
    for key in list(store.list("")):
        store.delete(key)
