"""Unit tests for the blob migration and cleanup handlers."""

import json
from unittest.mock import patch

import pytest

from handlers import cleanup_blobs, migrate_blobs


@pytest.fixture
def stores(tmp_path):
    from core.store import LocalBlobStore

    def _get(name=None):
        return LocalBlobStore(tmp_path, name or "bookings")

    with (
        patch("handlers.migrate_blobs.get_blob_store", side_effect=_get),
        patch("handlers.cleanup_blobs.get_blob_store", side_effect=_get),
    ):
        yield _get


def test_migrate_requires_admin(api_event, stores, admin_env):
    result = migrate_blobs.handler(api_event("POST", {"oldPrefix": "main@/", "newPrefix": "records/"}), None)
    assert result["statusCode"] == 401


def test_migrate_dry_run_by_default(api_event, stores, admin_env):
    stores().set("main@/GLB-1.json", b"{}")
    event = api_event("POST", {"oldPrefix": "main@/", "newPrefix": "records/"}, headers={"X-Admin-Key": admin_env})

    body = json.loads(migrate_blobs.handler(event, None)["body"])

    assert body["ok"] is True
    assert body["dryRun"] is True
    assert body["moves"] == [{"from": "main@/GLB-1.json", "to": "records/GLB-1.json"}]
    assert stores().get("records/GLB-1.json") is None


def test_migrate_rename(api_event, stores, admin_env):
    stores().set("main@/GLB-1.json", b"{}")
    event = api_event(
        "POST",
        {"oldPrefix": "main@/", "newPrefix": "records/", "dryRun": False, "deleteSource": True},
        headers={"X-Admin-Key": admin_env},
    )

    migrate_blobs.handler(event, None)

    assert stores().get("records/GLB-1.json") == b"{}"
    assert stores().get("main@/GLB-1.json") is None


def test_migrate_missing_prefix(api_event, stores, admin_env):
    event = api_event("POST", {"newPrefix": "records/"}, headers={"X-Admin-Key": admin_env})
    assert migrate_blobs.handler(event, None)["statusCode"] == 400


def test_cleanup_targets_named_store(api_event, stores, admin_env):
    stores("site:bookings").set("records/GLB-1.json", b"{}")
    stores("bookings").set("records/GLB-1.json", b"{}")
    event = api_event("POST", {"prefix": "records/", "dryRun": False}, headers={"X-Admin-Key": admin_env})

    body = json.loads(cleanup_blobs.handler(event, None)["body"])

    assert body["storeName"] == "site:bookings"
    assert body["deleted"] == ["records/GLB-1.json"]
    assert stores("site:bookings").get("records/GLB-1.json") is None
    assert stores("bookings").get("records/GLB-1.json") == b"{}"


def test_cleanup_dry_run(api_event, stores, admin_env):
    stores("site:bookings").set("a.json", b"{}")
    event = api_event("POST", {}, headers={"X-Admin-Key": admin_env})

    body = json.loads(cleanup_blobs.handler(event, None)["body"])

    assert body["dryRun"] is True
    assert body["listedNotDeleted"] == ["a.json"]


def test_cleanup_unauthorized_before_method_check(api_event, stores, admin_env):
    assert cleanup_blobs.handler(api_event("GET"), None)["statusCode"] == 401


def test_cleanup_options(api_event, stores):
    assert cleanup_blobs.handler(api_event("OPTIONS"), None)["statusCode"] == 200
