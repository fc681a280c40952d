"""Unit tests for the booking repository."""

import json
from unittest.mock import patch

import pytest

from core.errors import ErrorCode, NotFound, PayloadTooLarge, RecordLocked, StorageFailure, ValidationError
from core.services.repository import (
    MAX_PAYLOAD_BYTES,
    BookingRepository,
    hash_ip,
    parse_submission,
    truncate_ip,
)
from core.store import record_key

REF = "GLB-25-000001-AB12"


# --- parse_submission ---


def test_parse_submission_valid():
    s = parse_submission(json.dumps({"refId": REF, "form": {"a": 1}}))
    assert s.ref_id == REF
    assert s.form == {"a": 1}


def test_parse_submission_too_large_checked_before_parsing():
    raw = "x" * (MAX_PAYLOAD_BYTES + 1)  # not even JSON
    with pytest.raises(PayloadTooLarge):
        parse_submission(raw)


def test_parse_submission_counts_utf8_bytes():
    filler = "é" * (MAX_PAYLOAD_BYTES // 2)
    with pytest.raises(PayloadTooLarge):
        parse_submission(json.dumps({"refId": REF, "form": {"notes": filler}}, ensure_ascii=False))


def test_parse_submission_invalid_json():
    with pytest.raises(ValidationError) as exc:
        parse_submission("{not json")
    assert exc.value.code == ErrorCode.INVALID_REQUEST


def test_parse_submission_missing_ref_id():
    with pytest.raises(ValidationError, match="Missing refId"):
        parse_submission(json.dumps({"form": {}}))


def test_parse_submission_empty_body():
    with pytest.raises(ValidationError, match="Missing refId"):
        parse_submission(None)


def test_parse_submission_rejects_non_object():
    with pytest.raises(ValidationError):
        parse_submission("[1, 2]")


def test_parse_submission_rejects_unknown_keys():
    with pytest.raises(ValidationError, match="locked"):
        parse_submission(json.dumps({"refId": REF, "locked": False}))


# --- save ---


def test_create_then_load_round_trip(repo, make_submission):
    submission = make_submission()
    repo.save(submission, ip="203.0.113.7")

    record = repo.load(REF)
    assert record.form == submission.form
    assert record.version == 1
    assert record.locked is False
    assert record.metrics.views == 0
    assert record.terms.version == "2025-08-17"
    assert [(e.type.value, e.actor.value, e.ip) for e in record.events] == [("create", "user", "203.0.113.7")]


def test_version_increments_by_one_per_write(repo, make_submission):
    versions = [repo.save(make_submission()).version for _ in range(4)]
    assert versions == [1, 2, 3, 4]
    assert [e.type.value for e in repo.load(REF).events] == ["create", "update", "update", "update"]


def test_update_merges_top_level_and_keeps_bookkeeping(repo, make_submission, blob_store):
    repo.save(make_submission())
    repo.record_view(REF, ip="10.0.0.1")
    doc = blob_store.get_json(record_key(REF))
    doc["job"] = {"current_stage": "FOLLOW_UP", "created_at": doc["ts"], "due_at": None}
    blob_store.set_json(record_key(REF), doc)

    updated = repo.save(make_submission(email="b@y.com"))

    assert updated.form["requester"]["email"] == "b@y.com"
    assert updated.metrics.views == 1
    assert updated.job.current_stage.value == "FOLLOW_UP"
    assert [e.type.value for e in updated.events] == ["create", "view", "update"]


def test_ts_is_set_once(make_submission, blob_store):
    times = iter(["2025-01-01T00:00:00.000Z", "2025-02-01T00:00:00.000Z"])
    repo = BookingRepository(blob_store, clock=lambda: next(times))

    first = repo.save(make_submission())
    second = repo.save(make_submission(ts="2030-01-01T00:00:00.000Z"))

    assert first.ts == "2025-01-01T00:00:00.000Z"
    assert second.ts == first.ts


def test_create_uses_submitted_ts(repo, make_submission):
    record = repo.save(make_submission(ts="2025-08-17T09:30:00.000Z"))
    assert record.ts == "2025-08-17T09:30:00.000Z"


def test_update_without_form_keeps_existing_form(repo, make_submission):
    from core.models import BookingSubmission

    repo.save(make_submission())
    record = repo.save(BookingSubmission.model_validate({"refId": REF}))
    assert record.form["requester"]["company"] == "Acme Textiles"


def test_locked_record_rejects_anonymous_save_unchanged(repo, make_submission, blob_store):
    repo.save(make_submission())
    repo.set_locked(REF, True, ip="198.51.100.1")
    before = blob_store.get(record_key(REF))

    with pytest.raises(RecordLocked):
        repo.save(make_submission(email="attacker@x.com"))

    assert blob_store.get(record_key(REF)) == before


def test_admin_can_save_locked_record(repo, make_submission):
    repo.save(make_submission())
    repo.set_locked(REF, True)

    record = repo.save(make_submission(email="fix@x.com"), is_admin=True)

    assert record.locked is True
    assert record.version == 3
    assert record.events[-1].actor.value == "admin"


def test_lock_scenario(repo, make_submission):
    created = repo.save(make_submission(email="a@x.com"))
    assert created.version == 1

    locked = repo.set_locked(REF, True)
    with pytest.raises(RecordLocked):
        repo.save(make_submission())

    assert repo.load(REF).version == locked.version


def test_save_survives_index_failure(repo, make_submission):
    with patch.object(repo.index, "upsert", side_effect=StorageFailure("index down")):
        record = repo.save(make_submission())

    assert record.version == 1
    assert repo.load(REF).version == 1


def test_save_storage_failure_propagates(repo, make_submission, blob_store):
    with patch.object(blob_store, "set", side_effect=StorageFailure("s3 down")):
        with pytest.raises(StorageFailure):
            repo.save(make_submission())


def test_save_updates_index(repo, make_submission):
    repo.save(make_submission())
    [entry] = repo.index.read()
    assert entry.id == REF
    assert entry.email == "a@x.com"
    assert entry.last_event == "create"


def test_load_not_found(repo):
    with pytest.raises(NotFound):
        repo.load("GLB-25-999999-ZZZZ")


def test_load_corrupt_record_is_storage_failure(repo, blob_store):
    blob_store.set(record_key(REF), b"{broken")
    with pytest.raises(StorageFailure):
        repo.load(REF)


# --- view / print / lock ---


def test_record_view_counts_and_tracks(repo, make_submission):
    repo.save(make_submission())

    record = repo.record_view(REF, ip="192.168.1.25", salt="pepper")

    assert record.metrics.views == 1
    assert record.version == 2
    event = record.events[-1]
    assert event.type.value == "view"
    assert event.ip_trunc == "192.168.1.x"
    assert event.ip_hash == hash_ip("192.168.1.25", "pepper")
    assert repo.load(REF).metrics.views == 1


def test_record_view_without_salt_omits_hash(repo, make_submission):
    repo.save(make_submission())
    assert repo.record_view(REF, ip="10.1.2.3").events[-1].ip_hash is None


def test_record_view_returns_record_when_tracking_fails(repo, make_submission, blob_store):
    repo.save(make_submission())
    with patch.object(blob_store, "set", side_effect=StorageFailure("s3 down")):
        record = repo.record_view(REF, ip="10.1.2.3")

    assert record.version == 1
    assert record.metrics.views == 0


def test_record_view_promotes_legacy_document(repo, blob_store):
    blob_store.set_json("main@GLB-24-000009-OLD1.json", {"refId": "GLB-24-000009-OLD1", "ts": "2024-01-01T00:00:00.000Z", "form": {}})

    record = repo.record_view("GLB-24-000009-OLD1", ip="10.1.2.3")

    assert record.metrics.views == 1
    assert repo.load("GLB-24-000009-OLD1").metrics.views == 1


def test_record_view_not_found(repo):
    with pytest.raises(NotFound):
        repo.record_view("GLB-25-000404-NOPE", ip="10.1.2.3")


def test_record_print_appends_event(repo, make_submission):
    repo.save(make_submission())
    record = repo.record_print(REF)
    assert record.version == 2
    assert record.events[-1].type.value == "print"
    assert repo.load(REF).version == 2


def test_set_locked_and_unlocked(repo, make_submission):
    repo.save(make_submission())

    locked = repo.set_locked(REF, True, ip="198.51.100.1")
    assert locked.locked is True
    assert locked.locked_at is not None
    assert locked.events[-1].model_dump(by_alias=True)["ip"] == "198.51.100.1"

    unlocked = repo.set_locked(REF, False)
    assert unlocked.locked is False
    assert unlocked.unlocked_at is not None
    assert unlocked.version == 3
    assert [e.type.value for e in unlocked.events][-2:] == ["lock", "unlock"]
    assert repo.index.read()[0].locked is False


def test_set_locked_not_found(repo):
    with pytest.raises(NotFound):
        repo.set_locked("GLB-25-000404-NOPE", True)


# --- ip helpers ---


def test_truncate_ip():
    assert truncate_ip("203.0.113.42") == "203.0.113.x"
    assert truncate_ip("2001:db8::1") == "2001:db8::1"


def test_hash_ip_requires_salt():
    assert hash_ip("203.0.113.42", "") is None
    assert len(hash_ip("203.0.113.42", "salt")) == 64


def test_record_view_without_ip_omits_ip_fields(repo, make_submission):
    repo.save(make_submission())

    event = repo.record_view(REF, ip="", salt="pepper").events[-1]

    assert event.ip_hash is None
    assert event.ip_trunc is None
