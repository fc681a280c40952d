"""Admin stage workflow for bookings.

Any whitelisted stage may be set from any other; order is not enforced.
"""

import logging
from collections.abc import Callable

from core.errors import ValidationError
from core.models import BookingRecord, JobState, Stage, StageEntry
from core.services.repository import BookingRepository
from core.timestamps import now_iso

logger = logging.getLogger(__name__)

STAGES: tuple[str, ...] = tuple(s.value for s in Stage)


def default_job(record: BookingRecord) -> JobState:
    """Job state for a record that has none yet. Shared by the read and write paths."""
    return JobState(
        current_stage=Stage.APPLICATION_SUBMITTED,
        created_at=record.ts,
        due_at=None,
    )


def _stage_name(stage: Stage | str) -> str:
    return stage.value if isinstance(stage, Stage) else stage


def parse_stage(raw: str | None) -> Stage:
    value = (raw or "").strip()
    if not value:
        raise ValidationError("Missing stage")
    if value not in STAGES:
        raise ValidationError(f"Unknown stage {value!r}; expected one of {', '.join(STAGES)}")
    return Stage(value)


def get_job(repo: BookingRepository, ref_id: str) -> tuple[JobState, list[StageEntry]]:
    record = repo.load(ref_id)
    return record.job or default_job(record), record.history


def set_stage(
    repo: BookingRepository,
    ref_id: str,
    stage: str,
    due_at: str | None = None,
    clock: Callable[[], str] = now_iso,
) -> tuple[JobState, list[StageEntry]]:
    new_stage = parse_stage(stage)
    record = repo.load(ref_id)

    job = record.job or default_job(record)
    previous = job.current_stage
    job.current_stage = new_stage
    if due_at:
        job.due_at = due_at
    if new_stage != previous:
        record.history.append(StageEntry(stage=new_stage, at=clock()))

    record.job = job
    record.version += 1
    repo.commit(record)
    logger.info("Booking %s stage %s -> %s", ref_id, _stage_name(previous), new_stage.value)
    return job, record.history
