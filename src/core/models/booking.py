from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer


class Stage(str, Enum):
    APPLICATION_SUBMITTED = "APPLICATION_SUBMITTED"
    ACCEPTED_INITIATED = "ACCEPTED_INITIATED"
    ESTIMATE_INVOICE_ISSUED = "ESTIMATE_INVOICE_ISSUED"
    AGREEMENT_GENERATED = "AGREEMENT_GENERATED"
    SCHEDULE_RELEASED = "SCHEDULE_RELEASED"
    REPORT_ACTION_TAKEN = "REPORT_ACTION_TAKEN"
    FOLLOW_UP = "FOLLOW_UP"
    COMPLETED = "COMPLETED"


class EventType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    VIEW = "view"
    PRINT = "print"
    LOCK = "lock"
    UNLOCK = "unlock"


class Actor(str, Enum):
    USER = "user"
    ADMIN = "admin"


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


class BookingEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: EventType
    ts: str
    actor: Actor
    ip: str | None = None
    ip_hash: str | None = Field(default=None, alias="ipHash")
    ip_trunc: str | None = Field(default=None, alias="ipTrunc")

    @model_serializer(mode="wrap")
    def _omit_absent(self, handler: Any) -> dict[str, Any]:
        return _drop_none(handler(self))


class Metrics(BaseModel):
    model_config = ConfigDict(extra="allow")

    views: int = 0


class JobState(BaseModel):
    # Stored records may carry stages outside the current whitelist.
    current_stage: Stage | str = Field(default=Stage.APPLICATION_SUBMITTED, union_mode="left_to_right")
    created_at: str
    due_at: str | None = None


class StageEntry(BaseModel):
    stage: Stage | str = Field(union_mode="left_to_right")
    at: str


class Terms(BaseModel):
    accepted: bool = False
    version: str = ""
    url: str = ""


class BookingRecord(BaseModel):
    """One booking document, stored at records/<refId>.json.

    ``form`` is opaque and passed through untouched. Unknown top-level keys
    already present in stored documents are kept so a rewrite never drops them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    ref_id: str = Field(alias="refId")
    form: dict[str, Any] = Field(default_factory=dict)
    ts: str
    locked: bool = False
    version: int = 0
    events: list[BookingEvent] = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=Metrics)
    job: JobState | None = None
    history: list[StageEntry] = Field(default_factory=list)
    terms: Terms | None = None
    locked_at: str | None = Field(default=None, alias="lockedAt")
    unlocked_at: str | None = Field(default=None, alias="unlockedAt")

    @field_validator("events", "history", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []

    @field_validator("metrics", mode="before")
    @classmethod
    def _metrics_or_default(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, Metrics)) else {}

    @field_validator("version", mode="before")
    @classmethod
    def _version_or_zero(cls, value: Any) -> Any:
        return value or 0

    @field_validator("locked", mode="before")
    @classmethod
    def _locked_flag(cls, value: Any) -> Any:
        return value is True

    @field_validator("form", mode="before")
    @classmethod
    def _form_or_empty(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @model_serializer(mode="wrap")
    def _omit_absent(self, handler: Any) -> dict[str, Any]:
        return _drop_none(handler(self))

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @property
    def last_event(self) -> str:
        return self.events[-1].type.value if self.events else ""


class BookingSubmission(BaseModel):
    """Partial update accepted from the booking form.

    Bookkeeping fields (locked, version, events, metrics, job, history) are
    server-owned; a payload carrying them is rejected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    ref_id: str = Field(alias="refId", min_length=1)
    form: dict[str, Any] | None = None
    ts: str | None = None
    terms: Terms | None = None

    @field_validator("ref_id", mode="before")
    @classmethod
    def _strip_ref_id(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value
