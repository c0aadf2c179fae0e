"""Pydantic schemas for the moderation API.

Field names follow what the console renders: queue items carry `type`
and `date`, log rows carry `target_name` / `target_type`.
"""

from pydantic import BaseModel, Field

from src.rs_common.enums import SubjectType
from src.rs_moderation.domain.models import ModerationCase, ModerationLogEntry

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ModerationActionRequest(BaseModel):
    # Required for every action but reinstate; enforced by the service
    reason: str = Field("", max_length=1000)
    duration_days: int | None = Field(None, ge=1, le=3650, description="Suspension length, suspend only")
    subject_type: SubjectType | None = Field(
        None, description="Required unless the subject has a pending report to take the type from"
    )


class OpenCaseRequest(BaseModel):
    type: str = Field(..., min_length=1, max_length=100)
    subject_type: SubjectType
    subject_id: int = Field(..., gt=0)
    reporter_name: str = Field(..., min_length=1, max_length=200)
    reason: str = Field(..., min_length=1, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ModerationQueueItem(BaseModel):
    id: str
    type: str
    subject_id: int
    subject_type: str
    subject_name: str
    reporter_name: str
    reason: str
    date: str
    status: str

    @classmethod
    def from_case(cls, case: ModerationCase) -> "ModerationQueueItem":
        return cls(
            id=str(case.id),
            type=case.case_type,
            subject_id=case.subject_id,
            subject_type=case.subject_type,
            subject_name=case.subject_name,
            reporter_name=case.reporter_name,
            reason=case.reason,
            date=case.created_at.isoformat() if case.created_at else "",
            status=case.status,
        )


class ModerationLogItem(BaseModel):
    id: str
    date: str
    moderator: str
    action: str
    target_name: str
    target_type: str
    reason: str

    @classmethod
    def from_entry(cls, entry: ModerationLogEntry) -> "ModerationLogItem":
        return cls(
            id=str(entry.id),
            date=entry.created_at.isoformat() if entry.created_at else "",
            moderator=entry.moderator,
            action=entry.action,
            target_name=entry.target_name,
            target_type=entry.subject_type,
            reason=entry.reason,
        )


class ModerationActionResponse(BaseModel):
    subject_id: int
    subject_type: str
    state: str
    suspended_until: str | None
    changed: bool
    resolved_cases: int
    log: ModerationLogItem
