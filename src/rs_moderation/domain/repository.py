# src/rs_moderation/domain/repository.py
"""Repository Protocol for moderation cases, subject status and logs."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_moderation.domain.models import ModerationCase, ModerationLogEntry, SubjectStatus


class ModerationRepositoryProtocol(Protocol):
    async def get_subject_name(
        self, db: AsyncSession, subject_type: str, subject_id: int
    ) -> str | None: ...

    async def pending_subject_type(self, db: AsyncSession, subject_id: int) -> str | None: ...

    async def lock_status(
        self, db: AsyncSession, subject_type: str, subject_id: int
    ) -> SubjectStatus: ...

    async def save_status(
        self,
        db: AsyncSession,
        subject_type: str,
        subject_id: int,
        state: str,
        suspended_until: datetime | None,
    ) -> None: ...

    async def insert_log(
        self,
        db: AsyncSession,
        moderator: str,
        action: str,
        subject_type: str,
        subject_id: int,
        target_name: str,
        reason: str,
        duration_days: int | None,
    ) -> ModerationLogEntry: ...

    async def resolve_cases(
        self, db: AsyncSession, subject_type: str, subject_id: int, resolved_by: str
    ) -> int: ...

    async def open_case(
        self,
        db: AsyncSession,
        case_type: str,
        subject_type: str,
        subject_id: int,
        reporter_name: str,
        reason: str,
    ) -> ModerationCase: ...

    async def list_pending_cases(self, db: AsyncSession, limit: int) -> list[ModerationCase]: ...

    async def list_logs(
        self, db: AsyncSession, search: str | None, limit: int
    ) -> list[ModerationLogEntry]: ...
