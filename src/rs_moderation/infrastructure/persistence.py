"""ModerationRepository — raw SQL over moderation_cases, moderation_status
and moderation_logs.

Transaction ownership: ModerationApplicationService commits or rolls back.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_common.enums import SubjectType
from src.rs_common.errors import InternalError
from src.rs_common.search import like_pattern
from src.rs_moderation.domain.models import ModerationCase, ModerationLogEntry, SubjectStatus

_SUBJECT_NAME_SQL = {
    SubjectType.DRIVER.value: text("SELECT name FROM drivers WHERE id = :subject_id"),
    SubjectType.PASSENGER.value: text("SELECT name FROM passengers WHERE id = :subject_id"),
}

_PENDING_SUBJECT_TYPE_SQL = text("""
    SELECT subject_type
    FROM moderation_cases
    WHERE subject_id = :subject_id AND status = 'pending'
    ORDER BY created_at DESC, id DESC
    LIMIT 1
""")

_ENSURE_STATUS_SQL = text("""
    INSERT INTO moderation_status (subject_type, subject_id)
    VALUES (:subject_type, :subject_id)
    ON CONFLICT (subject_type, subject_id) DO NOTHING
""")

_LOCK_STATUS_SQL = text("""
    SELECT subject_type, subject_id, state, suspended_until
    FROM moderation_status
    WHERE subject_type = :subject_type AND subject_id = :subject_id
    FOR UPDATE
""")

_SAVE_STATUS_SQL = text("""
    UPDATE moderation_status
    SET state = :state,
        suspended_until = :suspended_until,
        updated_at = NOW()
    WHERE subject_type = :subject_type AND subject_id = :subject_id
""")

_INSERT_LOG_SQL = text("""
    INSERT INTO moderation_logs
        (moderator, action, subject_type, subject_id, target_name, reason, duration_days)
    VALUES
        (:moderator, :action, :subject_type, :subject_id, :target_name, :reason, :duration_days)
    RETURNING id, moderator, action, subject_type, subject_id, target_name, reason,
              duration_days, created_at
""")

_RESOLVE_CASES_SQL = text("""
    UPDATE moderation_cases
    SET status = 'resolved',
        resolved_by = :resolved_by,
        resolved_at = NOW()
    WHERE subject_type = :subject_type AND subject_id = :subject_id AND status = 'pending'
""")

_CASE_COLUMNS = """
    c.id, c.case_type, c.subject_type, c.subject_id,
    COALESCE(d.name, p.name, '') AS subject_name,
    c.reporter_name, c.reason, c.status, c.created_at
"""

_CASE_JOINS = """
    LEFT JOIN drivers d    ON c.subject_type = 'driver'    AND d.id = c.subject_id
    LEFT JOIN passengers p ON c.subject_type = 'passenger' AND p.id = c.subject_id
"""

_OPEN_CASE_SQL = text(f"""
    WITH c AS (
        INSERT INTO moderation_cases (case_type, subject_type, subject_id, reporter_name, reason)
        VALUES (:case_type, :subject_type, :subject_id, :reporter_name, :reason)
        RETURNING *
    )
    SELECT {_CASE_COLUMNS}
    FROM c
    {_CASE_JOINS}
""")

_LIST_PENDING_CASES_SQL = text(f"""
    SELECT {_CASE_COLUMNS}
    FROM moderation_cases c
    {_CASE_JOINS}
    WHERE c.status = 'pending'
    ORDER BY c.created_at ASC, c.id ASC
    LIMIT :limit
""")

# CAST(:param AS TYPE) IS NULL: asyncpg cannot infer the type of a bare NULL parameter
_LIST_LOGS_SQL = text("""
    SELECT id, moderator, action, subject_type, subject_id, target_name, reason,
           duration_days, created_at
    FROM moderation_logs
    WHERE CAST(:pattern AS TEXT) IS NULL
       OR moderator ILIKE :pattern
       OR target_name ILIKE :pattern
       OR reason ILIKE :pattern
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")


def _row_to_case(row: object) -> ModerationCase:
    return ModerationCase(
        id=row.id,  # type: ignore[attr-defined]
        case_type=row.case_type,  # type: ignore[attr-defined]
        subject_type=row.subject_type,  # type: ignore[attr-defined]
        subject_id=row.subject_id,  # type: ignore[attr-defined]
        subject_name=row.subject_name,  # type: ignore[attr-defined]
        reporter_name=row.reporter_name,  # type: ignore[attr-defined]
        reason=row.reason,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_log(row: object) -> ModerationLogEntry:
    return ModerationLogEntry(
        id=row.id,  # type: ignore[attr-defined]
        moderator=row.moderator,  # type: ignore[attr-defined]
        action=row.action,  # type: ignore[attr-defined]
        subject_type=row.subject_type,  # type: ignore[attr-defined]
        subject_id=row.subject_id,  # type: ignore[attr-defined]
        target_name=row.target_name,  # type: ignore[attr-defined]
        reason=row.reason,  # type: ignore[attr-defined]
        duration_days=row.duration_days,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class ModerationRepository:
    async def get_subject_name(
        self, db: AsyncSession, subject_type: str, subject_id: int
    ) -> str | None:
        result = await db.execute(_SUBJECT_NAME_SQL[subject_type], {"subject_id": subject_id})
        return result.scalar_one_or_none()

    async def pending_subject_type(self, db: AsyncSession, subject_id: int) -> str | None:
        result = await db.execute(_PENDING_SUBJECT_TYPE_SQL, {"subject_id": subject_id})
        return result.scalar_one_or_none()

    async def lock_status(
        self, db: AsyncSession, subject_type: str, subject_id: int
    ) -> SubjectStatus:
        params = {"subject_type": subject_type, "subject_id": subject_id}
        await db.execute(_ENSURE_STATUS_SQL, params)
        row = (await db.execute(_LOCK_STATUS_SQL, params)).fetchone()
        if row is None:
            raise InternalError("moderation_status upsert returned no rows")
        return SubjectStatus(
            subject_type=row.subject_type,
            subject_id=row.subject_id,
            state=row.state,
            suspended_until=row.suspended_until,
        )

    async def save_status(
        self,
        db: AsyncSession,
        subject_type: str,
        subject_id: int,
        state: str,
        suspended_until: datetime | None,
    ) -> None:
        await db.execute(
            _SAVE_STATUS_SQL,
            {
                "subject_type": subject_type,
                "subject_id": subject_id,
                "state": state,
                "suspended_until": suspended_until,
            },
        )

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
    ) -> ModerationLogEntry:
        result = await db.execute(
            _INSERT_LOG_SQL,
            {
                "moderator": moderator,
                "action": action,
                "subject_type": subject_type,
                "subject_id": subject_id,
                "target_name": target_name,
                "reason": reason,
                "duration_days": duration_days,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Moderation log insert returned no rows")
        return _row_to_log(row)

    async def resolve_cases(
        self, db: AsyncSession, subject_type: str, subject_id: int, resolved_by: str
    ) -> int:
        result = await db.execute(
            _RESOLVE_CASES_SQL,
            {"subject_type": subject_type, "subject_id": subject_id, "resolved_by": resolved_by},
        )
        return result.rowcount or 0

    async def open_case(
        self,
        db: AsyncSession,
        case_type: str,
        subject_type: str,
        subject_id: int,
        reporter_name: str,
        reason: str,
    ) -> ModerationCase:
        result = await db.execute(
            _OPEN_CASE_SQL,
            {
                "case_type": case_type,
                "subject_type": subject_type,
                "subject_id": subject_id,
                "reporter_name": reporter_name,
                "reason": reason,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Moderation case insert returned no rows")
        return _row_to_case(row)

    async def list_pending_cases(self, db: AsyncSession, limit: int) -> list[ModerationCase]:
        result = await db.execute(_LIST_PENDING_CASES_SQL, {"limit": limit})
        return [_row_to_case(row) for row in result.fetchall()]

    async def list_logs(
        self, db: AsyncSession, search: str | None, limit: int
    ) -> list[ModerationLogEntry]:
        result = await db.execute(
            _LIST_LOGS_SQL, {"pattern": like_pattern(search), "limit": limit}
        )
        return [_row_to_log(row) for row in result.fetchall()]
