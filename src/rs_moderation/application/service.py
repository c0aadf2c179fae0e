"""ModerationApplicationService — queue, audit log and subject actions.

An action runs in one transaction: lock the subject's status row, apply the
state machine, update the driver's `moderation` block cause, write the log
row and resolve the subject's pending reports. The `debt` block cause is
never touched here.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_common.datetime_utils import utc_now
from src.rs_common.db_errors import STORAGE_ERRORS, translate_db_error
from src.rs_common.enums import BlockCause, ModerationAction, ModerationState, SubjectType
from src.rs_common.errors import (
    AppError,
    InvalidInputError,
    ModerationReasonRequiredError,
    ModerationSubjectNotFoundError,
)
from src.rs_driver.domain.repository import DriverRepositoryProtocol
from src.rs_driver.infrastructure.persistence import DriverRepository
from src.rs_moderation.application.schemas import (
    ModerationActionResponse,
    ModerationLogItem,
    ModerationQueueItem,
    OpenCaseRequest,
)
from src.rs_moderation.domain.models import DEFAULT_SUSPENSION_DAYS, PAST_TENSE, next_state
from src.rs_moderation.domain.repository import ModerationRepositoryProtocol
from src.rs_moderation.infrastructure.persistence import ModerationRepository

logger = logging.getLogger(__name__)


class ModerationApplicationService:
    def __init__(
        self,
        repo: ModerationRepositoryProtocol | None = None,
        driver_repo: DriverRepositoryProtocol | None = None,
    ) -> None:
        self._repo: ModerationRepositoryProtocol = repo or ModerationRepository()
        self._driver_repo: DriverRepositoryProtocol = driver_repo or DriverRepository()

    async def queue(self, db: AsyncSession, limit: int) -> list[ModerationQueueItem]:
        try:
            cases = await self._repo.list_pending_cases(db, limit)
        except STORAGE_ERRORS as exc:
            raise translate_db_error(exc) from exc
        return [ModerationQueueItem.from_case(c) for c in cases]

    async def logs(
        self, db: AsyncSession, search: str | None, limit: int
    ) -> list[ModerationLogItem]:
        try:
            entries = await self._repo.list_logs(db, search, limit)
        except STORAGE_ERRORS as exc:
            raise translate_db_error(exc) from exc
        return [ModerationLogItem.from_entry(e) for e in entries]

    async def open_case(self, db: AsyncSession, body: OpenCaseRequest) -> ModerationQueueItem:
        try:
            await self._require_subject(db, body.subject_type.value, body.subject_id)
            case = await self._repo.open_case(
                db,
                body.type,
                body.subject_type.value,
                body.subject_id,
                body.reporter_name,
                body.reason,
            )
            await db.commit()
        except AppError:
            await db.rollback()
            raise
        except STORAGE_ERRORS as exc:
            await db.rollback()
            raise translate_db_error(exc) from exc
        logger.info("Report #%d opened on %s %d", case.id, case.subject_type, case.subject_id)
        return ModerationQueueItem.from_case(case)

    async def act(
        self,
        db: AsyncSession,
        subject_id: int,
        action: ModerationAction,
        reason: str,
        moderator: str,
        subject_type: SubjectType | None = None,
        duration_days: int | None = None,
    ) -> ModerationActionResponse:
        action = ModerationAction(action)
        reason = (reason or "").strip()
        if not reason and action is not ModerationAction.REINSTATE:
            raise ModerationReasonRequiredError(action.value)
        days = (duration_days or DEFAULT_SUSPENSION_DAYS) if action is ModerationAction.SUSPEND else None

        try:
            kind = await self._resolve_subject_type(db, subject_id, subject_type)
            name = await self._require_subject(db, kind, subject_id)

            now = utc_now()
            status = await self._repo.lock_status(db, kind, subject_id)
            current = status.effective_state(now)
            new_state = next_state(current, action)

            if action is ModerationAction.SUSPEND:
                suspended_until = now + timedelta(days=days or DEFAULT_SUSPENSION_DAYS)
            elif new_state is ModerationState.SUSPENDED:
                suspended_until = status.suspended_until
            else:
                suspended_until = None

            changed = new_state is not current or action is ModerationAction.SUSPEND
            if changed or status.state != new_state.value:
                await self._repo.save_status(db, kind, subject_id, new_state.value, suspended_until)

            if kind == SubjectType.DRIVER.value:
                await self._apply_driver_block(db, subject_id, action, reason, moderator, suspended_until)

            log = await self._repo.insert_log(
                db,
                moderator=moderator,
                action=PAST_TENSE[action],
                subject_type=kind,
                subject_id=subject_id,
                target_name=name,
                reason=reason,
                duration_days=days,
            )
            resolved = await self._repo.resolve_cases(db, kind, subject_id, moderator)
            await db.commit()
        except AppError:
            await db.rollback()
            raise
        except STORAGE_ERRORS as exc:
            await db.rollback()
            raise translate_db_error(exc) from exc

        logger.info(
            "Moderation: %s %s %d (%s) by %s: %s -> %s, %d report(s) resolved",
            PAST_TENSE[action],
            kind,
            subject_id,
            name,
            moderator,
            current.value,
            new_state.value,
            resolved,
        )
        return ModerationActionResponse(
            subject_id=subject_id,
            subject_type=kind,
            state=new_state.value,
            suspended_until=suspended_until.isoformat() if suspended_until else None,
            changed=changed,
            resolved_cases=resolved,
            log=ModerationLogItem.from_entry(log),
        )

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    async def _resolve_subject_type(
        self, db: AsyncSession, subject_id: int, subject_type: SubjectType | None
    ) -> str:
        if subject_type is not None:
            return SubjectType(subject_type).value
        pending = await self._repo.pending_subject_type(db, subject_id)
        if pending is None:
            # Driver and passenger ids overlap
            raise InvalidInputError(
                f"subject_type is required: subject {subject_id} has no pending report"
            )
        return pending

    async def _require_subject(self, db: AsyncSession, subject_type: str, subject_id: int) -> str:
        name = await self._repo.get_subject_name(db, subject_type, subject_id)
        if name is None:
            raise ModerationSubjectNotFoundError(subject_type, subject_id)
        return name

    async def _apply_driver_block(
        self,
        db: AsyncSession,
        driver_id: int,
        action: ModerationAction,
        reason: str,
        moderator: str,
        suspended_until: datetime | None,
    ) -> None:
        cause = BlockCause.MODERATION.value
        if action is ModerationAction.SUSPEND:
            await self._driver_repo.add_block(
                db, driver_id, cause, reason, moderator, expires_at=suspended_until, replace=True
            )
        elif action is ModerationAction.BAN:
            await self._driver_repo.add_block(
                db, driver_id, cause, reason, moderator, expires_at=None, replace=True
            )
        elif action is ModerationAction.REINSTATE:
            await self._driver_repo.remove_block(db, driver_id, cause)
