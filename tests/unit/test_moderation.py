"""Unit tests for the moderation state machine and ModerationApplicationService."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.rs_common.enums import BlockCause, ModerationAction, ModerationState, SubjectType
from src.rs_common.errors import (
    InvalidInputError,
    InvalidModerationTransitionError,
    ModerationReasonRequiredError,
    ModerationSubjectNotFoundError,
)
from src.rs_moderation.application.schemas import OpenCaseRequest
from src.rs_moderation.application.service import ModerationApplicationService
from src.rs_moderation.domain.models import (
    DEFAULT_SUSPENSION_DAYS,
    ModerationCase,
    ModerationLogEntry,
    SubjectStatus,
    next_state,
)

A, S, B = ModerationState.ACTIVE, ModerationState.SUSPENDED, ModerationState.BANNED


class TestNextState:
    @pytest.mark.parametrize(
        ("current", "action", "expected"),
        [
            (A, ModerationAction.WARN, A),
            (S, ModerationAction.WARN, S),
            (A, ModerationAction.SUSPEND, S),
            (S, ModerationAction.SUSPEND, S),
            (A, ModerationAction.BAN, B),
            (S, ModerationAction.BAN, B),
            (B, ModerationAction.BAN, B),
            (B, ModerationAction.REINSTATE, A),
            (S, ModerationAction.REINSTATE, A),
            (A, ModerationAction.REINSTATE, A),
        ],
    )
    def test_transitions(
        self, current: ModerationState, action: ModerationAction, expected: ModerationState
    ) -> None:
        assert next_state(current, action) is expected

    @pytest.mark.parametrize("action", [ModerationAction.WARN, ModerationAction.SUSPEND])
    def test_banned_must_be_reinstated_first(self, action: ModerationAction) -> None:
        with pytest.raises(InvalidModerationTransitionError):
            next_state(B, action)


class TestEffectiveState:
    def test_expired_suspension_is_active(self) -> None:
        now = datetime(2026, 3, 1, tzinfo=UTC)
        status = SubjectStatus("driver", 1, S.value, suspended_until=now - timedelta(seconds=1))
        assert status.effective_state(now) is A

    def test_running_suspension(self) -> None:
        now = datetime(2026, 3, 1, tzinfo=UTC)
        status = SubjectStatus("driver", 1, S.value, suspended_until=now + timedelta(days=1))
        assert status.effective_state(now) is S


def _db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


def _repo(
    state: ModerationState = A, pending_type: str | None = "driver", name: str | None = "Awa Koné"
) -> AsyncMock:
    repo = AsyncMock()
    repo.get_subject_name.return_value = name
    repo.pending_subject_type.return_value = pending_type
    repo.lock_status.side_effect = lambda db, kind, subject_id: SubjectStatus(kind, subject_id, state.value)
    repo.resolve_cases.return_value = 1

    async def _insert_log(db, **kwargs):
        return ModerationLogEntry(id=9, created_at=datetime.now(UTC), **kwargs)

    repo.insert_log.side_effect = _insert_log
    return repo


class TestAct:
    async def test_ban_driver_adds_permanent_moderation_block(self) -> None:
        repo, drivers = _repo(), AsyncMock()
        svc = ModerationApplicationService(repo=repo, driver_repo=drivers)
        db = _db()

        result = await svc.act(db, 1, ModerationAction.BAN, "Fraud", "mod1")

        assert result.state == "banned"
        assert result.changed is True
        assert result.log.action == "banned"
        assert result.log.target_type == "driver"
        drivers.add_block.assert_awaited_once()
        args, kwargs = drivers.add_block.await_args
        assert args[2] == BlockCause.MODERATION.value
        assert kwargs == {"expires_at": None, "replace": True}
        repo.save_status.assert_awaited_once()
        db.commit.assert_awaited_once()

    async def test_suspend_uses_default_duration(self) -> None:
        repo, drivers = _repo(), AsyncMock()
        svc = ModerationApplicationService(repo=repo, driver_repo=drivers)
        before = datetime.now(UTC)

        result = await svc.act(_db(), 1, ModerationAction.SUSPEND, "Rude", "mod1")

        expires_at = drivers.add_block.await_args.kwargs["expires_at"]
        assert expires_at >= before + timedelta(days=DEFAULT_SUSPENSION_DAYS)
        assert result.suspended_until == expires_at.isoformat()
        assert repo.insert_log.await_args.kwargs["duration_days"] == DEFAULT_SUSPENSION_DAYS

    async def test_reinstate_removes_only_moderation_cause(self) -> None:
        repo, drivers = _repo(state=B), AsyncMock()
        svc = ModerationApplicationService(repo=repo, driver_repo=drivers)

        result = await svc.act(_db(), 1, ModerationAction.REINSTATE, "", "mod1")

        assert result.state == "active"
        drivers.remove_block.assert_awaited_once()
        assert drivers.remove_block.await_args.args[2] == BlockCause.MODERATION.value
        drivers.add_block.assert_not_awaited()

    async def test_warn_keeps_state_and_logs(self) -> None:
        repo, drivers = _repo(), AsyncMock()
        svc = ModerationApplicationService(repo=repo, driver_repo=drivers)

        result = await svc.act(_db(), 1, ModerationAction.WARN, "Late", "mod1")

        assert result.changed is False
        assert result.log.action == "warned"
        repo.save_status.assert_not_awaited()
        drivers.add_block.assert_not_awaited()
        drivers.remove_block.assert_not_awaited()

    async def test_warn_on_banned_rolls_back(self) -> None:
        repo = _repo(state=B)
        db = _db()
        with pytest.raises(InvalidModerationTransitionError):
            await ModerationApplicationService(repo=repo, driver_repo=AsyncMock()).act(
                db, 1, ModerationAction.WARN, "again", "mod1"
            )
        db.rollback.assert_awaited_once()
        repo.insert_log.assert_not_awaited()

    async def test_reason_required(self) -> None:
        with pytest.raises(ModerationReasonRequiredError):
            await ModerationApplicationService(repo=_repo(), driver_repo=AsyncMock()).act(
                _db(), 1, ModerationAction.BAN, "  ", "mod1"
            )

    async def test_passenger_inferred_from_pending_report(self) -> None:
        repo, drivers = _repo(pending_type="passenger"), AsyncMock()
        svc = ModerationApplicationService(repo=repo, driver_repo=drivers)

        result = await svc.act(_db(), 4, ModerationAction.BAN, "Abuse", "mod1")

        assert result.subject_type == "passenger"
        drivers.add_block.assert_not_awaited()

    async def test_explicit_subject_type_wins(self) -> None:
        repo = _repo(pending_type="passenger")
        result = await ModerationApplicationService(repo=repo, driver_repo=AsyncMock()).act(
            _db(), 4, ModerationAction.WARN, "x", "mod1", subject_type=SubjectType.DRIVER
        )
        assert result.subject_type == "driver"
        repo.pending_subject_type.assert_not_awaited()

    async def test_subject_type_required_without_pending_report(self) -> None:
        repo, drivers = _repo(pending_type=None), AsyncMock()
        db = _db()

        with pytest.raises(InvalidInputError, match="subject_type is required"):
            await ModerationApplicationService(repo=repo, driver_repo=drivers).act(
                db, 4, ModerationAction.SUSPEND, "Rude", "mod1"
            )

        repo.get_subject_name.assert_not_awaited()
        drivers.add_block.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_unknown_subject(self) -> None:
        with pytest.raises(ModerationSubjectNotFoundError):
            await ModerationApplicationService(repo=_repo(name=None), driver_repo=AsyncMock()).act(
                _db(), 404, ModerationAction.WARN, "x", "mod1"
            )


class TestQueue:
    async def test_open_case(self) -> None:
        repo = _repo()
        repo.open_case.return_value = ModerationCase(
            id=12, case_type="Harassment", subject_type="driver", subject_id=1,
            subject_name="Awa Koné", reporter_name="Jean", reason="Shouted", status="pending",
            created_at=datetime(2026, 3, 1, tzinfo=UTC),
        )
        body = OpenCaseRequest(
            type="Harassment", subject_type="driver", subject_id=1, reporter_name="Jean", reason="Shouted"
        )

        item = await ModerationApplicationService(repo=repo, driver_repo=AsyncMock()).open_case(_db(), body)

        assert item.id == "12"
        assert item.type == "Harassment"
        assert item.date.startswith("2026-03-01")

    async def test_open_case_unknown_subject(self) -> None:
        body = OpenCaseRequest(
            type="Harassment", subject_type="passenger", subject_id=9, reporter_name="Jean", reason="x"
        )
        with pytest.raises(ModerationSubjectNotFoundError):
            await ModerationApplicationService(repo=_repo(name=None), driver_repo=AsyncMock()).open_case(
                _db(), body
            )
