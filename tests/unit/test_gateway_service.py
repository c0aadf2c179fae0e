"""Unit tests for the administrator service (mocked DB)."""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.rs_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    UsernameExistsError,
)
from src.rs_gateway.auth.jwt_handler import create_access_token, create_refresh_token
from src.rs_gateway.user.db_models import AdminUserModel
from src.rs_gateway.user.service import AdminUserService


def _make_admin(is_active: bool = True) -> AdminUserModel:
    admin = AdminUserModel()
    admin.id = uuid.uuid4()
    admin.username = "ops.alice"
    admin.email = "alice@ops.example.com"
    admin.password_hash = "$2b$12$fakehash"
    admin.is_active = is_active
    return admin


def _result(value: object) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def mock_db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def service() -> AdminUserService:
    return AdminUserService()


class TestCreateAdmin:
    async def test_duplicate_username_raises_error(
        self, service: AdminUserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_admin()))

        with pytest.raises(UsernameExistsError):
            await service.create_admin("ops.alice", "new@ops.example.com", "Console2026x", mock_db)

    async def test_duplicate_email_raises_error(
        self, service: AdminUserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(side_effect=[_result(None), _result(_make_admin())])

        with pytest.raises(EmailExistsError):
            await service.create_admin("ops.bob", "alice@ops.example.com", "Console2026x", mock_db)

    async def test_success_hashes_password_and_flushes(
        self, service: AdminUserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))

        admin = await service.create_admin("ops.bob", "bob@ops.example.com", "Console2026x", mock_db)

        assert admin.username == "ops.bob"
        assert admin.password_hash != "Console2026x"
        mock_db.add.assert_called_once_with(admin)
        mock_db.flush.assert_awaited_once()
        mock_db.commit.assert_not_awaited()


class TestLogin:
    async def test_unknown_username_raises_credentials_error(
        self, service: AdminUserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))

        with pytest.raises(InvalidCredentialsError):
            await service.login("nobody", "Console2026x", mock_db)

    async def test_wrong_password_raises_credentials_error(
        self, service: AdminUserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_admin()))

        with (
            patch("src.rs_gateway.user.service.verify_password", return_value=False),
            pytest.raises(InvalidCredentialsError),
        ):
            await service.login("ops.alice", "WrongPass1x", mock_db)

    async def test_disabled_admin_raises_error(
        self, service: AdminUserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_admin(is_active=False)))

        with (
            patch("src.rs_gateway.user.service.verify_password", return_value=True),
            pytest.raises(AccountDisabledError),
        ):
            await service.login("ops.alice", "Console2026x", mock_db)

    async def test_success_returns_token_pair(
        self, service: AdminUserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_admin()))

        with patch("src.rs_gateway.user.service.verify_password", return_value=True):
            admin, access, refresh = await service.login("ops.alice", "Console2026x", mock_db)

        assert admin.username == "ops.alice"
        assert access != refresh


class TestRefresh:
    async def test_garbage_token_raises_error(self, service: AdminUserService) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh("not.a.real.token")

    async def test_access_token_used_as_refresh_raises_error(
        self, service: AdminUserService
    ) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_access_token("admin-123", "ops.alice"))

    async def test_refresh_issues_access_token_for_same_admin(
        self, service: AdminUserService
    ) -> None:
        from src.rs_gateway.auth.jwt_handler import decode_token

        access = await service.refresh(create_refresh_token("admin-123", "ops.alice"))

        claims = decode_token(access, expected_type="access")
        assert claims["sub"] == "admin-123"
        assert claims["usr"] == "ops.alice"
