"""Administrator service: create, login, refresh.

All DB operations use the injected AsyncSession. The router commits.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.rs_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.rs_gateway.auth.password import hash_password, verify_password
from src.rs_gateway.user.db_models import AdminUserModel

logger = logging.getLogger(__name__)


class AdminUserService:
    """Stateless service — instantiate once, reuse across requests."""

    async def create_admin(
        self,
        username: str,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> AdminUserModel:
        result = await db.execute(
            select(AdminUserModel).where(AdminUserModel.username == username)
        )
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        result = await db.execute(select(AdminUserModel).where(AdminUserModel.email == email))
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        admin = AdminUserModel(
            username=username,
            email=email,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(admin)
        await db.flush()
        logger.info("Administrator created: %s", username)
        return admin

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[AdminUserModel, str, str]:
        """Return (admin, access_token, refresh_token).

        Unknown username and wrong password raise the same error.
        """
        result = await db.execute(
            select(AdminUserModel).where(AdminUserModel.username == username)
        )
        admin = result.scalar_one_or_none()

        if admin is None or not verify_password(password, admin.password_hash):
            raise InvalidCredentialsError()
        if not admin.is_active:
            raise AccountDisabledError()

        admin_id = str(admin.id)
        return (
            admin,
            create_access_token(admin_id, admin.username),
            create_refresh_token(admin_id, admin.username),
        )

    async def refresh(self, refresh_token: str) -> str:
        claims = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(claims["sub"], claims.get("usr", ""))
