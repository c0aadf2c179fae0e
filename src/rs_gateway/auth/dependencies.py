"""FastAPI dependency: get_current_admin.

Every console endpoint except login/refresh depends on it:

    @router.post("/protected")
    async def protected(admin: AdminUserModel = Depends(get_current_admin)):
        ...
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_common.database import get_db_session
from src.rs_common.errors import AccountDisabledError, InvalidCredentialsError
from src.rs_gateway.auth.jwt_handler import decode_token
from src.rs_gateway.user.db_models import AdminUserModel

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_admin(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> AdminUserModel:
    """Validate the Bearer token and return the active administrator.

    401 if the token is missing, invalid or expired, or the admin no longer
    exists; 403 (AccountDisabledError) if the admin has been disabled.
    """
    try:
        claims = decode_token(token, expected_type="access")
        admin_id = uuid.UUID(claims["sub"])
    except (InvalidCredentialsError, ValueError):
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(AdminUserModel).where(AdminUserModel.id == admin_id))
    admin = result.scalar_one_or_none()
    if admin is None:
        raise _CREDENTIALS_EXCEPTION
    if not admin.is_active:
        raise AccountDisabledError()
    return admin
