"""Auth API router: login, refresh, me, create admin.

request_id is read from request.state (injected by RequestLogMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_common.database import get_db_session
from src.rs_common.response import ApiResponse, success_response
from src.rs_gateway.auth.dependencies import get_current_admin
from src.rs_gateway.auth.jwt_handler import ACCESS_TOKEN_TTL
from src.rs_gateway.user.db_models import AdminUserModel
from src.rs_gateway.user.schemas import (
    AdminInfo,
    CreateAdminRequest,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
)
from src.rs_gateway.user.service import AdminUserService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = AdminUserService()


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


def _admin_info(admin: AdminUserModel) -> AdminInfo:
    return AdminInfo(admin_id=str(admin.id), username=admin.username, email=admin.email)


@router.post("/login", response_model=ApiResponse, summary="Administrator login")
async def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    admin, access_token, refresh_token = await _service.login(body.username, body.password, db)
    data = LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=int(ACCESS_TOKEN_TTL.total_seconds()),
        admin=_admin_info(admin),
    )
    resp = success_response(data.model_dump(), _get_request_id(request))
    resp.message = "Login successful"
    return resp


@router.post("/refresh", response_model=ApiResponse, summary="Refresh access token")
async def refresh_token(request: Request, body: RefreshRequest) -> ApiResponse:
    access_token = await _service.refresh(body.refresh_token)
    data = RefreshResponse(
        access_token=access_token, expires_in=int(ACCESS_TOKEN_TTL.total_seconds())
    )
    return success_response(data.model_dump(), _get_request_id(request))


@router.get("/me", response_model=ApiResponse, summary="Current administrator")
async def me(
    request: Request,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
) -> ApiResponse:
    return success_response(_admin_info(admin).model_dump(), _get_request_id(request))


@router.post(
    "/admins",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="Create another administrator",
)
async def create_admin(
    request: Request,
    body: CreateAdminRequest,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    try:
        created = await _service.create_admin(body.username, body.email, body.password, db)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    resp = success_response(_admin_info(created).model_dump(), _get_request_id(request))
    resp.message = f"Administrator created by {admin.username}"
    return resp
