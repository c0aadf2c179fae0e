"""Moderation REST API — report queue, audit log, account actions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_common.database import get_db_session
from src.rs_common.enums import ModerationAction
from src.rs_common.response import ApiResponse, success_response
from src.rs_gateway.auth.dependencies import get_current_admin
from src.rs_gateway.user.db_models import AdminUserModel
from src.rs_moderation.application.schemas import ModerationActionRequest, OpenCaseRequest
from src.rs_moderation.application.service import ModerationApplicationService

router = APIRouter(prefix="/moderation", tags=["moderation"])

_service = ModerationApplicationService()


def _get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "req_unknown")


@router.get("/queue", response_model=ApiResponse, summary="Pending reports, oldest first")
async def get_queue(
    request: Request,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    items = await _service.queue(db, limit)
    return success_response([i.model_dump() for i in items], _get_request_id(request))


@router.post(
    "/queue",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="File a report against a driver or passenger",
)
async def open_case(
    request: Request,
    body: OpenCaseRequest,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    item = await _service.open_case(db, body)
    return success_response(item.model_dump(), _get_request_id(request))


@router.get("/logs", response_model=ApiResponse, summary="Moderation audit log, newest first")
async def get_logs(
    request: Request,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    search: str | None = Query(None, max_length=100, description="Moderator, target or reason"),
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    items = await _service.logs(db, search, limit)
    return success_response([i.model_dump() for i in items], _get_request_id(request))


@router.post("/{subject_id}/{action}", response_model=ApiResponse, summary="Warn, suspend, ban or reinstate")
async def moderate(
    request: Request,
    body: ModerationActionRequest,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    subject_id: int = Path(..., gt=0),
    action: ModerationAction = Path(...),
) -> ApiResponse:
    data = await _service.act(
        db,
        subject_id,
        action,
        body.reason,
        admin.username,
        subject_type=body.subject_type,
        duration_days=body.duration_days,
    )
    return success_response(data.model_dump(), _get_request_id(request))
