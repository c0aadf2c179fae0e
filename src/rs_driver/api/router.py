"""Drivers REST API — debts screen, debt block/unblock, wallet by driver."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_common.database import get_db_session
from src.rs_common.response import ApiResponse, success_response
from src.rs_driver.application.schemas import BlockRequest
from src.rs_gateway.auth.dependencies import get_current_admin
from src.rs_gateway.user.db_models import AdminUserModel
from src.rs_settlement.application.wiring import driver_service, ledger_service
from src.rs_wallet.application.schemas import AdjustRequest, PostingResponse

router = APIRouter(prefix="/drivers", tags=["drivers"])


def _get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "req_unknown")


@router.get("/debts", response_model=ApiResponse, summary="Drivers with wallet and debt status")
async def list_debts(
    request: Request,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    only_debts: bool = Query(False, description="Only drivers with a negative balance"),
    search: str | None = Query(None, max_length=100, description="Name, phone, email or plate"),
    page: int = Query(1, ge=1),
    per_page: int = Query(30, ge=1, le=100),
) -> ApiResponse:
    data = await driver_service.list_debts(db, only_debts, search, page, per_page)
    return success_response(data.model_dump(), _get_request_id(request))


@router.post("/{driver_id}/block", response_model=ApiResponse, summary="Block a driver for debt")
async def block_driver(
    request: Request,
    driver_id: int,
    body: BlockRequest,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await driver_service.block(db, driver_id, body.reason, admin.username)
    return success_response(data.model_dump(), _get_request_id(request))


@router.post("/{driver_id}/unblock", response_model=ApiResponse, summary="Lift a driver's debt block")
async def unblock_driver(
    request: Request,
    driver_id: int,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await driver_service.unblock(db, driver_id, admin.username)
    return success_response(data.model_dump(), _get_request_id(request))


@router.post(
    "/{driver_id}/wallet/adjust",
    response_model=ApiResponse,
    summary="Adjust a driver's wallet, creating it if needed",
)
async def adjust_driver_wallet(
    request: Request,
    driver_id: int,
    body: AdjustRequest,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    idempotency_key: Annotated[str | None, Header(max_length=190)] = None,
) -> ApiResponse:
    await driver_service.get_driver(db, driver_id)
    wallet = await ledger_service.ensure_wallet(db, driver_id)
    result = await ledger_service.adjust(
        db, wallet.id, body.amount, body.type, body.reason, admin.username, idempotency_key
    )
    data = PostingResponse.from_result(result)
    return success_response(data.model_dump(), _get_request_id(request))
