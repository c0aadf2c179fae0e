"""Wallet REST API — balance, manual adjustment, ledger history, verification."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_common.database import get_db_session
from src.rs_common.response import ApiResponse, success_response
from src.rs_gateway.auth.dependencies import get_current_admin
from src.rs_gateway.user.db_models import AdminUserModel
from src.rs_settlement.application.wiring import ledger_service
from src.rs_wallet.application.schemas import (
    AdjustRequest,
    PostingResponse,
    WalletBalanceResponse,
)

router = APIRouter(prefix="/wallets", tags=["wallets"])


def _get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "req_unknown")


@router.get("/{wallet_id}", response_model=ApiResponse, summary="Balance and debt status")
async def get_wallet(
    request: Request,
    wallet_id: int,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    wallet = await ledger_service.get_balance(db, wallet_id)
    return success_response(
        WalletBalanceResponse.from_wallet(wallet).model_dump(), _get_request_id(request)
    )


@router.post("/{wallet_id}/adjust", response_model=ApiResponse, summary="Manual credit or debit")
async def adjust_wallet(
    request: Request,
    wallet_id: int,
    body: AdjustRequest,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    idempotency_key: Annotated[str | None, Header(max_length=190)] = None,
) -> ApiResponse:
    result = await ledger_service.adjust(
        db, wallet_id, body.amount, body.type, body.reason, admin.username, idempotency_key
    )
    resp = success_response(PostingResponse.from_result(result).model_dump(), _get_request_id(request))
    if result.replayed:
        resp.message = "Already applied"
    return resp


@router.get("/{wallet_id}/ledger", response_model=ApiResponse, summary="Ledger history, newest first")
async def list_ledger(
    request: Request,
    wallet_id: int,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await ledger_service.list_entries(db, wallet_id, cursor, limit)
    return success_response(data.model_dump(), _get_request_id(request))


@router.get("/{wallet_id}/verify", response_model=ApiResponse, summary="Recompute balance from ledger")
async def verify_wallet(
    request: Request,
    wallet_id: int,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await ledger_service.verify_balance(db, wallet_id)
    return success_response(data.model_dump(), _get_request_id(request))
