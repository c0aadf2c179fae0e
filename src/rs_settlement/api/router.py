"""Settlement REST API — settle a completed ride."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_common.database import get_db_session
from src.rs_common.response import ApiResponse, success_response
from src.rs_gateway.auth.dependencies import get_current_admin
from src.rs_gateway.user.db_models import AdminUserModel
from src.rs_settlement.application.schemas import SettleRideRequest
from src.rs_settlement.application.wiring import settlement_service

router = APIRouter(prefix="/settlements", tags=["settlements"])


def _get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "req_unknown")


@router.post("", response_model=ApiResponse, summary="Settle a completed ride")
async def settle_ride(
    request: Request,
    body: SettleRideRequest,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await settlement_service.settle(db, body)
    resp = success_response(data.model_dump(mode="json"), _get_request_id(request))
    if data.replayed:
        resp.message = "Ride already settled"
    return resp
