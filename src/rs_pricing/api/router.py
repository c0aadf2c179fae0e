"""Pricing / commission REST API.

GET  /pricing        current snapshot (pricing fields at top level + commission)
PUT  /pricing        replace pricing, commission, or both
POST /pricing/quote  price a hypothetical ride; nothing is posted
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_common.database import get_db_session
from src.rs_common.response import ApiResponse, success_response
from src.rs_gateway.auth.dependencies import get_current_admin
from src.rs_gateway.user.db_models import AdminUserModel
from src.rs_pricing.application.schemas import FareQuoteRequest, PricingUpdateRequest
from src.rs_pricing.application.service import PricingApplicationService

router = APIRouter(prefix="/pricing", tags=["pricing"])

_service = PricingApplicationService()


def _get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "req_unknown")


@router.get("", response_model=ApiResponse, summary="Current pricing and commission")
async def get_pricing(
    request: Request,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.get_config(db)
    return success_response(data, _get_request_id(request))


@router.put("", response_model=ApiResponse, summary="Replace pricing and/or commission")
async def update_pricing(
    request: Request,
    body: PricingUpdateRequest,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.update_config(db, body, admin.username)
    resp = success_response(data, _get_request_id(request))
    resp.message = "Configuration updated"
    return resp


@router.post("/quote", response_model=ApiResponse, summary="Quote a fare without posting")
async def quote_fare(
    request: Request,
    body: FareQuoteRequest,
    admin: Annotated[AdminUserModel, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.quote(db, body)
    return success_response(data.model_dump(), _get_request_id(request))
