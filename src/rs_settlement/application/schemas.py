"""Pydantic schemas for ride settlement."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.rs_common.enums import PaymentMethod
from src.rs_pricing.application.schemas import CommissionSplitItem
from src.rs_wallet.application.schemas import LedgerEntryItem, WalletBalanceResponse


class SettleRideRequest(BaseModel):
    ride_id: str = Field(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_\-]+$")
    driver_id: int = Field(..., gt=0)
    distance_km: Decimal = Field(..., ge=0)
    stop_minutes: Decimal = Field(Decimal(0), ge=0)
    pickup_wait_minutes: Decimal = Field(Decimal(0), ge=0)
    payment_method: PaymentMethod = PaymentMethod.CARD
    completed_at: datetime | None = Field(None, description="Ride completion instant; defaults to now")


class SettlementResponse(BaseModel):
    ride_id: str
    driver_id: int
    fare: int
    multiplier: str
    active_multipliers: dict[str, str]
    min_fare_applied: bool
    config_version: int
    split: CommissionSplitItem
    payment_method: PaymentMethod
    posted_amount: int
    entry: LedgerEntryItem | None
    wallet: WalletBalanceResponse
    replayed: bool
