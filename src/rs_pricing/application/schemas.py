"""Pydantic schemas for the pricing / commission API."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, model_validator

_HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PeakHoursPayload(BaseModel):
    enabled: bool = False
    multiplier: float = Field(..., ge=0)
    start_time: str = Field(..., pattern=_HHMM_PATTERN)
    end_time: str = Field(..., pattern=_HHMM_PATTERN)


class NightPayload(BaseModel):
    multiplier: float = Field(..., ge=0)
    start_time: str = Field(..., pattern=_HHMM_PATTERN)
    end_time: str = Field(..., pattern=_HHMM_PATTERN)


class WeatherPayload(BaseModel):
    enabled: bool = False
    multiplier: float = Field(..., ge=0)


class PricingPayload(BaseModel):
    """A complete pricing configuration; partial pricing updates are rejected."""

    base_fare: int = Field(..., ge=0)
    per_km: int = Field(..., ge=0)
    min_fare: int = Field(..., ge=0)
    stop_rate_per_min: int = Field(..., ge=0)
    pickup_grace_period_m: int = Field(..., ge=0)
    pickup_waiting_rate_per_min: int = Field(..., ge=0)
    peak_hours: PeakHoursPayload
    night: NightPayload
    weather: WeatherPayload


class CommissionPayload(BaseModel):
    # Sum-to-100 is a domain rule, checked by CommissionConfig
    platform_pct: int = Field(..., ge=0, le=100)
    driver_pct: int = Field(..., ge=0, le=100)
    maintenance_pct: int = Field(..., ge=0, le=100)


class PricingUpdateRequest(BaseModel):
    """PUT /pricing body.

    Accepts the console's two shapes: the flat pricing object (as sent by
    the pricing page) and `{"commission": {...}}` (as sent by the commission
    page), or both at once.
    """

    pricing: PricingPayload | None = None
    commission: CommissionPayload | None = None

    @model_validator(mode="before")
    @classmethod
    def lift_flat_pricing(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "pricing" in data:
            return data
        pricing_keys = set(PricingPayload.model_fields) & set(data)
        if not pricing_keys:
            return data
        lifted = {k: v for k, v in data.items() if k != "commission"}
        return {"pricing": lifted, "commission": data.get("commission")}

    @model_validator(mode="after")
    def require_something(self) -> "PricingUpdateRequest":
        if self.pricing is None and self.commission is None:
            raise ValueError("body must contain a pricing configuration, a commission object, or both")
        return self


class FareQuoteRequest(BaseModel):
    distance_km: Decimal = Field(..., ge=0, description="Trip distance in kilometres")
    stop_minutes: Decimal = Field(Decimal(0), ge=0)
    pickup_wait_minutes: Decimal = Field(Decimal(0), ge=0)
    at: datetime | None = Field(None, description="Pricing instant; defaults to now")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CommissionSplitItem(BaseModel):
    platform: int
    driver: int
    maintenance: int


class FareQuoteResponse(BaseModel):
    fare: int
    raw_amount: str
    multiplier: str
    active_multipliers: dict[str, str]
    min_fare_applied: bool
    billable_wait_minutes: str
    local_time: str
    config_version: int
    split: CommissionSplitItem
    fare_display: str
