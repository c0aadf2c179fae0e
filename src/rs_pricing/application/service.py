"""PricingApplicationService — config read/replace and fare quotes."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rs_commission.domain.models import CommissionConfig
from src.rs_commission.domain.splitter import split
from src.rs_common.datetime_utils import local_wall_clock, utc_now
from src.rs_common.money import format_amount
from src.rs_pricing.application.config_store import SettlementConfigStore
from src.rs_pricing.application.schemas import (
    CommissionSplitItem,
    FareQuoteRequest,
    FareQuoteResponse,
    PricingUpdateRequest,
)
from src.rs_pricing.domain.fare import compute_fare
from src.rs_pricing.domain.models import PricingConfig
from src.rs_pricing.domain.time_window import format_hhmm


class PricingApplicationService:
    def __init__(self, store: SettlementConfigStore | None = None) -> None:
        self._store = store or SettlementConfigStore()

    async def get_config(self, db: AsyncSession) -> dict[str, Any]:
        snapshot = await self._store.current(db)
        return snapshot.to_dict()

    async def update_config(
        self, db: AsyncSession, body: PricingUpdateRequest, actor: str
    ) -> dict[str, Any]:
        # Both constructors validate; an invalid body raises before any write
        pricing = PricingConfig.from_mapping(body.pricing.model_dump()) if body.pricing else None
        commission = (
            CommissionConfig.from_mapping(body.commission.model_dump()) if body.commission else None
        )
        snapshot = await self._store.replace(
            db, updated_by=actor, pricing=pricing, commission=commission
        )
        return snapshot.to_dict()

    async def quote(self, db: AsyncSession, body: FareQuoteRequest) -> FareQuoteResponse:
        snapshot = await self._store.current(db)
        now = local_wall_clock(body.at or utc_now(), settings.PRICING_TIMEZONE)
        breakdown = compute_fare(
            body.distance_km,
            body.stop_minutes,
            body.pickup_wait_minutes,
            now,
            snapshot.pricing,
        )
        shares = split(breakdown.fare, snapshot.commission)
        return FareQuoteResponse(
            fare=breakdown.fare,
            raw_amount=str(breakdown.raw_amount),
            multiplier=str(breakdown.multiplier),
            active_multipliers={k: str(v) for k, v in breakdown.active_multipliers.items()},
            min_fare_applied=breakdown.min_fare_applied,
            billable_wait_minutes=str(breakdown.billable_wait_minutes),
            local_time=format_hhmm(now),
            config_version=snapshot.version,
            split=CommissionSplitItem(
                platform=shares.platform, driver=shares.driver, maintenance=shares.maintenance
            ),
            fare_display=format_amount(breakdown.fare, settings.DEFAULT_CURRENCY),
        )
