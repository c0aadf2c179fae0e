"""SettlementService — completed ride -> fare -> split -> wallet posting.

The posting is keyed `ride:<ride_id>`, so settling the same ride twice
returns the first posting instead of paying the driver twice. A ride whose
wallet-side amount is zero (0% driver share on a card ride, for example)
is priced and split but posts nothing. A replay whose amount no longer
matches the current configuration is a ConflictError.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rs_commission.domain.splitter import CommissionSplit, split
from src.rs_common.datetime_utils import local_wall_clock, utc_now
from src.rs_common.enums import SYSTEM_ACTOR, LedgerEntryType, PaymentMethod
from src.rs_common.errors import ConflictError
from src.rs_driver.application.service import DriverApplicationService
from src.rs_pricing.application.config_store import SettlementConfigStore
from src.rs_pricing.application.schemas import CommissionSplitItem
from src.rs_pricing.domain.fare import compute_fare
from src.rs_settlement.application.schemas import SettleRideRequest, SettlementResponse
from src.rs_wallet.application.schemas import LedgerEntryItem, WalletBalanceResponse
from src.rs_wallet.application.service import WalletLedgerService

logger = logging.getLogger(__name__)


def wallet_amount(shares: CommissionSplit, method: PaymentMethod) -> int:
    """Signed amount the ride moves on the driver's wallet."""
    if PaymentMethod(method) is PaymentMethod.CASH:
        # The driver kept the whole fare and owes the other two shares
        return -(shares.platform + shares.maintenance)
    return shares.driver


def idempotency_key_for(ride_id: str) -> str:
    return f"ride:{ride_id}"


class SettlementService:
    def __init__(
        self,
        ledger: WalletLedgerService,
        drivers: DriverApplicationService,
        store: SettlementConfigStore | None = None,
    ) -> None:
        self._ledger = ledger
        self._drivers = drivers
        self._store = store or SettlementConfigStore()

    async def settle(self, db: AsyncSession, body: SettleRideRequest) -> SettlementResponse:
        await self._drivers.get_driver(db, body.driver_id)
        snapshot = await self._store.current(db)

        now = local_wall_clock(body.completed_at or utc_now(), settings.PRICING_TIMEZONE)
        breakdown = compute_fare(
            body.distance_km,
            body.stop_minutes,
            body.pickup_wait_minutes,
            now,
            snapshot.pricing,
        )
        shares = split(breakdown.fare, snapshot.commission)
        amount = wallet_amount(shares, body.payment_method)

        entry = None
        replayed = False
        if amount == 0:
            wallet = await self._ledger.ensure_wallet(db, body.driver_id)
        else:
            result = await self._ledger.post_for_driver(
                db,
                body.driver_id,
                amount,
                reason=f"Ride {body.ride_id} settlement ({body.payment_method.value})",
                actor=SYSTEM_ACTOR,
                entry_type=LedgerEntryType.RIDE_SETTLEMENT,
                reference_id=body.ride_id,
                idempotency_key=idempotency_key_for(body.ride_id),
            )
            wallet, entry, replayed = result.wallet, result.entry, result.replayed
            if replayed and entry.amount != amount:
                # Settled earlier under a different configuration
                raise ConflictError(
                    f"Ride {body.ride_id} was already settled for {entry.amount:+d}, "
                    f"current configuration gives {amount:+d}"
                )
        posted = entry.amount if entry is not None else 0

        logger.info(
            "Ride %s settled for driver %d: fare=%d x%s split=%d/%d/%d posted=%+d%s (config v%d)",
            body.ride_id,
            body.driver_id,
            breakdown.fare,
            breakdown.multiplier,
            shares.platform,
            shares.driver,
            shares.maintenance,
            posted,
            " [replayed]" if replayed else "",
            snapshot.version,
        )
        return SettlementResponse(
            ride_id=body.ride_id,
            driver_id=body.driver_id,
            fare=breakdown.fare,
            multiplier=str(breakdown.multiplier),
            active_multipliers={k: str(v) for k, v in breakdown.active_multipliers.items()},
            min_fare_applied=breakdown.min_fare_applied,
            config_version=snapshot.version,
            split=CommissionSplitItem(
                platform=shares.platform, driver=shares.driver, maintenance=shares.maintenance
            ),
            payment_method=body.payment_method,
            posted_amount=posted,
            entry=LedgerEntryItem.from_entry(entry) if entry is not None else None,
            wallet=WalletBalanceResponse.from_wallet(wallet),
            replayed=replayed,
        )
