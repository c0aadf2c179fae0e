"""Unit tests for SettlementService with mocked ledger, drivers and config store."""

from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.rs_commission.domain.models import DEFAULT_COMMISSION, CommissionConfig
from src.rs_commission.domain.splitter import CommissionSplit
from src.rs_common.enums import SYSTEM_ACTOR, LedgerEntryType, PaymentMethod
from src.rs_common.errors import ConflictError, DriverNotFoundError
from src.rs_pricing.domain.models import DEFAULT_PRICING
from src.rs_pricing.domain.snapshot import SettlementConfig
from src.rs_settlement.application.schemas import SettleRideRequest
from src.rs_settlement.application.service import (
    SettlementService,
    idempotency_key_for,
    wallet_amount,
)
from src.rs_wallet.application.service import WalletLedgerService
from src.rs_wallet.domain.models import LedgerEntry, PostingResult, Wallet

SNAPSHOT = SettlementConfig(version=4, pricing=DEFAULT_PRICING, commission=DEFAULT_COMMISSION)
NOON = datetime(2026, 3, 1, 12, 0)


def _wallet(balance: int = 0) -> Wallet:
    return Wallet(id=3, driver_id=10, balance=balance, currency="XOF", version=1)


def _posting(amount: int, replayed: bool = False) -> PostingResult:
    entry = LedgerEntry(
        id=21, wallet_id=3, entry_type="RIDE_SETTLEMENT", amount=amount, balance_after=amount,
        reason="Ride R1 settlement", actor=SYSTEM_ACTOR, reference_id="R1",
        idempotency_key="ride:R1", created_at=datetime.now(UTC),
    )
    return PostingResult(wallet=_wallet(amount), entry=entry, replayed=replayed)


def _service(snapshot: SettlementConfig = SNAPSHOT) -> tuple[SettlementService, AsyncMock, AsyncMock]:
    ledger, drivers, store = AsyncMock(), AsyncMock(), AsyncMock()
    store.current.return_value = snapshot
    return SettlementService(ledger=ledger, drivers=drivers, store=store), ledger, drivers


def _db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


def _ride(**overrides) -> SettleRideRequest:
    data = {"ride_id": "R1", "driver_id": 10, "distance_km": Decimal("2"), "completed_at": NOON}
    data.update(overrides)
    return SettleRideRequest(**data)


class TestWalletAmount:
    def test_card_credits_driver_share(self) -> None:
        assert wallet_amount(CommissionSplit(700, 200, 100), PaymentMethod.CARD) == 200

    def test_cash_debits_platform_and_maintenance(self) -> None:
        assert wallet_amount(CommissionSplit(700, 200, 100), PaymentMethod.CASH) == -800

    def test_idempotency_key(self) -> None:
        assert idempotency_key_for("R-77") == "ride:R-77"


class TestSettle:
    async def test_card_ride_posts_driver_share(self) -> None:
        svc, ledger, _ = _service()
        ledger.post_for_driver.return_value = _posting(200)

        result = await svc.settle(_db(), _ride())

        assert result.fare == 1000
        assert (result.split.platform, result.split.driver, result.split.maintenance) == (700, 200, 100)
        assert result.posted_amount == 200
        assert result.config_version == 4
        args, kwargs = ledger.post_for_driver.await_args
        assert args[1:] == (10, 200)
        assert kwargs["entry_type"] is LedgerEntryType.RIDE_SETTLEMENT
        assert kwargs["actor"] == SYSTEM_ACTOR
        assert kwargs["reference_id"] == "R1"
        assert kwargs["idempotency_key"] == "ride:R1"

    async def test_cash_ride_debits_wallet(self) -> None:
        svc, ledger, _ = _service()
        ledger.post_for_driver.return_value = _posting(-800)

        result = await svc.settle(_db(), _ride(payment_method="cash"))

        assert ledger.post_for_driver.await_args.args[2] == -800
        assert result.wallet.has_debt is True
        assert result.payment_method is PaymentMethod.CASH

    async def test_zero_driver_share_posts_nothing(self) -> None:
        snapshot = replace(SNAPSHOT, commission=CommissionConfig(90, 0, 10))
        svc, ledger, _ = _service(snapshot)
        ledger.ensure_wallet.return_value = _wallet()

        result = await svc.settle(_db(), _ride())

        ledger.post_for_driver.assert_not_awaited()
        assert result.posted_amount == 0
        assert result.entry is None

    async def test_replay_is_reported(self) -> None:
        svc, ledger, _ = _service()
        ledger.post_for_driver.return_value = _posting(200, replayed=True)

        result = await svc.settle(_db(), _ride())

        assert result.replayed is True

    async def test_night_multiplier_applies_at_completion_time(self) -> None:
        pricing = replace(DEFAULT_PRICING, night=replace(DEFAULT_PRICING.night, multiplier=Decimal("1.2")))
        svc, ledger, _ = _service(replace(SNAPSHOT, pricing=pricing))
        ledger.post_for_driver.return_value = _posting(240)

        result = await svc.settle(_db(), _ride(completed_at=datetime(2026, 3, 1, 23, 30)))

        assert result.fare == 1200
        assert result.active_multipliers == {"night": "1.2"}

    async def test_unknown_driver_posts_nothing(self) -> None:
        svc, ledger, drivers = _service()
        drivers.get_driver.side_effect = DriverNotFoundError(10)

        with pytest.raises(DriverNotFoundError):
            await svc.settle(_db(), _ride())

        ledger.post_for_driver.assert_not_awaited()


class TestReplayUnderChangedConfig:
    CHANGED = replace(SNAPSHOT, version=5, commission=CommissionConfig(50, 40, 10))

    async def test_replayed_amount_mismatch_conflicts(self) -> None:
        svc, ledger, _ = _service(self.CHANGED)
        ledger.post_for_driver.return_value = _posting(200, replayed=True)

        with pytest.raises(ConflictError, match=r"already settled for \+200"):
            await svc.settle(_db(), _ride())

    async def test_ledger_refuses_to_post_again(self) -> None:
        repo = AsyncMock()
        repo.get_or_create_wallet.return_value = _wallet(200)
        repo.lock_wallet.return_value = _wallet(200)
        repo.find_entry_by_idempotency_key.return_value = _posting(200).entry
        ledger = WalletLedgerService(repo=repo)
        store = AsyncMock()
        store.current.return_value = self.CHANGED
        svc = SettlementService(ledger=ledger, drivers=AsyncMock(), store=store)
        db = _db()

        with pytest.raises(ConflictError):
            await svc.settle(db, _ride())

        repo.apply_amount.assert_not_awaited()
        repo.insert_entry.assert_not_awaited()
        db.rollback.assert_awaited()

    async def test_same_config_replay_reports_original_posting(self) -> None:
        svc, ledger, _ = _service()
        ledger.post_for_driver.return_value = _posting(200, replayed=True)

        result = await svc.settle(_db(), _ride())

        assert result.replayed is True
        assert result.posted_amount == 200
        assert result.split.driver == 200
