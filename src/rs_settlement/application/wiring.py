"""Process-wide service instances.

Every posting path must share one WalletLedgerService: its per-wallet
asyncio locks only serialize postings that go through the same instance.
"""

from config.settings import settings
from src.rs_driver.application.service import DriverApplicationService
from src.rs_driver.domain.policy import policy_from_threshold
from src.rs_settlement.application.service import SettlementService
from src.rs_wallet.application.service import WalletLedgerService

driver_service = DriverApplicationService(
    policy=policy_from_threshold(settings.DEBT_AUTO_BLOCK_THRESHOLD)
)
ledger_service = WalletLedgerService(
    observers=[driver_service],
    debt_limit=settings.WALLET_DEBT_LIMIT,
)
settlement_service = SettlementService(ledger=ledger_service, drivers=driver_service)
