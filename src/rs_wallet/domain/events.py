"""Domain events for rs_wallet.

BalanceChanged is emitted after a posting commits. Observers (the debt
auto-block hook) run outside the posting transaction: they see committed
state and cannot undo the posting.
"""

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_wallet.domain.models import LedgerEntry, Wallet


@dataclass(frozen=True)
class BalanceChanged:
    wallet: Wallet
    entry: LedgerEntry

    @property
    def driver_id(self) -> int:
        return self.wallet.driver_id


class BalanceObserver(Protocol):
    async def on_balance_changed(self, db: AsyncSession, event: BalanceChanged) -> None: ...
