# src/rs_wallet/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_wallet.domain.models import LedgerEntry, Wallet


class WalletRepositoryProtocol(Protocol):
    async def get_wallet(self, db: AsyncSession, wallet_id: int) -> Wallet | None: ...

    async def get_or_create_wallet(
        self, db: AsyncSession, driver_id: int, currency: str
    ) -> Wallet: ...

    async def lock_wallet(
        self, db: AsyncSession, wallet_id: int, lock_timeout_ms: int
    ) -> Wallet | None: ...

    async def find_entry_by_idempotency_key(
        self, db: AsyncSession, wallet_id: int, idempotency_key: str
    ) -> LedgerEntry | None: ...

    async def apply_amount(self, db: AsyncSession, wallet_id: int, amount: int) -> Wallet: ...

    async def insert_entry(
        self,
        db: AsyncSession,
        wallet_id: int,
        entry_type: str,
        amount: int,
        balance_after: int,
        reason: str,
        actor: str,
        reference_id: str | None,
        idempotency_key: str | None,
    ) -> LedgerEntry: ...

    async def list_entries(
        self, db: AsyncSession, wallet_id: int, cursor_id: int | None, limit: int
    ) -> list[LedgerEntry]: ...

    async def sum_entries(self, db: AsyncSession, wallet_id: int) -> tuple[int, int]: ...
