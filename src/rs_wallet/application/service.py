"""WalletLedgerService — the only writer of wallets.balance.

Every posting, manual adjustment or ride settlement, takes the same path:

  per-wallet asyncio.Lock            (serializes postings in this process)
  -> SELECT ... FOR UPDATE           (serializes across processes, bounded
                                      by lock_timeout)
  -> idempotency lookup
  -> debt ceiling check              (under the row lock)
  -> UPDATE balance + INSERT entry   (one transaction)
  -> COMMIT
  -> BalanceChanged observers

Lock timeouts, deadlocks and serialization failures surface as ConflictError;
other storage failures as PersistenceUnavailableError. Either way nothing
was written and the caller may retry the whole posting.
"""

import asyncio
import logging
import weakref
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rs_common.db_errors import STORAGE_ERRORS, translate_db_error
from src.rs_common.enums import AdjustmentType, LedgerEntryType
from src.rs_common.errors import (
    AppError,
    ConflictError,
    DebtLimitExceededError,
    InvalidAmountError,
    WalletNotFoundError,
)
from src.rs_wallet.application.schemas import (
    LedgerEntryItem,
    LedgerResponse,
    VerifyResponse,
    cursor_decode,
    cursor_encode,
)
from src.rs_wallet.domain.events import BalanceChanged, BalanceObserver
from src.rs_wallet.domain.models import LedgerEntry, PostingResult, Wallet
from src.rs_wallet.domain.repository import WalletRepositoryProtocol
from src.rs_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


def _validate_posting(amount: object, reason: object) -> str:
    # bool is an int subclass; True must not post 1
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(f"amount must be an integer, got {amount!r}")
    if amount == 0:
        raise InvalidAmountError("amount must be non-zero")
    if not isinstance(reason, str) or not reason.strip():
        raise InvalidAmountError("reason is required")
    return reason.strip()


def _same_posting(
    entry: LedgerEntry, entry_type: LedgerEntryType, amount: int, reference_id: str | None
) -> bool:
    return (
        entry.entry_type == LedgerEntryType(entry_type).value
        and entry.amount == amount
        and entry.reference_id == reference_id
    )


def adjustment_key(idempotency_key: str | None) -> str | None:
    """Manual keys get their own prefix so they can never match a `ride:` key."""
    return f"adjust:{idempotency_key}" if idempotency_key is not None else None


class WalletLedgerService:
    def __init__(
        self,
        repo: WalletRepositoryProtocol | None = None,
        observers: Sequence[BalanceObserver] = (),
        debt_limit: int | None = None,
        lock_timeout_ms: int | None = None,
    ) -> None:
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()
        self._observers = list(observers)
        self._debt_limit = debt_limit
        self._lock_timeout_ms = lock_timeout_ms or settings.LEDGER_LOCK_TIMEOUT_MS
        # Entries live only while a posting holds or awaits the lock
        self._wallet_locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()

    def _get_or_create_lock(self, wallet_id: int) -> asyncio.Lock:
        lock = self._wallet_locks.get(wallet_id)
        if lock is None:
            lock = asyncio.Lock()
            self._wallet_locks[wallet_id] = lock
        return lock

    # ------------------------------------------------------------------
    # Postings
    # ------------------------------------------------------------------

    async def post_entry(
        self,
        db: AsyncSession,
        wallet_id: int,
        amount: int,
        reason: str,
        actor: str,
        entry_type: LedgerEntryType,
        reference_id: str | None = None,
        idempotency_key: str | None = None,
    ) -> PostingResult:
        reason = _validate_posting(amount, reason)

        async with self._get_or_create_lock(wallet_id):
            try:
                result = await self._post_locked(
                    db, wallet_id, amount, reason, actor, entry_type, reference_id, idempotency_key
                )
            except AppError:
                await db.rollback()
                raise
            except STORAGE_ERRORS as exc:
                await db.rollback()
                raise translate_db_error(exc) from exc

        if result.replayed:
            logger.info(
                "Replayed posting wallet=%d key=%s entry=%d",
                wallet_id,
                idempotency_key,
                result.entry.id,
            )
            return result

        logger.info(
            "Posted %s %+d to wallet=%d by %s: balance %d (entry=%d)",
            result.entry.entry_type,
            amount,
            wallet_id,
            actor,
            result.wallet.balance,
            result.entry.id,
        )
        await self._notify(db, BalanceChanged(wallet=result.wallet, entry=result.entry))
        return result

    async def _post_locked(
        self,
        db: AsyncSession,
        wallet_id: int,
        amount: int,
        reason: str,
        actor: str,
        entry_type: LedgerEntryType,
        reference_id: str | None,
        idempotency_key: str | None,
    ) -> PostingResult:
        wallet = await self._repo.lock_wallet(db, wallet_id, self._lock_timeout_ms)
        if wallet is None:
            raise WalletNotFoundError(wallet_id)

        if idempotency_key is not None:
            existing = await self._repo.find_entry_by_idempotency_key(db, wallet_id, idempotency_key)
            if existing is not None:
                if not _same_posting(existing, entry_type, amount, reference_id):
                    raise ConflictError(
                        f"Idempotency key {idempotency_key!r} was already used for a different posting "
                        f"(entry {existing.id}: {existing.entry_type} {existing.amount:+d})"
                    )
                # Releases the row lock; nothing was written
                await db.rollback()
                return PostingResult(wallet=wallet, entry=existing, replayed=True)

        self._check_debt_limit(wallet, amount)

        updated = await self._repo.apply_amount(db, wallet_id, amount)
        entry = await self._repo.insert_entry(
            db,
            wallet_id=wallet_id,
            entry_type=LedgerEntryType(entry_type).value,
            amount=amount,
            balance_after=updated.balance,
            reason=reason,
            actor=actor,
            reference_id=reference_id,
            idempotency_key=idempotency_key,
        )
        await db.commit()
        return PostingResult(wallet=updated, entry=entry)

    def _check_debt_limit(self, wallet: Wallet, amount: int) -> None:
        limit = self._debt_limit
        if limit is None or amount > 0:
            return
        if wallet.balance + amount < -limit:
            raise DebtLimitExceededError(wallet.balance, amount, limit)

    async def adjust(
        self,
        db: AsyncSession,
        wallet_id: int,
        amount: int,
        adjustment_type: AdjustmentType,
        reason: str,
        actor: str,
        idempotency_key: str | None = None,
    ) -> PostingResult:
        """Manual administrative adjustment; `amount` is a positive magnitude."""
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmountError(f"adjustment amount must be a positive integer, got {amount!r}")
        if AdjustmentType(adjustment_type) is AdjustmentType.DEBIT:
            signed, entry_type = -amount, LedgerEntryType.ADJUSTMENT_DEBIT
        else:
            signed, entry_type = amount, LedgerEntryType.ADJUSTMENT_CREDIT
        return await self.post_entry(
            db,
            wallet_id,
            signed,
            reason,
            actor,
            entry_type,
            idempotency_key=adjustment_key(idempotency_key),
        )

    async def post_for_driver(
        self,
        db: AsyncSession,
        driver_id: int,
        amount: int,
        reason: str,
        actor: str,
        entry_type: LedgerEntryType,
        reference_id: str | None = None,
        idempotency_key: str | None = None,
    ) -> PostingResult:
        """Post to the driver's wallet, creating it on first use."""
        _validate_posting(amount, reason)
        wallet = await self.ensure_wallet(db, driver_id)
        return await self.post_entry(
            db, wallet.id, amount, reason, actor, entry_type, reference_id, idempotency_key
        )

    async def ensure_wallet(self, db: AsyncSession, driver_id: int) -> Wallet:
        try:
            wallet = await self._repo.get_or_create_wallet(db, driver_id, settings.DEFAULT_CURRENCY)
            await db.commit()
        except AppError:
            await db.rollback()
            raise
        except STORAGE_ERRORS as exc:
            await db.rollback()
            raise translate_db_error(exc) from exc
        return wallet

    async def _notify(self, db: AsyncSession, event: BalanceChanged) -> None:
        for observer in self._observers:
            try:
                await observer.on_balance_changed(db, event)
            except (AppError, *STORAGE_ERRORS):
                # The posting is committed; a failed observer must not report it as failed
                logger.exception(
                    "Balance observer %s failed for wallet=%d entry=%d",
                    type(observer).__name__,
                    event.wallet.id,
                    event.entry.id,
                )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_balance(self, db: AsyncSession, wallet_id: int) -> Wallet:
        try:
            wallet = await self._repo.get_wallet(db, wallet_id)
        except STORAGE_ERRORS as exc:
            raise translate_db_error(exc) from exc
        if wallet is None:
            raise WalletNotFoundError(wallet_id)
        return wallet

    async def list_entries(
        self, db: AsyncSession, wallet_id: int, cursor: str | None, limit: int
    ) -> LedgerResponse:
        await self.get_balance(db, wallet_id)
        cursor_id = cursor_decode(cursor)
        try:
            # Fetch limit+1 to detect has_more without a COUNT(*) query
            entries = await self._repo.list_entries(db, wallet_id, cursor_id, limit + 1)
        except STORAGE_ERRORS as exc:
            raise translate_db_error(exc) from exc
        has_more = len(entries) > limit
        page = entries[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(
            items=[LedgerEntryItem.from_entry(e) for e in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def verify_balance(self, db: AsyncSession, wallet_id: int) -> VerifyResponse:
        """Recompute the balance from the ledger and compare with the running total."""
        wallet = await self.get_balance(db, wallet_id)
        try:
            total, count = await self._repo.sum_entries(db, wallet_id)
        except STORAGE_ERRORS as exc:
            raise translate_db_error(exc) from exc
        consistent = total == wallet.balance
        if not consistent:
            logger.error(
                "Ledger drift on wallet=%d: stored=%d ledger_sum=%d", wallet_id, wallet.balance, total
            )
        return VerifyResponse(
            wallet_id=wallet_id,
            stored_balance=wallet.balance,
            ledger_sum=total,
            entry_count=count,
            consistent=consistent,
        )
