"""WalletRepository — concrete implementation of WalletRepositoryProtocol.

Postings follow a fixed statement order inside one transaction:
  SET LOCAL lock_timeout -> SELECT ... FOR UPDATE -> idempotency lookup
  -> UPDATE wallets ... RETURNING -> INSERT INTO ledger_entries ... RETURNING

Transaction ownership: the CALLER (WalletLedgerService) commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_common.errors import InternalError, WalletNotFoundError
from src.rs_wallet.domain.models import LedgerEntry, Wallet

_WALLET_COLUMNS = "id, driver_id, balance, currency, version, created_at, updated_at"
_ENTRY_COLUMNS = (
    "id, wallet_id, entry_type, amount, balance_after, reason, actor, "
    "reference_id, idempotency_key, created_at"
)

# ---------------------------------------------------------------------------
# SQL: wallets
# ---------------------------------------------------------------------------

_GET_WALLET_SQL = text(f"""
    SELECT {_WALLET_COLUMNS}
    FROM wallets
    WHERE id = :wallet_id
""")

_LOCK_WALLET_SQL = text(f"""
    SELECT {_WALLET_COLUMNS}
    FROM wallets
    WHERE id = :wallet_id
    FOR UPDATE
""")

# The no-op DO UPDATE makes RETURNING yield the existing row as well
_GET_OR_CREATE_WALLET_SQL = text(f"""
    INSERT INTO wallets (driver_id, currency)
    VALUES (:driver_id, :currency)
    ON CONFLICT (driver_id) DO UPDATE
        SET driver_id = EXCLUDED.driver_id
    RETURNING {_WALLET_COLUMNS}
""")

_APPLY_AMOUNT_SQL = text(f"""
    UPDATE wallets
    SET balance = balance + :amount,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :wallet_id
    RETURNING {_WALLET_COLUMNS}
""")

# ---------------------------------------------------------------------------
# SQL: ledger_entries
# ---------------------------------------------------------------------------

_INSERT_ENTRY_SQL = text(f"""
    INSERT INTO ledger_entries
        (wallet_id, entry_type, amount, balance_after, reason, actor,
         reference_id, idempotency_key)
    VALUES
        (:wallet_id, :entry_type, :amount, :balance_after, :reason, :actor,
         :reference_id, :idempotency_key)
    RETURNING {_ENTRY_COLUMNS}
""")

_FIND_BY_IDEMPOTENCY_KEY_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM ledger_entries
    WHERE wallet_id = :wallet_id AND idempotency_key = :idempotency_key
""")

_LIST_ENTRIES_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM ledger_entries
    WHERE wallet_id = :wallet_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_SUM_ENTRIES_SQL = text("""
    SELECT COALESCE(SUM(amount), 0) AS total, COUNT(*) AS entry_count
    FROM ledger_entries
    WHERE wallet_id = :wallet_id
""")


def _row_to_wallet(row: object) -> Wallet:
    return Wallet(
        id=row.id,  # type: ignore[attr-defined]
        driver_id=row.driver_id,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_entry(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        wallet_id=row.wallet_id,  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        reason=row.reason,  # type: ignore[attr-defined]
        actor=row.actor,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        idempotency_key=row.idempotency_key,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class WalletRepository:
    async def get_wallet(self, db: AsyncSession, wallet_id: int) -> Wallet | None:
        result = await db.execute(_GET_WALLET_SQL, {"wallet_id": wallet_id})
        row = result.fetchone()
        return _row_to_wallet(row) if row else None

    async def get_or_create_wallet(
        self, db: AsyncSession, driver_id: int, currency: str
    ) -> Wallet:
        result = await db.execute(
            _GET_OR_CREATE_WALLET_SQL, {"driver_id": driver_id, "currency": currency}
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Wallet upsert returned no rows")
        return _row_to_wallet(row)

    async def lock_wallet(
        self, db: AsyncSession, wallet_id: int, lock_timeout_ms: int
    ) -> Wallet | None:
        # SET does not take bind parameters; the value is an int from settings
        await db.execute(text(f"SET LOCAL lock_timeout = {int(lock_timeout_ms)}"))
        result = await db.execute(_LOCK_WALLET_SQL, {"wallet_id": wallet_id})
        row = result.fetchone()
        return _row_to_wallet(row) if row else None

    async def find_entry_by_idempotency_key(
        self, db: AsyncSession, wallet_id: int, idempotency_key: str
    ) -> LedgerEntry | None:
        result = await db.execute(
            _FIND_BY_IDEMPOTENCY_KEY_SQL,
            {"wallet_id": wallet_id, "idempotency_key": idempotency_key},
        )
        row = result.fetchone()
        return _row_to_entry(row) if row else None

    async def apply_amount(self, db: AsyncSession, wallet_id: int, amount: int) -> Wallet:
        result = await db.execute(_APPLY_AMOUNT_SQL, {"wallet_id": wallet_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise WalletNotFoundError(wallet_id)
        return _row_to_wallet(row)

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
    ) -> LedgerEntry:
        result = await db.execute(
            _INSERT_ENTRY_SQL,
            {
                "wallet_id": wallet_id,
                "entry_type": entry_type,
                "amount": amount,
                "balance_after": balance_after,
                "reason": reason,
                "actor": actor,
                "reference_id": reference_id,
                "idempotency_key": idempotency_key,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger insert returned no rows")
        return _row_to_entry(row)

    async def list_entries(
        self, db: AsyncSession, wallet_id: int, cursor_id: int | None, limit: int
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_ENTRIES_SQL,
            {"wallet_id": wallet_id, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_entry(row) for row in result.fetchall()]

    async def sum_entries(self, db: AsyncSession, wallet_id: int) -> tuple[int, int]:
        """Return (SUM(amount), COUNT(*)) over the wallet's ledger."""
        result = await db.execute(_SUM_ENTRIES_SQL, {"wallet_id": wallet_id})
        row = result.fetchone()
        if row is None:
            return 0, 0
        return int(row.total), int(row.entry_count)
