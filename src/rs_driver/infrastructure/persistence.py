"""DriverRepository — drivers, their wallets and their block causes.

A block cause row is "active" while expires_at is NULL or in the future.
Expired rows are left in place and revived by the next block of that cause.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rs_common.search import like_pattern
from src.rs_driver.domain.models import Driver, DriverDebtRow

_ACTIVE_CAUSES = """
    ARRAY(
        SELECT b.cause FROM driver_block_causes b
        WHERE b.driver_id = d.id
          AND (b.expires_at IS NULL OR b.expires_at > NOW())
        ORDER BY b.cause
    ) AS block_causes
"""

_GET_DRIVER_SQL = text(f"""
    SELECT d.id, d.name, d.phone, d.email,
           d.license_plate, d.vehicle_make, d.vehicle_model,
           {_ACTIVE_CAUSES}
    FROM drivers d
    WHERE d.id = :driver_id
""")

# CAST(:param AS TYPE) IS NULL: asyncpg cannot infer the type of a bare NULL parameter
_DEBTS_FILTER = """
    FROM drivers d
    LEFT JOIN wallets w ON w.driver_id = d.id
    WHERE (NOT CAST(:only_debts AS BOOLEAN) OR COALESCE(w.balance, 0) < 0)
      AND (CAST(:pattern AS TEXT) IS NULL
           OR d.name ILIKE :pattern
           OR d.phone ILIKE :pattern
           OR d.email ILIKE :pattern
           OR d.license_plate ILIKE :pattern)
"""

_COUNT_DEBTS_SQL = text(f"SELECT COUNT(*) AS total {_DEBTS_FILTER}")

_LIST_DEBTS_SQL = text(f"""
    SELECT d.id, d.name, d.phone, d.email,
           d.license_plate, d.vehicle_make, d.vehicle_model,
           w.id AS wallet_id,
           COALESCE(w.balance, 0) AS balance,
           COALESCE(w.currency, :currency) AS currency,
           {_ACTIVE_CAUSES}
    {_DEBTS_FILTER}
    ORDER BY COALESCE(w.balance, 0) ASC, d.id ASC
    LIMIT :limit OFFSET :offset
""")

# Inserts a new cause, or revives an expired one; an active cause is left as-is
# unless :replace (moderation re-suspension moves expires_at).
_ADD_BLOCK_SQL = text("""
    INSERT INTO driver_block_causes (driver_id, cause, reason, actor, expires_at)
    VALUES (:driver_id, :cause, :reason, :actor, :expires_at)
    ON CONFLICT (driver_id, cause) DO UPDATE
        SET reason     = EXCLUDED.reason,
            actor      = EXCLUDED.actor,
            expires_at = EXCLUDED.expires_at,
            created_at = NOW()
        WHERE CAST(:replace AS BOOLEAN)
           OR (driver_block_causes.expires_at IS NOT NULL
               AND driver_block_causes.expires_at <= NOW())
    RETURNING driver_id
""")

_REMOVE_BLOCK_SQL = text("""
    DELETE FROM driver_block_causes
    WHERE driver_id = :driver_id AND cause = :cause
    RETURNING (expires_at IS NULL OR expires_at > NOW()) AS was_active
""")


def _row_to_driver(row: object) -> Driver:
    return Driver(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        phone=row.phone,  # type: ignore[attr-defined]
        email=row.email,  # type: ignore[attr-defined]
        license_plate=row.license_plate,  # type: ignore[attr-defined]
        vehicle_make=row.vehicle_make,  # type: ignore[attr-defined]
        vehicle_model=row.vehicle_model,  # type: ignore[attr-defined]
        block_causes=list(row.block_causes or []),  # type: ignore[attr-defined]
    )


class DriverRepository:
    async def get_driver(self, db: AsyncSession, driver_id: int) -> Driver | None:
        result = await db.execute(_GET_DRIVER_SQL, {"driver_id": driver_id})
        row = result.fetchone()
        return _row_to_driver(row) if row else None

    async def list_debts(
        self,
        db: AsyncSession,
        only_debts: bool,
        search: str | None,
        offset: int,
        limit: int,
    ) -> tuple[list[DriverDebtRow], int]:
        params = {"only_debts": only_debts, "pattern": like_pattern(search)}
        total = (await db.execute(_COUNT_DEBTS_SQL, params)).scalar_one()
        result = await db.execute(
            _LIST_DEBTS_SQL,
            {**params, "currency": settings.DEFAULT_CURRENCY, "limit": limit, "offset": offset},
        )
        rows = [
            DriverDebtRow(
                driver=_row_to_driver(row),
                wallet_id=row.wallet_id,
                balance=row.balance,
                currency=row.currency,
            )
            for row in result.fetchall()
        ]
        return rows, int(total)

    async def add_block(
        self,
        db: AsyncSession,
        driver_id: int,
        cause: str,
        reason: str,
        actor: str,
        expires_at: datetime | None = None,
        replace: bool = False,
    ) -> bool:
        """Returns True if the cause row was written, False if already active."""
        result = await db.execute(
            _ADD_BLOCK_SQL,
            {
                "driver_id": driver_id,
                "cause": cause,
                "reason": reason,
                "actor": actor,
                "expires_at": expires_at,
                "replace": replace,
            },
        )
        return result.fetchone() is not None

    async def remove_block(self, db: AsyncSession, driver_id: int, cause: str) -> bool:
        """Returns True if an active cause was lifted."""
        result = await db.execute(_REMOVE_BLOCK_SQL, {"driver_id": driver_id, "cause": cause})
        row = result.fetchone()
        return bool(row and row.was_active)
