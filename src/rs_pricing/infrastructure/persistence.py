"""SettlementConfigRepository — single-row, versioned configuration table.

replace_config is a compare-and-swap on `version`: it returns None when
another writer committed first, and the caller decides what that means.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_commission.domain.models import CommissionConfig
from src.rs_pricing.domain.models import PricingConfig
from src.rs_pricing.domain.snapshot import SettlementConfig

_CONFIG_ROW_ID = 1

_GET_CONFIG_SQL = text("""
    SELECT version, pricing, commission, updated_by, updated_at
    FROM settlement_config
    WHERE id = :id
""")

_REPLACE_CONFIG_SQL = text("""
    UPDATE settlement_config
    SET pricing    = CAST(:pricing AS JSONB),
        commission = CAST(:commission AS JSONB),
        version    = version + 1,
        updated_by = :updated_by,
        updated_at = NOW()
    WHERE id = :id AND version = :expected_version
    RETURNING version, pricing, commission, updated_by, updated_at
""")


def _row_to_config(row: object) -> SettlementConfig:
    pricing = row.pricing  # type: ignore[attr-defined]
    commission = row.commission  # type: ignore[attr-defined]
    # asyncpg hands JSONB back as str unless a codec is registered
    if isinstance(pricing, str):
        pricing = json.loads(pricing)
    if isinstance(commission, str):
        commission = json.loads(commission)
    return SettlementConfig(
        version=row.version,  # type: ignore[attr-defined]
        pricing=PricingConfig.from_mapping(pricing),
        commission=CommissionConfig.from_mapping(commission),
        updated_by=row.updated_by,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class SettlementConfigRepository:
    async def get_config(self, db: AsyncSession) -> SettlementConfig | None:
        result = await db.execute(_GET_CONFIG_SQL, {"id": _CONFIG_ROW_ID})
        row = result.fetchone()
        return _row_to_config(row) if row else None

    async def replace_config(
        self,
        db: AsyncSession,
        pricing: dict[str, Any],
        commission: dict[str, int],
        expected_version: int,
        updated_by: str,
    ) -> SettlementConfig | None:
        result = await db.execute(
            _REPLACE_CONFIG_SQL,
            {
                "id": _CONFIG_ROW_ID,
                "pricing": json.dumps(pricing),
                "commission": json.dumps(commission),
                "expected_version": expected_version,
                "updated_by": updated_by,
            },
        )
        row = result.fetchone()
        return _row_to_config(row) if row else None
