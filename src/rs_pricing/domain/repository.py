# src/rs_pricing/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_pricing.domain.snapshot import SettlementConfig


class SettlementConfigRepositoryProtocol(Protocol):
    async def get_config(self, db: AsyncSession) -> SettlementConfig | None: ...

    async def replace_config(
        self,
        db: AsyncSession,
        pricing: dict[str, Any],
        commission: dict[str, int],
        expected_version: int,
        updated_by: str,
    ) -> SettlementConfig | None: ...
