# src/rs_driver/domain/repository.py
"""Repository Protocol for drivers and their block causes."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_driver.domain.models import Driver, DriverDebtRow


class DriverRepositoryProtocol(Protocol):
    async def get_driver(self, db: AsyncSession, driver_id: int) -> Driver | None: ...

    async def list_debts(
        self,
        db: AsyncSession,
        only_debts: bool,
        search: str | None,
        offset: int,
        limit: int,
    ) -> tuple[list[DriverDebtRow], int]: ...

    async def add_block(
        self,
        db: AsyncSession,
        driver_id: int,
        cause: str,
        reason: str,
        actor: str,
        expires_at: datetime | None = None,
        replace: bool = False,
    ) -> bool: ...

    async def remove_block(self, db: AsyncSession, driver_id: int, cause: str) -> bool: ...
