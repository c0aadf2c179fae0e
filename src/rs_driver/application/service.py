"""DriverApplicationService — debts listing and debt block/unblock.

block/unblock only ever touch the `debt` cause. Both are idempotent: blocking
a blocked driver and unblocking an unblocked one succeed without writing.
The service also observes committed wallet postings and applies the
configured DebtThresholdPolicy.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.rs_common.db_errors import STORAGE_ERRORS, translate_db_error
from src.rs_common.enums import SYSTEM_ACTOR, BlockCause
from src.rs_common.errors import AppError, BlockReasonRequiredError, DriverNotFoundError
from src.rs_driver.application.schemas import (
    BlockStatusResponse,
    DriverDebtItem,
    DriverDebtsPage,
)
from src.rs_driver.domain.models import Driver
from src.rs_driver.domain.policy import (
    DebtThresholdPolicy,
    ManualOnlyPolicy,
    auto_block_reason,
)
from src.rs_driver.domain.repository import DriverRepositoryProtocol
from src.rs_driver.infrastructure.persistence import DriverRepository
from src.rs_wallet.domain.events import BalanceChanged

logger = logging.getLogger(__name__)


class DriverApplicationService:
    def __init__(
        self,
        repo: DriverRepositoryProtocol | None = None,
        policy: DebtThresholdPolicy | None = None,
    ) -> None:
        self._repo: DriverRepositoryProtocol = repo or DriverRepository()
        self._policy: DebtThresholdPolicy = policy or ManualOnlyPolicy()

    async def get_driver(self, db: AsyncSession, driver_id: int) -> Driver:
        try:
            driver = await self._repo.get_driver(db, driver_id)
        except STORAGE_ERRORS as exc:
            raise translate_db_error(exc) from exc
        if driver is None:
            raise DriverNotFoundError(driver_id)
        return driver

    async def list_debts(
        self,
        db: AsyncSession,
        only_debts: bool,
        search: str | None,
        page: int,
        per_page: int,
    ) -> DriverDebtsPage:
        try:
            rows, total = await self._repo.list_debts(
                db, only_debts, search, offset=(page - 1) * per_page, limit=per_page
            )
        except STORAGE_ERRORS as exc:
            raise translate_db_error(exc) from exc
        return DriverDebtsPage(
            data=[DriverDebtItem.from_row(r) for r in rows],
            current_page=page,
            last_page=DriverDebtsPage.last_page_for(total, per_page),
            per_page=per_page,
            total=total,
        )

    async def block(
        self, db: AsyncSession, driver_id: int, reason: str, actor: str
    ) -> BlockStatusResponse:
        if not reason or not reason.strip():
            raise BlockReasonRequiredError()
        await self.get_driver(db, driver_id)
        try:
            changed = await self._repo.add_block(
                db, driver_id, BlockCause.DEBT.value, reason.strip(), actor
            )
            await db.commit()
        except AppError:
            await db.rollback()
            raise
        except STORAGE_ERRORS as exc:
            await db.rollback()
            raise translate_db_error(exc) from exc

        if changed:
            logger.info("Driver %d blocked for debt by %s: %s", driver_id, actor, reason.strip())
        else:
            logger.info("Driver %d already blocked for debt; block by %s is a no-op", driver_id, actor)
        return await self._status(db, driver_id, changed)

    async def unblock(self, db: AsyncSession, driver_id: int, actor: str) -> BlockStatusResponse:
        await self.get_driver(db, driver_id)
        try:
            changed = await self._repo.remove_block(db, driver_id, BlockCause.DEBT.value)
            await db.commit()
        except AppError:
            await db.rollback()
            raise
        except STORAGE_ERRORS as exc:
            await db.rollback()
            raise translate_db_error(exc) from exc

        logger.info(
            "Driver %d debt block lifted by %s%s", driver_id, actor, "" if changed else " (was not blocked)"
        )
        return await self._status(db, driver_id, changed)

    async def _status(self, db: AsyncSession, driver_id: int, changed: bool) -> BlockStatusResponse:
        driver = await self.get_driver(db, driver_id)
        return BlockStatusResponse(
            driver_id=driver.id,
            is_blocked=driver.is_blocked,
            block_causes=driver.block_causes,
            changed=changed,
        )

    # ------------------------------------------------------------------
    # BalanceObserver
    # ------------------------------------------------------------------

    async def on_balance_changed(self, db: AsyncSession, event: BalanceChanged) -> None:
        debt = event.wallet.debt
        if not self._policy.should_block(debt):
            return
        try:
            changed = await self._repo.add_block(
                db,
                event.driver_id,
                BlockCause.DEBT.value,
                auto_block_reason(debt),
                SYSTEM_ACTOR,
            )
            await db.commit()
        except STORAGE_ERRORS as exc:
            await db.rollback()
            raise translate_db_error(exc) from exc
        if changed:
            logger.warning(
                "Driver %d auto-blocked: debt %d after entry %d",
                event.driver_id,
                debt.debt_amount,
                event.entry.id,
            )
