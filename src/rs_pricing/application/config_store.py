"""SettlementConfigStore — versioned config snapshots behind a Redis cache.

Read path (cache-aside):
  GET pointer -> GET snapshot:v{pointer} -> on miss read PostgreSQL and
  populate both keys.
Write path:
  compare-and-swap UPDATE in PostgreSQL -> COMMIT -> raise pointer to the
  new version -> acknowledge.

Snapshot keys are immutable per version, and the pointer only ever moves
forward (Lua max-set), so a slow reader repopulating the cache cannot roll
the pointer back to a superseded version. If the pointer cannot be raised
after commit, the write is reported as failed rather than acknowledged.
Redis being down on the read path only costs a database round trip.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rs_commission.domain.models import CommissionConfig
from src.rs_common.db_errors import STORAGE_ERRORS, translate_db_error
from src.rs_common.errors import (
    AppError,
    ConflictError,
    InternalError,
    PersistenceUnavailableError,
)
from src.rs_common.redis_client import get_redis
from src.rs_pricing.domain.models import PricingConfig
from src.rs_pricing.domain.repository import SettlementConfigRepositoryProtocol
from src.rs_pricing.domain.snapshot import SettlementConfig
from src.rs_pricing.infrastructure.persistence import SettlementConfigRepository

logger = logging.getLogger(__name__)

POINTER_KEY = "settlement:config:current"
SNAPSHOT_KEY = "settlement:config:v{version}"

# SET KEYS[1] = ARGV[1] only if it is absent or lower; TTL ARGV[2] seconds
_RAISE_POINTER_LUA = """
local current = redis.call('GET', KEYS[1])
if (not current) or tonumber(current) < tonumber(ARGV[1]) then
    redis.call('SET', KEYS[1], ARGV[1], 'EX', ARGV[2])
    return 1
end
return 0
"""

RedisFactory = Callable[[], Awaitable[aioredis.Redis]]


class SettlementConfigStore:
    def __init__(
        self,
        repo: SettlementConfigRepositoryProtocol | None = None,
        redis_factory: RedisFactory = get_redis,
    ) -> None:
        self._repo: SettlementConfigRepositoryProtocol = repo or SettlementConfigRepository()
        self._redis_factory = redis_factory

    async def current(self, db: AsyncSession) -> SettlementConfig:
        cached = await self._read_cache()
        if cached is not None:
            return cached

        snapshot = await self._load(db)
        await self._populate_cache(snapshot)
        return snapshot

    async def replace(
        self,
        db: AsyncSession,
        updated_by: str,
        pricing: PricingConfig | None = None,
        commission: CommissionConfig | None = None,
    ) -> SettlementConfig:
        """Replace pricing and/or commission; the omitted half is carried over.

        Both halves are already-validated value objects, so nothing invalid
        can reach the UPDATE. Raises ConflictError if another write landed
        between our read and our compare-and-swap.
        """
        try:
            base = await self._load(db)
            saved = await self._repo.replace_config(
                db,
                pricing=(pricing or base.pricing).to_dict(),
                commission=(commission or base.commission).to_dict(),
                expected_version=base.version,
                updated_by=updated_by,
            )
            if saved is None:
                raise ConflictError("Settlement configuration was changed concurrently, reload and retry")
            await db.commit()
        except AppError:
            await db.rollback()
            raise
        except STORAGE_ERRORS as exc:
            await db.rollback()
            raise translate_db_error(exc) from exc

        logger.info(
            "Settlement config v%d -> v%d by %s (pricing=%s, commission=%s)",
            base.version,
            saved.version,
            updated_by,
            pricing is not None,
            commission is not None,
        )
        await self._publish(saved)
        return saved

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    async def _load(self, db: AsyncSession) -> SettlementConfig:
        try:
            snapshot = await self._repo.get_config(db)
        except STORAGE_ERRORS as exc:
            raise translate_db_error(exc) from exc
        if snapshot is None:
            raise InternalError("Settlement configuration row is missing; run migrations")
        return snapshot

    async def _read_cache(self) -> SettlementConfig | None:
        try:
            redis = await self._redis_factory()
            version = await redis.get(POINTER_KEY)
            if version is None:
                return None
            raw = await redis.get(SNAPSHOT_KEY.format(version=version))
        except RedisError as exc:
            logger.warning("Config cache read failed, falling back to database: %s", exc)
            return None
        if raw is None:
            return None
        return SettlementConfig.from_dict(json.loads(raw))

    async def _populate_cache(self, snapshot: SettlementConfig) -> None:
        try:
            await self._write_cache(snapshot)
        except RedisError as exc:
            logger.warning("Config cache populate failed: %s", exc)

    async def _publish(self, snapshot: SettlementConfig) -> None:
        try:
            await self._write_cache(snapshot)
        except RedisError as exc:
            logger.error("Config v%d committed but cache pointer not raised: %s", snapshot.version, exc)
            raise PersistenceUnavailableError(
                "Configuration saved but the config cache could not be refreshed; retry"
            ) from exc

    async def _write_cache(self, snapshot: SettlementConfig) -> None:
        redis = await self._redis_factory()
        ttl = settings.CONFIG_CACHE_TTL_SECONDS
        payload: dict[str, Any] = snapshot.to_dict()
        await redis.set(SNAPSHOT_KEY.format(version=snapshot.version), json.dumps(payload), ex=ttl)
        await redis.eval(_RAISE_POINTER_LUA, 1, POINTER_KEY, snapshot.version, ttl)
