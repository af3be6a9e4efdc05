# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
RedisReservationStore for quick-reserve

This module provides a Redis-backed reservation store shared by every
process that points at the same Redis instance.

Key Features:
- One JSON record per resource, namespaced and Base64-keyed
- Compare-and-set claims through an atomic Lua script
- Automatic script reload when Redis loses its script cache
- Every Redis failure surfaces as StoreUnavailableError
"""

import asyncio
import base64
import logging
import os
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any, ClassVar

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import NoScriptError, RedisError

from ..exceptions import StoreUnavailableError
from ..expiry import is_active
from ..types.reservation import Reservation
from .base import BaseReservationStore, HealthCheckResult

logger = logging.getLogger(__name__)


class RedisReservationStore(BaseReservationStore):
    """
    A distributed Redis store for reservations.

    A claim reads the raw stored record, evaluates it with
    :func:`quick_reserve.expiry.is_active`, and then asks the
    ``compare_and_set_reservation`` script to write the new record only if
    the stored value is still byte-for-byte what was evaluated. If another
    writer got in between, the record is re-read and re-evaluated, up to
    ``max_cas_retries`` times.

    Deployment Requirements:
    - Redis 2.6+ (for EVALSHA)
    """

    # Class-level Lua scripts loaded from files
    _lua_scripts: ClassVar[dict[str, str]] = {}

    SCRIPT_NAMES: ClassVar[tuple[str, ...]] = (
        "compare_and_set_reservation",
        "compare_and_delete_reservation",
    )

    store_type = "redis"

    @classmethod
    def _load_lua_scripts(cls) -> None:
        """Load Lua scripts from files at class level."""
        if cls._lua_scripts:
            return

        lua_dir = Path(__file__).parent / "lua"

        for script_name in cls.SCRIPT_NAMES:
            script_path = lua_dir / f"{script_name}.lua"
            if script_path.exists():
                cls._lua_scripts[script_name] = script_path.read_text(encoding="utf-8")
            else:
                logger.warning(f"Lua script not found: {script_path}")

    def __init__(
        self,
        redis_url: str | None = None,
        redis_client: Any | None = None,
        namespace: str = "quick_reserve",
        max_connections: int = 10,
        max_cas_retries: int = 3,
    ) -> None:
        """
        Initialize the Redis reservation store.

        Args:
            redis_url: Redis connection URL. If not provided, falls back to the
                REDIS_URL environment variable, then to "redis://localhost:6379".
            redis_client: Optional pre-configured Redis client. It must be
                created with ``decode_responses=True``.
            namespace: Namespace prefix for keys
            max_connections: Maximum connections in the owned pool
            max_cas_retries: How many times a claim re-reads the record after
                losing a compare-and-set to an unrelated write

        Environment Variables:
            REDIS_URL: Default Redis connection URL when redis_url is not provided.
        """
        super().__init__(namespace)

        if max_cas_retries < 1:
            raise ValueError(f"max_cas_retries must be >= 1, got {max_cas_retries}")

        self.redis_url = (
            redis_url or os.environ.get("REDIS_URL") or "redis://localhost:6379"
        )
        self.max_connections = max_connections
        self.max_cas_retries = max_cas_retries

        self._namespace_b64 = self._b64(namespace)
        self.key_prefix = f"qr:{self._namespace_b64}:reservation:"

        # Redis client state
        self._redis: Any | None = redis_client
        self._owned_redis = redis_client is None
        self._pool: ConnectionPool | None = None
        self._connected = False
        self._connection_lock = asyncio.Lock()

        # Lua script SHAs
        self._script_shas: dict[str, str] = {}

    @staticmethod
    def _b64(value: str) -> str:
        return base64.urlsafe_b64encode(value.encode()).decode().rstrip("=")

    def _reservation_key(self, resource_id: str) -> str:
        """Get Redis key for a resource's reservation record."""
        return f"{self.key_prefix}{self._b64(resource_id)}"

    def _resource_id_from_key(self, key: str) -> str:
        encoded = key[len(self.key_prefix) :]
        padding = "=" * (-len(encoded) % 4)
        return base64.urlsafe_b64decode(encoded + padding).decode()

    def _decode(self, resource_id: str, raw: str | None) -> Reservation | None:
        if raw is None:
            return None
        try:
            return Reservation.from_json(raw)
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Corrupt reservation record for resource {resource_id}: {e}")
            raise StoreUnavailableError(
                f"Corrupt reservation record for resource {resource_id}",
                store_type=self.store_type,
            ) from e

    def _unavailable(self, operation: str, error: Exception) -> StoreUnavailableError:
        logger.error(f"Redis error during {operation}: {error}")
        return StoreUnavailableError(
            f"Redis unavailable during {operation}: {error}",
            store_type=self.store_type,
        )

    # ==========================================================================
    # Connection and scripts
    # ==========================================================================

    async def _ensure_connected(self) -> Any:
        """Return a connected client, creating the pool on first use."""
        if self._redis is not None and self._connected:
            return self._redis

        async with self._connection_lock:
            if self._redis is not None and self._connected:
                return self._redis

            if self._redis is None:
                self._pool = ConnectionPool.from_url(
                    self.redis_url,
                    max_connections=self.max_connections,
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                    retry_on_timeout=True,
                    health_check_interval=30,
                )
                self._redis = Redis(connection_pool=self._pool)
                logger.info(f"Created Redis connection pool for {self.redis_url}")

            try:
                await self._redis.ping()
                await self._load_scripts()
            except RedisError as e:
                raise self._unavailable("connect", e) from e

            self._connected = True
            return self._redis

    async def _load_scripts(self) -> None:
        """Load Lua scripts into Redis."""
        if not self._redis:
            raise RuntimeError("Redis client not initialized")

        self.__class__._load_lua_scripts()

        for script_name, script_source in self._lua_scripts.items():
            self._script_shas[script_name] = await self._redis.script_load(
                script_source
            )

    async def _evalsha_with_reload(
        self,
        redis_client: Any,
        script_name: str,
        num_keys: int,
        *args: Any,
    ) -> Any:
        """
        Execute EVALSHA, reloading scripts once on NoScriptError.

        Redis drops its script cache on restart or SCRIPT FLUSH. The scripts
        are reloaded and the call is retried a single time.
        """
        script_sha = self._script_shas.get(script_name)
        if not script_sha:
            await self._load_scripts()
            script_sha = self._script_shas[script_name]

        try:
            return await redis_client.evalsha(script_sha, num_keys, *args)
        except NoScriptError:
            logger.warning(
                f"Script '{script_name}' not found in Redis (SHA: {script_sha}). "
                f"Reloading all Lua scripts..."
            )
            self._script_shas.clear()
            await self._load_scripts()

            new_sha = self._script_shas[script_name]
            logger.info(f"Scripts reloaded. Retrying with new SHA: {new_sha}")
            return await redis_client.evalsha(new_sha, num_keys, *args)

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def get_reservation(self, resource_id: str) -> Reservation | None:
        redis_client = await self._ensure_connected()
        try:
            raw = await redis_client.get(self._reservation_key(resource_id))
        except RedisError as e:
            raise self._unavailable(f"get_reservation({resource_id})", e) from e
        return self._decode(resource_id, raw)

    async def get_reservations(
        self, resource_ids: Sequence[str]
    ) -> dict[str, Reservation | None]:
        """Snapshot several reservations with a single MGET."""
        if not resource_ids:
            return {}

        redis_client = await self._ensure_connected()
        keys = [self._reservation_key(resource_id) for resource_id in resource_ids]
        try:
            values = await redis_client.mget(keys)
        except RedisError as e:
            raise self._unavailable("get_reservations", e) from e

        return {
            resource_id: self._decode(resource_id, raw)
            for resource_id, raw in zip(resource_ids, values)
        }

    async def get_all_reservations(self) -> dict[str, Reservation]:
        """Get all stored reservations.

        Uses SCAN instead of KEYS so large keyspaces are walked incrementally.
        """
        redis_client = await self._ensure_connected()
        result: dict[str, Reservation] = {}
        try:
            cursor = 0
            while True:
                cursor, keys = await redis_client.scan(
                    cursor, match=f"{self.key_prefix}*", count=100
                )
                if keys:
                    values = await redis_client.mget(keys)
                    for key, raw in zip(keys, values):
                        resource_id = self._resource_id_from_key(key)
                        reservation = self._decode(resource_id, raw)
                        if reservation is not None:
                            result[resource_id] = reservation
                if cursor == 0:
                    break
        except RedisError as e:
            raise self._unavailable("get_all_reservations", e) from e
        return result

    # ==========================================================================
    # Mutations
    # ==========================================================================

    async def claim(
        self, resource_id: str, reservation: Reservation, now: datetime
    ) -> bool:
        redis_client = await self._ensure_connected()
        key = self._reservation_key(resource_id)
        new_record = reservation.to_json()

        try:
            for _ in range(self.max_cas_retries):
                raw = await redis_client.get(key)
                if is_active(self._decode(resource_id, raw), now):
                    return False

                written = await self._evalsha_with_reload(
                    redis_client,
                    "compare_and_set_reservation",
                    1,
                    key,
                    raw or "",
                    new_record,
                )
                if int(written) == 1:
                    return True

                logger.debug(
                    f"Reservation record for {resource_id} changed during claim, "
                    "re-reading"
                )
        except RedisError as e:
            raise self._unavailable(f"claim({resource_id})", e) from e

        return False

    async def release(self, resource_id: str) -> bool:
        redis_client = await self._ensure_connected()
        try:
            deleted = await redis_client.delete(self._reservation_key(resource_id))
        except RedisError as e:
            raise self._unavailable(f"release({resource_id})", e) from e

        if not deleted:
            logger.warning(
                f"Release of resource {resource_id} with no reservation (no-op)"
            )
            return False
        return True

    async def purge_expired(self, now: datetime) -> int:
        """
        Delete stored records that are no longer active.

        Records are never given a Redis TTL, so expiry stays decided by
        :func:`quick_reserve.expiry.is_active` on the caller's clock. Each
        expired record is removed through ``compare_and_delete_reservation``,
        which leaves it alone if a claim replaced it after the scan read it.

        Returns:
            Number of records removed
        """
        redis_client = await self._ensure_connected()
        purged = 0
        try:
            cursor = 0
            while True:
                cursor, keys = await redis_client.scan(
                    cursor, match=f"{self.key_prefix}*", count=100
                )
                if keys:
                    values = await redis_client.mget(keys)
                    for key, raw in zip(keys, values):
                        if raw is None:
                            continue
                        resource_id = self._resource_id_from_key(key)
                        if is_active(self._decode(resource_id, raw), now):
                            continue
                        deleted = await self._evalsha_with_reload(
                            redis_client,
                            "compare_and_delete_reservation",
                            1,
                            key,
                            raw,
                        )
                        purged += int(deleted)
                if cursor == 0:
                    break
        except RedisError as e:
            raise self._unavailable("purge_expired", e) from e

        if purged:
            logger.debug(f"Purged {purged} expired reservations")
        return purged

    async def clear(self) -> None:
        """Delete every reservation key in this namespace."""
        redis_client = await self._ensure_connected()
        try:
            cursor = 0
            while True:
                cursor, keys = await redis_client.scan(
                    cursor, match=f"{self.key_prefix}*", count=100
                )
                if keys:
                    await redis_client.delete(*keys)
                if cursor == 0:
                    break
        except RedisError as e:
            raise self._unavailable("clear", e) from e

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    async def health_check(self) -> HealthCheckResult:
        """Perform health check on the store."""
        try:
            redis_client = await self._ensure_connected()
            await redis_client.ping()
            info = await redis_client.info()
        except (StoreUnavailableError, RedisError) as e:
            return HealthCheckResult(
                healthy=False,
                store_type=self.store_type,
                namespace=self.namespace,
                error=str(e),
            )

        return HealthCheckResult(
            healthy=True,
            store_type=self.store_type,
            namespace=self.namespace,
            metadata={
                "redis_url": self.redis_url,
                "connected": self._connected,
                "redis_version": info.get("redis_version"),
                "connected_clients": info.get("connected_clients"),
                "scripts_loaded": sorted(self._script_shas),
            },
        )

    async def cleanup(self) -> None:
        """Close the client if this store created it."""
        if self._redis is not None and self._owned_redis:
            try:
                if hasattr(self._redis, "aclose"):
                    await self._redis.aclose()
                else:
                    await self._redis.close()
                if self._pool is not None:
                    await self._pool.disconnect()
            except RedisError as e:
                logger.error(f"Error during cleanup: {e}")
            finally:
                self._redis = None
                self._pool = None

        self._connected = False
        self._script_shas.clear()

    async def __aenter__(self) -> "RedisReservationStore":
        """Async context manager entry."""
        await self._ensure_connected()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.cleanup()


__all__ = ["RedisReservationStore"]
