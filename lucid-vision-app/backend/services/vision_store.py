"""
Vision Store Service
Provides Redis-backed vision session storage with fallback to in-memory storage
"""

import asyncio
import os
from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError

from core.config import VISION_LIST_LIMIT, VISION_TTL_SECONDS
from core.exceptions import PersistenceError
from models.base import Category
from models.vision import CategoryState, Response, VisionSession
from utils.date_utils import get_current_utc

logger = structlog.get_logger(__name__)


class VisionStore:
    """Vision session storage with Redis backend and in-memory fallback.

    Every write replaces the full serialized aggregate under one key, so a
    reader never observes category states and completeness out of step.
    """

    def __init__(self, redis_url: Optional[str] = None, ttl_seconds: int = VISION_TTL_SECONDS):
        env_url = os.getenv("REDIS_URL", "redis://localhost:6379")
        self.redis_url = redis_url or env_url
        self.redis_client = None
        self.key_prefix = "vision:"
        self.ttl_seconds = ttl_seconds
        self.fallback_store: Dict[str, str] = {}  # In-memory fallback (JSON)
        # Track expirations for fallback items to approximate Redis TTL
        self.fallback_store_exp: Dict[str, float] = {}
        self.use_redis = False
        self.use_redis_reason: str = "uninitialized"
        self._locks: Dict[str, asyncio.Lock] = {}

    async def initialize(self):
        """Initialize Redis connection with fallback to in-memory"""
        try:
            import redis.asyncio as redis

            self.redis_client = redis.from_url(
                self.redis_url,
                decode_responses=True
            )
            # Test connection
            await self.redis_client.ping()
            self.use_redis = True
            self.use_redis_reason = "ok"
            logger.info("✓ Redis vision store initialized")
        except Exception as e:
            self.redis_client = None
            self.use_redis = False
            self.use_redis_reason = str(e)
            logger.warning(
                "Redis unavailable, using in-memory store",
                error=str(e),
                url=self.redis_url,
            )

    async def close(self):
        if self.redis_client is not None:
            try:
                await self.redis_client.aclose()
            except Exception as e:
                logger.debug("Redis close error", error=str(e))
            self.redis_client = None
            self.use_redis = False

    def info(self) -> Dict[str, Any]:
        return {
            "backend": "redis" if self.use_redis else "memory",
            "reason": self.use_redis_reason,
        }

    def _key(self, vision_id: str) -> str:
        return f"{self.key_prefix}{vision_id}"

    def _lock(self, vision_id: str) -> asyncio.Lock:
        lock = self._locks.get(vision_id)
        if lock is None:
            lock = self._locks[vision_id] = asyncio.Lock()
        return lock

    def _purge_fallback_expired(self):
        """Remove expired entries from fallback store."""
        if not self.fallback_store_exp:
            return
        now_ts = get_current_utc().timestamp()
        expired = [
            k for k, ts in self.fallback_store_exp.items()
            if ts <= now_ts
        ]
        for k in expired:
            self.fallback_store.pop(k, None)
            self.fallback_store_exp.pop(k, None)
            self._forget_lock(k)

    def _forget_lock(self, vision_id: str) -> None:
        lock = self._locks.get(vision_id)
        if lock is not None and not lock.locked():
            del self._locks[vision_id]

    @staticmethod
    def _decode(vision_id: str, raw: Optional[str]) -> Optional[VisionSession]:
        if not raw:
            return None
        try:
            return VisionSession.model_validate_json(raw)
        except ValidationError as e:
            logger.error("Corrupt vision record", vision_id=vision_id, error=str(e))
            raise PersistenceError("Stored vision could not be read", vision_id=vision_id)

    # ─── raw access ───────────────────────────────────────────

    async def _write(self, session: VisionSession) -> None:
        payload = session.model_dump_json()
        if self.use_redis and self.redis_client:
            try:
                await self.redis_client.set(self._key(session.id), payload, ex=self.ttl_seconds)
                return
            except Exception as e:
                logger.error("Redis set error", vision_id=session.id, error=str(e))
                raise PersistenceError("Failed to save vision", vision_id=session.id) from e

        self._purge_fallback_expired()
        self.fallback_store[session.id] = payload
        self.fallback_store_exp[session.id] = get_current_utc().timestamp() + self.ttl_seconds

    async def _read(self, vision_id: str) -> Optional[str]:
        if self.use_redis and self.redis_client:
            try:
                return await self.redis_client.get(self._key(vision_id))
            except Exception as e:
                logger.error("Redis get error", vision_id=vision_id, error=str(e))
                raise PersistenceError("Failed to load vision", vision_id=vision_id) from e

        self._purge_fallback_expired()
        return self.fallback_store.get(vision_id)

    # ─── public API ───────────────────────────────────────────

    async def save(self, session: VisionSession) -> None:
        """Write the whole aggregate in one operation."""
        async with self._lock(session.id):
            await self._write(session)

    async def get(self, vision_id: str) -> Optional[VisionSession]:
        raw = await self._read(vision_id)
        if raw is None:
            # Expired or never written
            self._forget_lock(vision_id)
        return self._decode(vision_id, raw)

    async def exists(self, vision_id: str) -> bool:
        return (await self._read(vision_id)) is not None

    async def update_fields(self, vision_id: str, patch: Dict[str, Any]) -> bool:
        """
        Merge ``patch`` into the stored session with a single read/merge/write.

        Returns False when the session no longer exists; a background write to
        a deleted vision is an orphan and is dropped, not recreated.
        """
        async with self._lock(vision_id):
            current = self._decode(vision_id, await self._read(vision_id))
            if current is None:
                logger.info(
                    "Dropping write for deleted vision",
                    vision_id=vision_id,
                    fields=sorted(patch),
                )
                return False

            merged = current.model_dump()
            merged.update(patch)
            merged["updated_at"] = get_current_utc()
            await self._write(VisionSession.model_validate(merged))
            return True

    async def record_response(
        self,
        vision_id: str,
        response: Response,
        category_states: Dict[Category, CategoryState],
        overall_completeness: int,
    ) -> Optional[VisionSession]:
        """
        Append ``response`` and replace the scoring fields in one locked write.

        Title, categories, summary, tagline and status keep whatever the stored
        record holds, so background synthesis is never rolled back. Returns the
        stored session, or None when the vision no longer exists.
        """
        async with self._lock(vision_id):
            current = self._decode(vision_id, await self._read(vision_id))
            if current is None:
                logger.info("Dropping response for deleted vision", vision_id=vision_id)
                return None

            current.responses.append(response)
            current.category_states = dict(category_states)
            current.overall_completeness = overall_completeness
            current.touch()
            await self._write(current)
            return current

    async def delete(self, vision_id: str) -> bool:
        async with self._lock(vision_id):
            if self.use_redis and self.redis_client:
                try:
                    removed = await self.redis_client.delete(self._key(vision_id))
                except Exception as e:
                    logger.error("Redis delete error", vision_id=vision_id, error=str(e))
                    raise PersistenceError("Failed to delete vision", vision_id=vision_id) from e
                deleted = bool(removed)
            else:
                self.fallback_store_exp.pop(vision_id, None)
                deleted = self.fallback_store.pop(vision_id, None) is not None
        self._forget_lock(vision_id)
        return deleted

    async def list_for_user(self, user_id: str, limit: int = VISION_LIST_LIMIT) -> List[VisionSession]:
        """All sessions owned by ``user_id``, newest first."""
        results: List[VisionSession] = []

        if self.use_redis and self.redis_client:
            try:
                pattern = f"{self.key_prefix}*"
                async for key in self.redis_client.scan_iter(pattern):
                    data = await self.redis_client.get(key)
                    session = self._decode(key[len(self.key_prefix):], data)
                    if session is not None and session.user_id == user_id:
                        results.append(session)
            except PersistenceError:
                raise
            except Exception as e:
                logger.error("Redis scan error", error=str(e))
                raise PersistenceError("Failed to list visions") from e
        else:
            self._purge_fallback_expired()
            for vision_id, raw in list(self.fallback_store.items()):
                session = self._decode(vision_id, raw)
                if session is not None and session.user_id == user_id:
                    results.append(session)

        results.sort(key=lambda s: s.created_at, reverse=True)
        return results[:limit]
