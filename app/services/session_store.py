"""
Session store: one refresh token per user, kept in Redis.

Keyspace: ``refresh_token:{user_id}`` -> refresh token string, TTL = refresh
token lifetime. Every write overwrites, so a user has at most one live session.
"""

import logging
from typing import Optional

from fastapi import Depends
from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.core.config import get_settings
from app.core.errors import SessionStoreError
from app.db.redis import get_redis

logger = logging.getLogger(__name__)

KEY_PREFIX = "refresh_token"


class SessionStore:
    """Atomic single-key operations over the session keyspace."""

    def __init__(self, client: Redis, ttl_seconds: int):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def key(user_id: str) -> str:
        return f"{KEY_PREFIX}:{user_id}"

    async def put(self, user_id: str, refresh_token: str) -> None:
        """Store ``refresh_token`` for ``user_id``, replacing any previous one."""
        try:
            await self.client.set(self.key(user_id), refresh_token, ex=self.ttl_seconds)
        except RedisError as exc:
            logger.error(f"Session store write failed for user {user_id}: {exc}")
            raise SessionStoreError("session store unavailable") from exc

    async def get(self, user_id: str) -> Optional[str]:
        try:
            return await self.client.get(self.key(user_id))
        except RedisError as exc:
            logger.error(f"Session store read failed for user {user_id}: {exc}")
            raise SessionStoreError("session store unavailable") from exc

    async def delete(self, user_id: str) -> None:
        """Remove the session record; absent keys are a no-op."""
        try:
            await self.client.delete(self.key(user_id))
        except RedisError as exc:
            logger.error(f"Session store delete failed for user {user_id}: {exc}")
            raise SessionStoreError("session store unavailable") from exc


def get_session_store(client: Redis = Depends(get_redis)) -> SessionStore:
    return SessionStore(client, get_settings().refresh_token_max_age)
