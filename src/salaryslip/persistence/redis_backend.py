"""Redis status store implementing IStatusStore."""

from __future__ import annotations

import redis

from salaryslip.core.exceptions import StatusStoreError


class RedisStatusStore:
    """Production IStatusStore keeping all statuses in one Redis hash."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 key: str = "salaryslip:batches") -> None:
        self._host = host
        self._port = port
        self._db = db
        self._key = key
        self._client = redis.Redis(
            host=host, port=port, db=db, decode_responses=True,
        )

    def get(self, key: str) -> str | None:
        try:
            return self._client.hget(self._key, key)
        except Exception as exc:
            raise StatusStoreError(f"Redis HGET failed for field={key!r}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            self._client.hset(self._key, key, value)
        except Exception as exc:
            raise StatusStoreError(f"Redis HSET failed for field={key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.hdel(self._key, key)
        except Exception as exc:
            raise StatusStoreError(f"Redis HDEL failed for field={key!r}: {exc}") from exc

    def keys(self) -> list[str]:
        try:
            return list(self._client.hkeys(self._key))
        except Exception as exc:
            raise StatusStoreError(f"Redis HKEYS failed for key={self._key!r}: {exc}") from exc
