"""Pluggable status store backends behind the IStatusStore protocol."""

from __future__ import annotations

from salaryslip.core.config import AppSettings
from salaryslip.core.protocols import IStatusStore
from salaryslip.persistence.memory_backend import MemoryStatusStore
from salaryslip.persistence.redis_backend import RedisStatusStore


def create_status_store(settings: AppSettings | None = None) -> IStatusStore:
    """Create the batch status store selected by ``tracker.backend``."""
    if settings is None:
        settings = AppSettings()

    if settings.tracker.backend == "redis":
        return RedisStatusStore(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
            key=settings.redis.key,
        )
    return MemoryStatusStore()


__all__ = ["IStatusStore", "MemoryStatusStore", "RedisStatusStore", "create_status_store"]
