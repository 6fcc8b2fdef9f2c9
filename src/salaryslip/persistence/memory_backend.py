"""In-memory backends: dict-backed stores and recording doubles."""

from __future__ import annotations

import threading


class MemoryStatusStore:
    """Dict-backed IStatusStore guarded by a lock."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._store[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._store)


class MemoryNotifier:
    """Recording INotifier for unit tests."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def notify(self, subject: str, message: str) -> None:
        with self._lock:
            self.sent.append((subject, message))
