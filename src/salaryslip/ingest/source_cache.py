"""In-memory cache of parsed payroll workbooks, keyed by file path."""

from __future__ import annotations

import io
import logging
import threading
import zipfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, MutableMapping

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.workbook import Workbook

from salaryslip.core.exceptions import LoadError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10


@dataclass(eq=False)
class CachedSource:
    """A parsed workbook together with the bytes and mtime it was loaded from."""

    path: str
    workbook: Workbook
    content: bytes = field(repr=False)
    last_modified: float
    readers: int = field(default=0, repr=False)
    retired: bool = field(default=False, repr=False)

    @property
    def sheet_names(self) -> list[str]:
        return list(self.workbook.sheetnames)

    def find_sheet(self, name: str | None) -> Any | None:
        """Return the sheet with exactly this name, or None when absent."""
        if not name or name not in self.workbook.sheetnames:
            return None
        return self.workbook[name]

    def first_sheet(self) -> Any:
        return self.workbook.worksheets[0]

    def close(self) -> None:
        self.workbook.close()


class SourceCache:
    """Loads each workbook once and keeps it resident until evicted.

    Cached entries are never refreshed when the file changes on disk; the
    recorded modification time only orders eviction. Loads and evictions
    are serialized; a lookup of a resident entry does not take the lock.
    Readers hold entries through ``checkout`` so eviction never closes a
    workbook mid-stream.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        store: MutableMapping[str, CachedSource] | None = None,
    ) -> None:
        self._capacity = capacity
        self._entries: MutableMapping[str, CachedSource] = store if store is not None else {}
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return str(path) in self._entries

    def get(self, path: str | Path) -> CachedSource:
        """Return the cached parse for ``path``, loading it on first access.

        Raises:
            NotFoundError: the path does not exist.
            LoadError: the file is not a readable workbook.
        """
        key = str(path)
        if not Path(key).is_file():
            raise NotFoundError(f"Excel file not found: {key}")

        entry = self._entries.get(key)
        if entry is not None:
            return entry

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._load(key)
                self._entries[key] = entry
                logger.debug("Cached workbook %s (%d resident)", key, len(self._entries))
        return entry

    @contextmanager
    def checkout(self, path: str | Path) -> Iterator[CachedSource]:
        """Hold the entry for ``path`` open while reading from it.

        An entry evicted while checked out leaves the cache at once but is
        closed only when its last reader releases it.
        """
        key = str(path)
        while True:
            entry = self.get(key)
            with self._lock:
                if self._entries.get(key) is entry:
                    entry.readers += 1
                    break
        try:
            yield entry
        finally:
            with self._lock:
                entry.readers -= 1
                close_now = entry.retired and entry.readers == 0
            if close_now:
                self._close_quietly(entry)

    def sheet_names(self, path: str | Path) -> list[str]:
        return self.get(path).sheet_names

    def evict_overflow(self) -> list[str]:
        """Evict oldest-modified entries until the cache is within capacity.

        Returns the evicted paths.
        """
        with self._lock:
            overflow = len(self._entries) - self._capacity
            if overflow <= 0:
                return []

            victims = sorted(self._entries.values(), key=lambda e: e.last_modified)[:overflow]
            for victim in victims:
                del self._entries[victim.path]
            idle = self._retire(victims)

        for entry in idle:
            self._close_quietly(entry)
        evicted = [victim.path for victim in victims]
        logger.info("Evicted %d cached workbook(s): %s", len(evicted), evicted)
        return evicted

    def close(self) -> None:
        """Drop every resident workbook, closing each once it has no reader."""
        with self._lock:
            idle = self._retire(list(self._entries.values()))
            self._entries.clear()
        for entry in idle:
            self._close_quietly(entry)

    @staticmethod
    def _retire(entries: list[CachedSource]) -> list[CachedSource]:
        """Mark entries retired; return those with no reader, safe to close now."""
        for entry in entries:
            entry.retired = True
        return [entry for entry in entries if entry.readers == 0]

    @staticmethod
    def _load(path: str) -> CachedSource:
        file = Path(path)
        try:
            content = file.read_bytes()
            last_modified = file.stat().st_mtime
        except OSError as exc:
            raise LoadError(path, str(exc)) from exc

        try:
            workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
            raise LoadError(path, str(exc)) from exc

        if not workbook.worksheets:
            raise LoadError(path, "workbook has no sheets")

        return CachedSource(path=path, workbook=workbook, content=content, last_modified=last_modified)

    @staticmethod
    def _close_quietly(entry: CachedSource) -> None:
        try:
            entry.close()
        except Exception as exc:
            logger.warning("Error closing workbook %s: %s", entry.path, exc)
