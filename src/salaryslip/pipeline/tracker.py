"""Registry of in-flight and recently completed pipeline runs."""

from __future__ import annotations

import itertools
import logging
import threading
import uuid
from datetime import datetime
from typing import Any

from salaryslip.core.exceptions import NotFoundError, ValidationError
from salaryslip.core.protocols import IStatusStore
from salaryslip.models.pipeline import BatchStatus, RunState

logger = logging.getLogger(__name__)

DEFAULT_HISTORY = 10

_MUTABLE_FIELDS = {"output_dir", "sheet_name", "processed_count", "submitted_count", "failed_ids", "error"}


def _start_order(status: BatchStatus) -> tuple:
    return (status.started_at, status.sequence)


class BatchStatusTracker:
    """Keeps BatchStatus records in an injected status store.

    Only the newest ``history`` runs are retained. Runs still in flight are
    never evicted, so more than ``history`` records exist while they run.
    Status records are bookkeeping for callers; nothing in the pipeline
    branches on them.
    """

    def __init__(self, store: IStatusStore, history: int = DEFAULT_HISTORY) -> None:
        self._store = store
        self._history = history
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)

    def start(self) -> str:
        """Register a new run and return its batch id."""
        with self._lock:
            status = BatchStatus(batch_id=uuid.uuid4().hex, sequence=next(self._sequence))
            self._store.set(status.batch_id, status.model_dump_json())
            self._trim()
        logger.debug("Started batch %s", status.batch_id)
        return status.batch_id

    def get(self, batch_id: str) -> BatchStatus | None:
        raw = self._store.get(batch_id)
        return BatchStatus.model_validate_json(raw) if raw is not None else None

    def update(self, batch_id: str, **delta: Any) -> BatchStatus:
        """Apply field changes to a running batch.

        ``processed_count`` and ``submitted_count`` given as ``add_processed`` /
        ``add_submitted`` are added to the current value; ``add_failed_ids``
        extends the failure list.

        Raises:
            NotFoundError: unknown batch id.
            ValidationError: the batch is already complete, or a field is unknown.
        """
        with self._lock:
            status = self._require(batch_id)
            if status.completed:
                raise ValidationError(f"Batch {batch_id} is complete and cannot be updated")

            changes = dict(status.model_dump())
            for key, value in delta.items():
                if key == "add_processed":
                    changes["processed_count"] += value
                elif key == "add_submitted":
                    changes["submitted_count"] += value
                elif key == "add_failed_ids":
                    changes["failed_ids"] = list(changes["failed_ids"]) + list(value)
                elif key in _MUTABLE_FIELDS:
                    changes[key] = value
                else:
                    raise ValidationError(f"Unknown batch status field: {key}")

            updated = BatchStatus.model_validate(changes)
            self._store.set(batch_id, updated.model_dump_json())
        return updated

    def complete(self, batch_id: str, error: str = "") -> BatchStatus:
        """Mark a batch finished; it is immutable afterwards."""
        with self._lock:
            status = self._require(batch_id)
            if status.completed:
                return status
            status = status.model_copy(update={
                "state": RunState.FAILED if error else RunState.COMPLETED,
                "error": error,
                "completed": True,
                "finished_at": datetime.now(),
            })
            self._store.set(batch_id, status.model_dump_json())
            self._trim()
        return status

    def recent(self, limit: int = DEFAULT_HISTORY) -> list[BatchStatus]:
        """Statuses ordered by start time, newest first."""
        if limit <= 0:
            return []
        statuses = [s for s in (self.get(k) for k in self._store.keys()) if s is not None]
        statuses.sort(key=_start_order, reverse=True)
        return statuses[:limit]

    def _require(self, batch_id: str) -> BatchStatus:
        status = self.get(batch_id)
        if status is None:
            raise NotFoundError(f"Batch {batch_id} not found")
        return status

    def _trim(self) -> None:
        statuses = [s for s in (self.get(k) for k in self._store.keys()) if s is not None]
        excess = len(statuses) - self._history
        if excess <= 0:
            return
        # In-flight runs are never dropped; only finished ones age out.
        finished = sorted((s for s in statuses if s.completed), key=_start_order)
        for stale in finished[:excess]:
            self._store.delete(stale.batch_id)
            logger.debug("Dropped batch status %s from history", stale.batch_id)
