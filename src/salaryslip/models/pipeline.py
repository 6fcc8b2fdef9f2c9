"""Run, batch, and dispatch state models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class RunState(StrEnum):
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class BatchStatus(BaseModel):
    """Progress of one pipeline run, as recorded by the status tracker."""

    batch_id: str
    state: RunState = RunState.RUNNING
    started_at: datetime = Field(default_factory=datetime.now)
    sequence: int = 0
    finished_at: Optional[datetime] = None
    output_dir: str = ""
    sheet_name: str = ""
    processed_count: int = 0
    submitted_count: int = 0
    failed_ids: list[str] = Field(default_factory=list)
    error: str = ""
    completed: bool = False


class RecordOutcome(BaseModel):
    """Result of rendering one record: an output path or a failure."""

    employee_id: str
    output_path: Optional[Path] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.output_path is not None and not self.error


class DispatchReport(BaseModel):
    """Outcomes of one dispatched batch, in submission order."""

    outcomes: list[RecordOutcome] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed_ids(self) -> list[str]:
        return [o.employee_id for o in self.outcomes if not o.ok]

    @property
    def partial_failure(self) -> bool:
        return any(not o.ok for o in self.outcomes)


class IngestStats(BaseModel):
    """Row accounting for one pass over a sheet."""

    sheet_name: str = ""
    rows_read: int = 0
    blank_rows: int = 0
    rejected_rows: int = 0
    accepted: int = 0
    batches: int = 0


class RunResult(BaseModel):
    """Trigger-facing result of a pipeline run."""

    success: bool
    message: str
    processed_count: int = 0
    batch_id: str = ""
    output_dir: str = ""
    failed_ids: list[str] = Field(default_factory=list)
