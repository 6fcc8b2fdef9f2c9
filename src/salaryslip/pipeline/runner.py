"""SlipPipeline, the single entry point that turns a workbook into slips."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import Any, Callable, Sequence

from salaryslip.core.exceptions import DirectoryError, SalarySlipError
from salaryslip.core.protocols import INotifier, IRenderer
from salaryslip.ingest.batch_ingestor import BatchIngestor
from salaryslip.ingest.source_cache import SourceCache
from salaryslip.models.employee import Employee
from salaryslip.models.pipeline import BatchStatus, DispatchReport, RunResult
from salaryslip.pipeline.dispatcher import ConcurrentDispatcher
from salaryslip.pipeline.retention import BATCH_PREFIX, DEFAULT_KEEP, RetentionSweeper
from salaryslip.pipeline.retry import RetryCoordinator
from salaryslip.pipeline.tracker import BatchStatusTracker

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d_%H%M%S"
MONTH_YEAR_FORMAT = "%B %Y"

SUCCESS_MESSAGE_FORMAT = "Successfully generated %d salary slips in directory: %s"
PARTIAL_MESSAGE_FORMAT = "Generated %d of %d salary slips in directory: %s; failed ids: %s"
DIR_CREATE_ERROR = "Failed to create output directory"
GENERATE_ERROR_FORMAT = "Error generating salary slips: %s"


def current_sheet_name(now: datetime | None = None) -> str:
    """Conventional sheet name for a pay period, e.g. ``June 2025``."""
    return (now or datetime.now()).strftime(MONTH_YEAR_FORMAT)


@dataclass
class _RunContext:
    """Per-run state owned by the control thread of one ``run`` call."""

    batch_id: str
    interrupt: threading.Event = field(default_factory=threading.Event)
    output_dir: Path | None = None
    submitted: int = 0
    processed: int = 0
    failed_ids: list[str] = field(default_factory=list)


class SlipPipeline:
    """Runs ingestion, dispatch, status tracking, and retention for one run.

    ``run`` never raises for pipeline failures; every outcome is reported
    through the returned RunResult and the status tracker. Tracker writes are
    bookkeeping: a failing status store is logged and the run carries on
    with its own counts.
    """

    def __init__(
        self,
        *,
        cache: SourceCache,
        ingestor: BatchIngestor,
        renderer: IRenderer,
        dispatcher: ConcurrentDispatcher,
        retry: RetryCoordinator,
        tracker: BatchStatusTracker,
        sweeper: RetentionSweeper,
        notifier: INotifier,
        output_root: str | Path,
        keep: int = DEFAULT_KEEP,
        default_source: str | Path | None = None,
        default_sheet: str = "",
        batch_prefix: str = BATCH_PREFIX,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._cache = cache
        self._ingestor = ingestor
        self._renderer = renderer
        self._dispatcher = dispatcher
        self._retry = retry
        self._tracker = tracker
        self._sweeper = sweeper
        self._notifier = notifier
        self._output_root = Path(output_root)
        self._keep = keep
        self._default_source = default_source
        self._default_sheet = default_sheet
        self._batch_prefix = batch_prefix
        self._clock = clock
        self._active: dict[str, threading.Event] = {}
        self._active_lock = threading.Lock()

    @property
    def renderer(self) -> IRenderer:
        return self._renderer

    @property
    def tracker(self) -> BatchStatusTracker:
        return self._tracker

    # ---- trigger interface ----

    def run(self, source_path: str | Path, sheet_name: str | None = None) -> RunResult:
        """Generate one slip per valid record of ``source_path``."""
        try:
            batch_id = self._tracker.start()
        except SalarySlipError as exc:
            message = GENERATE_ERROR_FORMAT % f"could not register run: {exc}"
            logger.error(message)
            self._notify("Salary slip run failed", message)
            return RunResult(success=False, message=message)

        ctx = _RunContext(batch_id=batch_id)
        with self._active_lock:
            self._active[batch_id] = ctx.interrupt
        try:
            return self._execute(ctx, source_path, sheet_name)
        finally:
            with self._active_lock:
                self._active.pop(batch_id, None)

    def run_scheduled(self, source: str | Path | None = None, sheet: str | None = None) -> RunResult:
        """Run using the configured source and the current month's sheet.

        ``source`` and ``sheet`` override the configured values independently.
        """
        source = source or self._default_source
        if source is None:
            return RunResult(success=False, message=GENERATE_ERROR_FORMAT % "no source file configured")
        sheet = sheet or self._default_sheet or current_sheet_name(self._clock())
        logger.info("Scheduled run for %s, sheet %s", source, sheet)
        return self.run(source, sheet)

    def cancel(self, batch_id: str | None = None) -> list[str]:
        """Abort in-flight runs that are waiting between retry attempts.

        Cancels ``batch_id`` only, or every in-flight run when omitted. Runs
        started afterwards are unaffected. Returns the cancelled batch ids.
        """
        with self._active_lock:
            targets = {k: v for k, v in self._active.items() if batch_id is None or k == batch_id}
        for event in targets.values():
            event.set()
        if targets:
            logger.info("Cancel requested for runs %s", sorted(targets))
        return list(targets)

    # ---- status interface ----

    def get_status(self, batch_id: str) -> BatchStatus | None:
        return self._tracker.get(batch_id)

    def list_recent(self, limit: int = 10) -> list[BatchStatus]:
        return self._tracker.recent(limit)

    def sheet_names(self, source_path: str | Path) -> list[str]:
        try:
            return self._cache.sheet_names(source_path)
        finally:
            self._cache.evict_overflow()

    def close(self) -> None:
        self._dispatcher.shutdown()
        self._cache.close()

    # ---- internals ----

    def _execute(self, ctx: _RunContext, source_path: str | Path, sheet_name: str | None) -> RunResult:
        try:
            ctx.output_dir = self._create_output_dir()
            self._track(ctx.batch_id, output_dir=str(ctx.output_dir), sheet_name=sheet_name or "")
            self._ingestor.process_in_batches(
                source_path,
                sheet_name,
                partial(self._process_batch, ctx),
                on_sheet=lambda name: self._track(ctx.batch_id, sheet_name=name),
            )
        except DirectoryError as exc:
            logger.error("%s: %s", DIR_CREATE_ERROR, exc)
            return self._fail(ctx, DIR_CREATE_ERROR)
        except Exception as exc:
            message = GENERATE_ERROR_FORMAT % exc
            if isinstance(exc, SalarySlipError):
                logger.error(message)
            else:
                logger.exception(message)
            return self._fail(ctx, message)

        return self._succeed(ctx)

    def _create_output_dir(self) -> Path:
        now = self._clock()
        name = f"{self._batch_prefix}{now.strftime(TIMESTAMP_FORMAT)}"
        candidate = self._output_root / name
        if candidate.exists():
            candidate = self._output_root / f"{name}_{now:%f}"
        try:
            candidate.mkdir(parents=True, exist_ok=False)
        except OSError as exc:
            raise DirectoryError(f"{candidate}: {exc}") from exc
        return candidate

    def _process_batch(self, ctx: _RunContext, batch: Sequence[Employee]) -> None:
        ctx.submitted += len(batch)
        self._track(ctx.batch_id, add_submitted=len(batch))
        render_fn = partial(self._renderer.render, output_dir=ctx.output_dir, include_period=True)
        report: DispatchReport = self._retry.with_retry(
            batch, lambda records: self._dispatcher.dispatch(records, render_fn), interrupt=ctx.interrupt,
        )
        ctx.processed += report.succeeded
        ctx.failed_ids.extend(report.failed_ids)
        self._track(ctx.batch_id, add_processed=report.succeeded, add_failed_ids=report.failed_ids)

    def _track(self, batch_id: str, **delta: Any) -> None:
        try:
            self._tracker.update(batch_id, **delta)
        except SalarySlipError as exc:
            logger.warning("Could not update status of batch %s: %s", batch_id, exc)

    def _complete(self, batch_id: str, error: str = "") -> None:
        try:
            self._tracker.complete(batch_id, error=error)
        except SalarySlipError as exc:
            logger.error("Could not record completion of batch %s: %s", batch_id, exc)

    def _succeed(self, ctx: _RunContext) -> RunResult:
        self._complete(ctx.batch_id)
        if ctx.failed_ids:
            message = PARTIAL_MESSAGE_FORMAT % (
                ctx.processed, ctx.submitted, ctx.output_dir, ", ".join(ctx.failed_ids),
            )
            logger.warning(message)
            self._notify(f"Salary slip run {ctx.batch_id} partially failed", message)
        else:
            message = SUCCESS_MESSAGE_FORMAT % (ctx.processed, ctx.output_dir)
            logger.info(message)

        try:
            self._sweeper.sweep(self._output_root, self._keep)
        except Exception as exc:
            logger.warning("Retention sweep of %s failed: %s", self._output_root, exc)

        return RunResult(
            success=True,
            message=message,
            processed_count=ctx.processed,
            batch_id=ctx.batch_id,
            output_dir=str(ctx.output_dir),
            failed_ids=list(ctx.failed_ids),
        )

    def _fail(self, ctx: _RunContext, message: str) -> RunResult:
        self._complete(ctx.batch_id, error=message)
        self._notify(f"Salary slip run {ctx.batch_id} failed", message)
        if ctx.output_dir is not None:
            self._discard_if_empty(ctx.output_dir)
        return RunResult(
            success=False,
            message=message,
            processed_count=ctx.processed,
            batch_id=ctx.batch_id,
            output_dir=str(ctx.output_dir) if ctx.output_dir else "",
            failed_ids=list(ctx.failed_ids),
        )

    def _notify(self, subject: str, message: str) -> None:
        try:
            self._notifier.notify(subject, message)
        except Exception as exc:
            logger.warning("Failed to send notification %r: %s", subject, exc)

    @staticmethod
    def _discard_if_empty(output_dir: Path) -> None:
        try:
            if output_dir.is_dir() and not any(output_dir.iterdir()):
                output_dir.rmdir()
        except OSError as exc:
            logger.debug("Could not remove empty output directory %s: %s", output_dir, exc)
