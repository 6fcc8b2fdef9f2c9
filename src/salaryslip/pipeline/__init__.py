"""Batch pipeline components and the composition root that wires them."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from salaryslip.core.config import AppSettings
from salaryslip.core.protocols import INotifier, IStatusStore
from salaryslip.ingest.batch_ingestor import BatchIngestor
from salaryslip.ingest.source_cache import SourceCache
from salaryslip.models.company import CompanyDetails
from salaryslip.notify import create_notifier
from salaryslip.persistence import create_status_store
from salaryslip.pipeline.dispatcher import ConcurrentDispatcher
from salaryslip.pipeline.retention import RetentionSweeper
from salaryslip.pipeline.retry import RetryCoordinator
from salaryslip.pipeline.runner import SlipPipeline
from salaryslip.pipeline.tracker import BatchStatusTracker
from salaryslip.render.document_renderer import DocumentRenderer


def create_pipeline(
    settings: AppSettings | None = None,
    *,
    status_store: IStatusStore | None = None,
    notifier: INotifier | None = None,
    executor: ThreadPoolExecutor | None = None,
) -> SlipPipeline:
    """Build a SlipPipeline and its collaborators from application settings.

    Explicit ``status_store``, ``notifier`` and ``executor`` arguments
    override the ones the settings would select.
    """
    if settings is None:
        settings = AppSettings()

    cache = SourceCache(capacity=settings.source.cache_capacity)
    renderer = DocumentRenderer(
        company=CompanyDetails.from_config(settings.company),
        logo_path=settings.render.logo_path,
    )
    return SlipPipeline(
        cache=cache,
        ingestor=BatchIngestor(cache, batch_size=settings.source.batch_size),
        renderer=renderer,
        dispatcher=ConcurrentDispatcher(executor, max_workers=settings.render.max_workers),
        retry=RetryCoordinator(
            max_attempts=settings.retry.max_attempts,
            delay_seconds=settings.retry.delay_seconds,
        ),
        tracker=BatchStatusTracker(
            status_store or create_status_store(settings),
            history=settings.tracker.history,
        ),
        sweeper=RetentionSweeper(prefix=settings.retention.prefix),
        notifier=notifier or create_notifier(settings.notify),
        output_root=settings.render.output_dir,
        keep=settings.retention.keep,
        default_source=settings.source.excel_path,
        default_sheet=settings.source.sheet_name,
        batch_prefix=settings.retention.prefix,
    )


__all__ = ["SlipPipeline", "create_pipeline"]
