"""Streams a workbook sheet into fixed-size batches of valid Employee records."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterator

from salaryslip.core.exceptions import ParseError, ValidationError
from salaryslip.ingest.row_mapper import is_blank_row, map_row
from salaryslip.ingest.source_cache import CachedSource, SourceCache
from salaryslip.models.employee import Employee
from salaryslip.models.pipeline import IngestStats

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000

BatchCallback = Callable[[list[Employee]], None]


def _data_rows(sheet) -> Iterator[tuple]:
    """Yield row values after the header, turning read failures into ParseError."""
    rows = sheet.iter_rows(min_row=2, values_only=True)
    while True:
        try:
            row = next(rows)
        except StopIteration:
            return
        except (KeyError, ValueError, OSError) as exc:
            raise ParseError(f"Error reading sheet {sheet.title!r}: {exc}") from exc
        yield row


class BatchIngestor:
    """Reads rows through the source cache and hands out batches.

    One header row is always skipped. A row that fails to map is logged
    with its sheet row number and skipped; it never stops the stream.
    """

    def __init__(self, cache: SourceCache, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self._cache = cache
        self._batch_size = batch_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def resolve_sheet(self, source: CachedSource, sheet_name: str | None):
        """Pick the named sheet, or the first sheet when it is absent."""
        sheet = source.find_sheet(sheet_name)
        if sheet is not None:
            logger.info("Reading from sheet: %s", sheet_name)
            return sheet

        fallback = source.first_sheet()
        if sheet_name:
            logger.warning("Sheet %s not found, falling back to first sheet %s", sheet_name, fallback.title)
        else:
            logger.info("No sheet specified, using first sheet %s", fallback.title)
        return fallback

    def process_in_batches(
        self,
        source_path: str | Path,
        sheet_name: str | None,
        batch_callback: BatchCallback,
        on_sheet: Callable[[str], None] | None = None,
    ) -> IngestStats:
        """Deliver every valid record to ``batch_callback`` in batches.

        ``on_sheet`` is told the name of the sheet actually read.

        Raises:
            NotFoundError: the source file does not exist.
            ParseError: the workbook cannot be loaded or read.
        """
        try:
            with self._cache.checkout(source_path) as source:
                sheet = self.resolve_sheet(source, sheet_name)
                stats = IngestStats(sheet_name=sheet.title)
                if on_sheet is not None:
                    on_sheet(sheet.title)
                self._stream(sheet, batch_callback, stats)
        finally:
            self._cache.evict_overflow()

        logger.info(
            "Ingested sheet %s: %d rows, %d accepted, %d rejected, %d blank, %d batches",
            stats.sheet_name, stats.rows_read, stats.accepted,
            stats.rejected_rows, stats.blank_rows, stats.batches,
        )
        return stats

    def _stream(self, sheet, batch_callback: BatchCallback, stats: IngestStats) -> None:
        batch: list[Employee] = []
        for row_number, row in enumerate(_data_rows(sheet), start=2):
            stats.rows_read += 1
            if is_blank_row(row):
                stats.blank_rows += 1
                continue

            try:
                employee = map_row(row, row_number)
            except ValidationError as exc:
                logger.warning("Row %d skipped: %s", row_number, exc)
                stats.rejected_rows += 1
                continue
            except Exception as exc:
                logger.error("Error processing row %d: %s", row_number, exc)
                stats.rejected_rows += 1
                continue

            batch.append(employee)
            stats.accepted += 1

            if len(batch) >= self._batch_size:
                self._deliver(batch, batch_callback, stats)
                batch = []

        if batch:
            self._deliver(batch, batch_callback, stats)

    @staticmethod
    def _deliver(batch: list[Employee], batch_callback: BatchCallback, stats: IngestStats) -> None:
        stats.batches += 1
        logger.debug("Delivering batch %d with %d records", stats.batches, len(batch))
        batch_callback(batch)
