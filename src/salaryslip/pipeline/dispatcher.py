"""Fan-out/fan-in of one batch across a bounded render worker pool."""

from __future__ import annotations

import logging
from concurrent.futures import ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Sequence

from salaryslip.models.employee import Employee
from salaryslip.models.pipeline import DispatchReport, RecordOutcome

logger = logging.getLogger(__name__)

RenderFn = Callable[[Employee], Path]


class ConcurrentDispatcher:
    """Submits one render task per record and waits for every task.

    The executor is shared across runs and is owned by whoever created it;
    ``shutdown`` only closes pools this dispatcher created itself.
    """

    def __init__(self, executor: ThreadPoolExecutor | None = None, max_workers: int = 4) -> None:
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="slip-render",
        )

    def dispatch(self, batch: Sequence[Employee], render_fn: RenderFn) -> DispatchReport:
        """Render every record in ``batch`` and collect all outcomes.

        Outcomes are returned in submission order. Per-record failures are
        captured in the report; an error from the executor itself (for
        example a pool that was shut down) propagates to the caller.
        """
        futures: list[tuple[Employee, Future[Path]]] = [
            (employee, self._executor.submit(render_fn, employee)) for employee in batch
        ]
        wait([f for _, f in futures], return_when=ALL_COMPLETED)

        report = DispatchReport()
        for employee, future in futures:
            exc = future.exception()
            if exc is None:
                report.outcomes.append(RecordOutcome(employee_id=employee.emp_id, output_path=future.result()))
            else:
                logger.error("Failed to render slip for employee %s: %s", employee.emp_id, exc)
                report.outcomes.append(RecordOutcome(employee_id=employee.emp_id, error=str(exc)))

        if report.partial_failure:
            logger.warning(
                "Batch partially failed: %d of %d records rendered, failed ids %s",
                report.succeeded, len(batch), report.failed_ids,
            )
        return report

    def shutdown(self, wait_for_tasks: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait_for_tasks)
