"""Generate salary slips once, for use from an external scheduler (cron, systemd timer).

Usage:
    python scripts/run_scheduled.py
    python scripts/run_scheduled.py --source data/salary.xlsx --sheet "June 2025"
"""

from __future__ import annotations

import argparse
import logging
import sys

from salaryslip.core.config import AppSettings
from salaryslip.core.logging import configure_logging
from salaryslip.pipeline import create_pipeline

logger = logging.getLogger("salaryslip.scheduled")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate salary slips for the current period")
    parser.add_argument("--source", help="Workbook path (defaults to SALARYSLIP_SOURCE_EXCEL_PATH)")
    parser.add_argument("--sheet", help="Sheet name (defaults to the current 'Month YYYY')")
    parser.add_argument("--force", action="store_true", help="Run even if the scheduler is disabled")
    args = parser.parse_args(argv)

    settings = AppSettings()
    configure_logging(settings.log_level)

    if not settings.scheduler.enabled and not args.force:
        logger.info("Scheduler is disabled. Skipping salary slip generation.")
        return 0

    pipeline = create_pipeline(settings)
    try:
        result = pipeline.run_scheduled(source=args.source, sheet=args.sheet)
    finally:
        pipeline.close()

    print(result.message)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
