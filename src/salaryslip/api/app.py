"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from salaryslip.api.routes import company, health, slips
from salaryslip.core.config import AppSettings
from salaryslip.core.logging import configure_logging
from salaryslip.pipeline import SlipPipeline, create_pipeline

logger = logging.getLogger(__name__)


def _start_startup_run(pipeline: SlipPipeline) -> threading.Thread:
    logger.info("Running salary slip generation on startup...")
    thread = threading.Thread(target=pipeline.run_scheduled, name="slip-startup-run", daemon=True)
    thread.start()
    return thread


def create_app(settings: AppSettings | None = None, pipeline: SlipPipeline | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    A pipeline passed in is used as-is and is not closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize and tear down application resources."""
        app_settings = settings or AppSettings()
        configure_logging(app_settings.log_level)
        app.state.settings = app_settings
        app.state.pipeline = pipeline or create_pipeline(app_settings)

        app.state.startup_run = None
        if app_settings.scheduler.enabled and app_settings.scheduler.generate_on_startup:
            app.state.startup_run = _start_startup_run(app.state.pipeline)
        yield
        if pipeline is None:
            app.state.pipeline.close()

    app = FastAPI(
        title="Salary Slip Generator",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(slips.router, prefix="/api/salary-slip")
    app.include_router(company.router, prefix="/api/company")
    return app
