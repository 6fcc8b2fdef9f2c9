"""Request-scoped accessors for objects wired in the application lifespan."""

from __future__ import annotations

from fastapi import Request

from salaryslip.pipeline import SlipPipeline


def get_pipeline(request: Request) -> SlipPipeline:
    return request.app.state.pipeline
