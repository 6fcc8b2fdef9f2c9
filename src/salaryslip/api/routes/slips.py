"""Salary slip generation and batch status endpoints."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from salaryslip.api.deps import get_pipeline
from salaryslip.core.exceptions import SalarySlipError
from salaryslip.models.pipeline import BatchStatus
from salaryslip.pipeline import SlipPipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["salary-slip"])

TEMP_FILE_PREFIX = "upload_"
TEMP_FILE_SUFFIX = ".xlsx"


class SlipResponse(BaseModel):
    success: bool
    message: str
    count: int = 0
    batch_id: str = ""


def _save_upload(upload: UploadFile) -> str:
    with tempfile.NamedTemporaryFile(prefix=TEMP_FILE_PREFIX, suffix=TEMP_FILE_SUFFIX, delete=False) as tmp:
        shutil.copyfileobj(upload.file, tmp)
        return tmp.name


def _remove_quietly(path: str) -> None:
    try:
        os.unlink(path)
    except OSError as exc:
        logger.warning("Could not delete temporary upload %s: %s", path, exc)


@router.post("/generate", response_model=SlipResponse)
def generate_salary_slips(
    file: UploadFile = File(..., description="Excel file containing employee salary data"),
    sheet_name: Optional[str] = Form(None, alias="sheetName"),
    pipeline: SlipPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Generate one PDF salary slip per employee in the uploaded workbook."""
    path = _save_upload(file)
    try:
        result = pipeline.run(path, sheet_name or None)
    finally:
        _remove_quietly(path)

    body = SlipResponse(
        success=result.success,
        message=result.message,
        count=result.processed_count,
        batch_id=result.batch_id,
    )
    return JSONResponse(status_code=200 if result.success else 400, content=body.model_dump())


@router.post("/sheets", response_model=list[str])
def get_sheet_names(
    file: UploadFile = File(..., description="Excel file to read sheet names from"),
    pipeline: SlipPipeline = Depends(get_pipeline),
):
    """List the sheet names of the uploaded workbook."""
    path = _save_upload(file)
    try:
        names = pipeline.sheet_names(path)
    except SalarySlipError as exc:
        message = f"Error reading sheet names: {exc}"
        logger.error(message)
        return JSONResponse(status_code=400, content=SlipResponse(success=False, message=message).model_dump())
    finally:
        _remove_quietly(path)

    logger.info("Found %d sheets in uploaded file", len(names))
    return names


@router.get("/status/{batch_id}", response_model=BatchStatus)
def get_status(batch_id: str, pipeline: SlipPipeline = Depends(get_pipeline)) -> BatchStatus:
    status = pipeline.get_status(batch_id)
    if status is None:
        raise HTTPException(status_code=404, detail=f"Batch {batch_id} not found")
    return status


@router.get("/status", response_model=list[BatchStatus])
def list_recent(
    limit: int = Query(10, ge=1, le=100),
    pipeline: SlipPipeline = Depends(get_pipeline),
) -> list[BatchStatus]:
    return pipeline.list_recent(limit)
