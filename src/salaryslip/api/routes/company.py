"""Company details shown in the slip header."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from salaryslip.api.deps import get_pipeline
from salaryslip.models.company import CompanyDetails
from salaryslip.pipeline import SlipPipeline

router = APIRouter(tags=["company"])


@router.get("", response_model=CompanyDetails)
def get_company_details(pipeline: SlipPipeline = Depends(get_pipeline)) -> CompanyDetails:
    return pipeline.renderer.company


@router.put("", response_model=CompanyDetails)
def update_company_details(
    details: CompanyDetails, pipeline: SlipPipeline = Depends(get_pipeline),
) -> CompanyDetails:
    pipeline.renderer.company = details
    return details


@router.patch("/address", response_model=CompanyDetails)
def update_address(
    address_line1: Optional[str] = Query(None, alias="addressLine1"),
    address_line2: Optional[str] = Query(None, alias="addressLine2"),
    pipeline: SlipPipeline = Depends(get_pipeline),
) -> CompanyDetails:
    changes = {}
    if address_line1 is not None:
        changes["address_line1"] = address_line1
    if address_line2 is not None:
        changes["address_line2"] = address_line2
    pipeline.renderer.company = pipeline.renderer.company.model_copy(update=changes)
    return pipeline.renderer.company


@router.patch("/name", response_model=CompanyDetails)
def update_name(name: str, pipeline: SlipPipeline = Depends(get_pipeline)) -> CompanyDetails:
    pipeline.renderer.company = pipeline.renderer.company.model_copy(update={"name": name})
    return pipeline.renderer.company
