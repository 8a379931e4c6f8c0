"""Quotation routes.

Routes:
- GET   /api/projects/{project_id}/quotation          - Create-or-get the priced quotation
- PATCH /api/projects/{project_id}/quotation          - Update tax percentage / validity date
- POST  /api/projects/{project_id}/quotation/approve  - Approve the quotation
- GET   /api/projects/{project_id}/quotation/export   - Export (JSON or CSV)
"""

from __future__ import annotations

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from boqcalc.models import QuotationExportData, QuotationResponse, QuotationTermsRequest
from boqcalc.quotation.service import QuotationService
from boqcalc.reporting.csv_export import export_quotation_csv, quotation_csv_filename
from boqcalc.web.dependencies import get_quotation_service

router = APIRouter(prefix="/api/projects/{project_id}/quotation", tags=["quotations"])


@router.get("", response_model=QuotationResponse)
async def create_or_get_quotation(
    project_id: UUID,
    service: QuotationService = Depends(get_quotation_service),
):
    """Return the project's priced quotation, creating it on first request."""
    return await service.create_or_get_quotation(project_id)


@router.patch("", response_model=QuotationResponse)
async def update_quotation_terms(
    project_id: UUID,
    payload: QuotationTermsRequest,
    service: QuotationService = Depends(get_quotation_service),
):
    """Update only the terms present in the request body."""
    return await service.update_quotation_terms(
        project_id, payload.model_dump(exclude_unset=True)
    )


@router.post("/approve")
async def approve_quotation(
    project_id: UUID,
    service: QuotationService = Depends(get_quotation_service),
):
    await service.approve_quotation(project_id)
    return {"success": True, "project_id": str(project_id), "status": "approved"}


@router.get("/export", response_model=QuotationExportData)
async def export_quotation(
    project_id: UUID,
    format: Literal["json", "csv"] = Query(default="json"),
    service: QuotationService = Depends(get_quotation_service),
):
    """Export an approved quotation as JSON or as a CSV download."""
    data = await service.export_quotation(project_id)
    if format == "csv":
        return StreamingResponse(
            export_quotation_csv(data),
            media_type="text/csv",
            headers={
                "Content-Disposition": f'attachment; filename="{quotation_csv_filename(data)}"'
            },
        )
    return data
