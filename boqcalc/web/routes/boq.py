"""BOQ routes.

Routes:
- GET    /api/projects/{project_id}/boq                 - BOQ with jobs and general costs
- POST   /api/projects/{project_id}/boq/jobs            - Add a job line
- PUT    /api/projects/{project_id}/boq/jobs/{job_id}   - Replace a job line
- DELETE /api/projects/{project_id}/boq/jobs/{job_id}   - Remove a job line
- PUT    /api/projects/{project_id}/boq/general-costs   - Set a general cost estimate
- POST   /api/projects/{project_id}/boq/approve         - Approve the BOQ
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from boqcalc.boq.repository import BOQRepository
from boqcalc.models import BOQDetail, BOQJobDetail, BOQJobRequest, GeneralCostEntry, GeneralCostRequest
from boqcalc.web.dependencies import get_boq_repository

router = APIRouter(prefix="/api/projects/{project_id}/boq", tags=["boq"])


@router.get("", response_model=BOQDetail)
async def get_boq(project_id: UUID, repository: BOQRepository = Depends(get_boq_repository)):
    return await repository.get_boq_with_project(project_id)


@router.post("/jobs", response_model=BOQJobDetail, status_code=status.HTTP_201_CREATED)
async def add_job(
    project_id: UUID,
    payload: BOQJobRequest,
    repository: BOQRepository = Depends(get_boq_repository),
):
    return await repository.add_job(project_id, payload)


@router.put("/jobs/{job_id}", response_model=BOQJobDetail)
async def update_job(
    project_id: UUID,
    job_id: UUID,
    payload: BOQJobRequest,
    repository: BOQRepository = Depends(get_boq_repository),
):
    return await repository.update_job(project_id, job_id, payload)


@router.delete("/jobs/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(
    project_id: UUID,
    job_id: UUID,
    repository: BOQRepository = Depends(get_boq_repository),
):
    await repository.delete_job(project_id, job_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/general-costs", response_model=GeneralCostEntry)
async def set_general_cost(
    project_id: UUID,
    payload: GeneralCostRequest,
    repository: BOQRepository = Depends(get_boq_repository),
):
    return await repository.set_general_cost(project_id, payload.type_name, payload.estimated_cost)


@router.post("/approve")
async def approve_boq(project_id: UUID, repository: BOQRepository = Depends(get_boq_repository)):
    boq = await repository.approve(project_id)
    return {"success": True, "project_id": str(project_id), "status": boq.status.value}
