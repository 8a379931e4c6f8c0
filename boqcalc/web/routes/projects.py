"""Project routes.

Projects are created here together with an empty draft BOQ so jobs can be
added straight away.

Routes:
- POST /api/projects              - Create a project
- GET  /api/projects/{project_id} - Get project header
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from boqcalc.db.connection import get_db
from boqcalc.db.models import BOQModel, ProjectModel
from boqcalc.models import BOQStatus, ProjectCreate

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(project_data: ProjectCreate, db: AsyncSession = Depends(get_db)):
    """Create a new project with a draft BOQ."""
    project = ProjectModel(
        name=project_data.name,
        client_name=project_data.client_name,
        address=project_data.address,
    )
    db.add(project)
    await db.flush()
    db.add(BOQModel(project_id=project.id, status=BOQStatus.DRAFT.value))
    await db.commit()

    return {
        "project_id": str(project.id),
        "name": project.name,
        "client_name": project.client_name,
        "address": project.address,
    }


@router.get("/{project_id}")
async def get_project(project_id: UUID, db: AsyncSession = Depends(get_db)):
    """Get a single project by ID."""
    project = await db.get(ProjectModel, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")

    return {
        "project_id": str(project.id),
        "name": project.name,
        "client_name": project.client_name,
        "address": project.address,
        "created_at": project.created_at,
    }
