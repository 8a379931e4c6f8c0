"""Persistence for a project's bill of quantities.

Jobs and general costs can only change while the BOQ is a draft; approval
freezes it so quotations priced from it stay consistent.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from boqcalc.boq.models import BOQ
from boqcalc.db.models import BOQJobModel, BOQModel, GeneralCostModel, ProjectModel
from boqcalc.errors import NotFound, PreconditionFailed, ValidationFailed, storage_errors
from boqcalc.models import (
    BOQDetail,
    BOQJobDetail,
    BOQJobRequest,
    BOQStatus,
    GeneralCostEntry,
)

logger = structlog.get_logger(__name__)


class BOQRepository:
    """Reads and writes BOQ headers, job lines and general costs."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_project_id(self, project_id: UUID) -> BOQ | None:
        model = await self._get_model(project_id)
        return _to_boq(model) if model is not None else None

    async def get_or_create(self, project_id: UUID) -> BOQ:
        """Return the project's BOQ, creating an empty draft if there is none."""
        model = await self._get_or_create_model(project_id)
        await self._commit("create BOQ")
        return _to_boq(model)

    async def get_boq_with_project(self, project_id: UUID) -> BOQDetail:
        with storage_errors("get project"):
            project = await self.session.get(ProjectModel, project_id)
        if project is None:
            raise NotFound(f"project {project_id} not found")

        boq = await self._get_model(project_id)
        if boq is None:
            raise NotFound(f"BOQ for project {project_id} not found")

        with storage_errors("get BOQ jobs"):
            jobs = await self.session.scalars(
                select(BOQJobModel)
                .where(BOQJobModel.boq_id == boq.id)
                .order_by(BOQJobModel.created_at.asc(), BOQJobModel.name.asc())
            )
            job_details = [_to_job_detail(job) for job in jobs]

            costs = await self.session.scalars(
                select(GeneralCostModel)
                .where(GeneralCostModel.boq_id == boq.id)
                .order_by(GeneralCostModel.type_name.asc())
            )
            cost_entries = [
                GeneralCostEntry(type_name=cost.type_name, estimated_cost=cost.estimated_cost)
                for cost in costs
            ]

        return BOQDetail(
            boq_id=boq.id,
            project_id=project.id,
            project_name=project.name,
            status=BOQStatus(boq.status),
            jobs=job_details,
            general_costs=cost_entries,
        )

    async def add_job(self, project_id: UUID, request: BOQJobRequest) -> BOQJobDetail:
        boq = await self._get_or_create_model(project_id)
        _require_draft(boq)

        job = BOQJobModel(boq_id=boq.id)
        _apply_job_request(job, request)
        self.session.add(job)
        await self._commit("add BOQ job")

        logger.info("boq_job_added", project_id=str(project_id), job_id=str(job.id))
        return _to_job_detail(job)

    async def update_job(
        self, project_id: UUID, job_id: UUID, request: BOQJobRequest
    ) -> BOQJobDetail:
        job = await self._get_draft_job(project_id, job_id)
        _apply_job_request(job, request)
        await self._commit("update BOQ job")
        return _to_job_detail(job)

    async def delete_job(self, project_id: UUID, job_id: UUID) -> None:
        job = await self._get_draft_job(project_id, job_id)
        await self.session.delete(job)
        await self._commit("delete BOQ job")
        logger.info("boq_job_deleted", project_id=str(project_id), job_id=str(job_id))

    async def set_general_cost(
        self, project_id: UUID, type_name: str, estimated_cost: Decimal | None
    ) -> GeneralCostEntry:
        """Create or replace the estimate for one general cost category."""
        boq = await self._get_or_create_model(project_id)
        _require_draft(boq)

        with storage_errors("get general cost"):
            cost = await self.session.scalar(
                select(GeneralCostModel).where(
                    GeneralCostModel.boq_id == boq.id,
                    GeneralCostModel.type_name == type_name,
                )
            )
        if cost is None:
            cost = GeneralCostModel(boq_id=boq.id, type_name=type_name)
            self.session.add(cost)
        cost.estimated_cost = estimated_cost
        await self._commit("set general cost")

        return GeneralCostEntry(type_name=cost.type_name, estimated_cost=cost.estimated_cost)

    async def approve(self, project_id: UUID) -> BOQ:
        """Move the BOQ from draft to approved.

        Raises:
            NotFound: If the project has no BOQ
            PreconditionFailed: If the BOQ is already approved
            ValidationFailed: If the BOQ has no jobs
        """
        boq = await self._get_model(project_id)
        if boq is None:
            raise NotFound(f"BOQ for project {project_id} not found")
        if boq.status == BOQStatus.APPROVED.value:
            raise PreconditionFailed("BOQ is already approved")

        with storage_errors("count BOQ jobs"):
            job_count = await self.session.scalar(
                select(func.count(BOQJobModel.id)).where(BOQJobModel.boq_id == boq.id)
            )
        if not job_count:
            raise ValidationFailed("BOQ must contain at least one job before approval")

        boq.status = BOQStatus.APPROVED.value
        boq.approved_at = func.now()
        await self._commit("approve BOQ")
        with storage_errors("refresh BOQ"):
            await self.session.refresh(boq)

        logger.info("boq_approved", project_id=str(project_id), job_count=job_count)
        return _to_boq(boq)

    async def _get_model(self, project_id: UUID) -> BOQModel | None:
        with storage_errors("get BOQ"):
            return await self.session.scalar(
                select(BOQModel).where(BOQModel.project_id == project_id)
            )

    async def _get_or_create_model(self, project_id: UUID) -> BOQModel:
        boq = await self._get_model(project_id)
        if boq is not None:
            return boq

        with storage_errors("get project"):
            project = await self.session.get(ProjectModel, project_id)
        if project is None:
            raise NotFound(f"project {project_id} not found")

        boq = BOQModel(project_id=project_id, status=BOQStatus.DRAFT.value)
        self.session.add(boq)
        with storage_errors("create BOQ"):
            await self.session.flush()
        return boq

    async def _get_draft_job(self, project_id: UUID, job_id: UUID) -> BOQJobModel:
        boq = await self._get_model(project_id)
        if boq is None:
            raise NotFound(f"BOQ for project {project_id} not found")
        _require_draft(boq)

        with storage_errors("get BOQ job"):
            job = await self.session.scalar(
                select(BOQJobModel).where(BOQJobModel.id == job_id, BOQJobModel.boq_id == boq.id)
            )
        if job is None:
            raise NotFound(f"BOQ job {job_id} not found")
        return job

    async def _commit(self, action: str) -> None:
        with storage_errors(action):
            await self.session.commit()


def _require_draft(boq: BOQModel) -> None:
    if boq.status != BOQStatus.DRAFT.value:
        raise PreconditionFailed("approved BOQ cannot be modified")


def _apply_job_request(job: BOQJobModel, request: BOQJobRequest) -> None:
    """Copy request fields onto the job and derive its line totals."""
    job.name = request.name
    job.unit = request.unit
    job.quantity = request.quantity
    job.labor_cost = request.labor_cost
    job.total_labor_cost = request.quantity * request.labor_cost
    job.estimated_price = request.estimated_price
    job.selling_price = request.selling_price

    if request.estimated_price is not None:
        job.total_estimated_price = request.quantity * request.estimated_price
        job.total = job.total_labor_cost + job.total_estimated_price
    else:
        job.total_estimated_price = None
        job.total = None


def _to_boq(model: BOQModel) -> BOQ:
    return BOQ(
        boq_id=model.id,
        project_id=model.project_id,
        status=BOQStatus(model.status),
        approved_at=model.approved_at,
    )


def _to_job_detail(model: BOQJobModel) -> BOQJobDetail:
    return BOQJobDetail(
        job_id=model.id,
        name=model.name,
        unit=model.unit,
        quantity=model.quantity,
        labor_cost=model.labor_cost,
        total_labor_cost=model.total_labor_cost,
        estimated_price=model.estimated_price,
        total_estimated_price=model.total_estimated_price,
        selling_price=model.selling_price,
        total=model.total,
    )
