"""Database queries and status-gated writes for quotations."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Protocol
from uuid import UUID, uuid4

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from boqcalc.config import QuotationConfig, get_config
from boqcalc.db.models import (
    BOQJobModel,
    BOQModel,
    GeneralCostModel,
    ProjectModel,
    QuotationModel,
)
from boqcalc.errors import NotFound, PreconditionFailed, ValidationFailed, storage_errors
from boqcalc.models import (
    BOQStatus,
    ExportProject,
    ExportQuotation,
    QuotationExportData,
    QuotationStatus,
)
from boqcalc.quotation.aggregator import build_quotation_response
from boqcalc.quotation.models import Quotation, QuotationGeneralCost, QuotationJob

TERMS_FIELDS = frozenset({"tax_percentage", "valid_date"})


class QuotationStore(Protocol):
    """Storage operations the quotation service depends on."""

    async def check_boq_status(self, project_id: UUID) -> BOQStatus | None: ...

    async def get_by_project_id(self, project_id: UUID) -> Quotation | None: ...

    async def create(self, project_id: UUID) -> Quotation: ...

    async def get_quotation_jobs(self, project_id: UUID) -> list[QuotationJob]: ...

    async def get_quotation_general_costs(self, project_id: UUID) -> list[QuotationGeneralCost]: ...

    async def validate_approval(self, project_id: UUID) -> None: ...

    async def approve_quotation(self, project_id: UUID) -> None: ...

    async def get_quotation_status(self, project_id: UUID) -> QuotationStatus | None: ...

    async def get_export_data(self, project_id: UUID) -> QuotationExportData: ...

    async def update_terms(self, project_id: UUID, changes: Mapping[str, Any]) -> Quotation: ...


class QuotationRepository:
    """SQLAlchemy-backed :class:`QuotationStore`.

    Writes (create, approve, update_terms) commit immediately so each one is
    its own commit point.
    """

    def __init__(self, session: AsyncSession, config: QuotationConfig | None = None):
        self.session = session
        self.config = config if config is not None else get_config().quotation

    async def check_boq_status(self, project_id: UUID) -> BOQStatus | None:
        """Return the BOQ status, or None when the project has no BOQ yet."""
        with storage_errors("check BOQ status"):
            status = await self.session.scalar(
                select(BOQModel.status).where(BOQModel.project_id == project_id)
            )
        return BOQStatus(status) if status is not None else None

    async def get_by_project_id(self, project_id: UUID) -> Quotation | None:
        with storage_errors("get quotation"):
            model = await self.session.scalar(
                select(QuotationModel)
                .where(QuotationModel.project_id == project_id)
                .execution_options(populate_existing=True)
            )
        return _to_quotation(model) if model is not None else None

    async def create(self, project_id: UUID) -> Quotation:
        """Insert a draft quotation unless one exists, then return the stored row.

        ON CONFLICT DO NOTHING on the unique project_id means racing callers
        all end up reading the same quotation.
        """
        values = {
            "id": uuid4(),
            "project_id": project_id,
            "status": QuotationStatus.DRAFT.value,
            "valid_date": date.today() + timedelta(days=self.config.valid_days),
            "tax_percentage": self.config.default_tax_percentage,
        }

        with storage_errors("create quotation"):
            stmt = (
                self._insert(QuotationModel)
                .values(**values)
                .on_conflict_do_nothing(index_elements=[QuotationModel.project_id])
            )
            await self.session.execute(stmt)
            await self.session.commit()

        quotation = await self.get_by_project_id(project_id)
        if quotation is None:
            raise NotFound(f"quotation for project {project_id} not found after create")
        return quotation

    async def get_quotation_jobs(self, project_id: UUID) -> list[QuotationJob]:
        stmt = (
            select(BOQJobModel)
            .join(BOQModel, BOQModel.id == BOQJobModel.boq_id)
            .where(BOQModel.project_id == project_id)
            .order_by(BOQJobModel.created_at.asc(), BOQJobModel.name.asc())
        )
        with storage_errors("get quotation jobs"):
            rows = await self.session.scalars(stmt)
            return [_to_quotation_job(model) for model in rows]

    async def get_quotation_general_costs(self, project_id: UUID) -> list[QuotationGeneralCost]:
        stmt = (
            select(GeneralCostModel)
            .join(BOQModel, BOQModel.id == GeneralCostModel.boq_id)
            .where(BOQModel.project_id == project_id)
            .order_by(GeneralCostModel.type_name.asc())
        )
        with storage_errors("get quotation general costs"):
            rows = await self.session.scalars(stmt)
            return [
                QuotationGeneralCost(type_name=model.type_name, estimated_cost=model.estimated_cost)
                for model in rows
            ]

    async def validate_approval(self, project_id: UUID) -> None:
        """Raise unless the project's quotation may move from draft to approved."""
        boq_status = await self.check_boq_status(project_id)
        if boq_status is not BOQStatus.APPROVED:
            raise PreconditionFailed("BOQ must be approved before approving quotation")

        quotation = await self.get_by_project_id(project_id)
        if quotation is None:
            raise NotFound(f"quotation for project {project_id} not found")
        if quotation.status is not QuotationStatus.DRAFT:
            raise PreconditionFailed("only draft quotations can be approved")

        with storage_errors("count quotation jobs"):
            job_count = await self.session.scalar(
                select(func.count(BOQJobModel.id))
                .join(BOQModel, BOQModel.id == BOQJobModel.boq_id)
                .where(BOQModel.project_id == project_id)
            )
        if not job_count:
            raise ValidationFailed("quotation must contain at least one job")

        if quotation.valid_date is not None and quotation.valid_date < date.today():
            raise ValidationFailed(
                f"quotation validity date {quotation.valid_date.isoformat()} has already passed"
            )

    async def approve_quotation(self, project_id: UUID) -> None:
        stmt = (
            update(QuotationModel)
            .where(
                QuotationModel.project_id == project_id,
                QuotationModel.status == QuotationStatus.DRAFT.value,
            )
            .values(status=QuotationStatus.APPROVED.value, approved_at=func.now())
            .execution_options(synchronize_session=False)
        )
        with storage_errors("approve quotation"):
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                await self.session.rollback()
                raise PreconditionFailed("quotation is not in an approvable state")
            await self.session.commit()

    async def get_quotation_status(self, project_id: UUID) -> QuotationStatus | None:
        with storage_errors("get quotation status"):
            status = await self.session.scalar(
                select(QuotationModel.status).where(QuotationModel.project_id == project_id)
            )
        return QuotationStatus(status) if status is not None else None

    async def get_export_data(self, project_id: UUID) -> QuotationExportData:
        with storage_errors("get project"):
            project = await self.session.get(ProjectModel, project_id)
        if project is None:
            raise NotFound(f"project {project_id} not found")

        quotation = await self.get_by_project_id(project_id)
        if quotation is None:
            raise NotFound(f"quotation for project {project_id} not found")

        jobs = await self.get_quotation_jobs(project_id)
        costs = await self.get_quotation_general_costs(project_id)
        priced = build_quotation_response(quotation, jobs, costs)

        return QuotationExportData(
            project=ExportProject(
                project_id=project.id,
                name=project.name,
                client_name=project.client_name,
                address=project.address,
            ),
            quotation=ExportQuotation(
                quotation_id=quotation.quotation_id,
                status=quotation.status,
                valid_date=quotation.valid_date,
                tax_percentage=quotation.tax_percentage,
            ),
            jobs=priced.jobs,
            costs=priced.costs,
            summary=priced.summary,
        )

    async def update_terms(self, project_id: UUID, changes: Mapping[str, Any]) -> Quotation:
        """Apply term changes to a draft quotation.

        Only keys present in ``changes`` are written; an explicit None clears
        that term. Accepted keys are ``tax_percentage`` and ``valid_date``.
        """
        unknown = set(changes) - TERMS_FIELDS
        if unknown:
            raise ValidationFailed(f"unknown quotation terms: {', '.join(sorted(unknown))}")

        tax_percentage = changes.get("tax_percentage")
        if tax_percentage is not None and not (Decimal("0") <= tax_percentage <= Decimal("100")):
            raise ValidationFailed("tax percentage must be between 0 and 100")

        with storage_errors("update quotation terms"):
            model = await self.session.scalar(
                select(QuotationModel)
                .where(QuotationModel.project_id == project_id)
                .execution_options(populate_existing=True)
            )
            if model is None:
                raise NotFound(f"quotation for project {project_id} not found")
            if model.status != QuotationStatus.DRAFT.value:
                raise PreconditionFailed("approved quotations cannot be changed")

            for field_name, value in changes.items():
                setattr(model, field_name, value)
            await self.session.commit()

        return _to_quotation(model)

    def _insert(self, table):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(table)
        return sqlite.insert(table)


def _to_quotation(model: QuotationModel) -> Quotation:
    return Quotation(
        quotation_id=model.id,
        project_id=model.project_id,
        status=QuotationStatus(model.status),
        valid_date=model.valid_date,
        tax_percentage=model.tax_percentage,
        created_at=model.created_at,
        approved_at=model.approved_at,
    )


def _to_quotation_job(model: BOQJobModel) -> QuotationJob:
    return QuotationJob(
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
