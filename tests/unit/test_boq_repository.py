"""Tests for BOQRepository draft editing and approval."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from boqcalc.boq.repository import BOQRepository
from boqcalc.db.models import ProjectModel
from boqcalc.errors import NotFound, PreconditionFailed, ValidationFailed
from boqcalc.models import BOQJobRequest, BOQStatus


@pytest.fixture
def repository(db_session: AsyncSession) -> BOQRepository:
    return BOQRepository(db_session)


@pytest_asyncio.fixture()
async def project(db_session: AsyncSession) -> ProjectModel:
    project = ProjectModel(name="Harbour Offices")
    db_session.add(project)
    await db_session.commit()
    return project


def _job(**overrides) -> BOQJobRequest:
    fields = {
        "name": "Concrete slab pour",
        "unit": "m3",
        "quantity": Decimal("2.5"),
        "labor_cost": Decimal("100"),
        "estimated_price": Decimal("40"),
    }
    fields.update(overrides)
    return BOQJobRequest(**fields)


@pytest.mark.asyncio
async def test_get_or_create_creates_draft_once(repository, project):
    first = await repository.get_or_create(project.id)
    second = await repository.get_or_create(project.id)

    assert first.boq_id == second.boq_id
    assert first.status is BOQStatus.DRAFT
    assert first.is_editable


@pytest.mark.asyncio
async def test_get_or_create_unknown_project(repository):
    with pytest.raises(NotFound):
        await repository.get_or_create(uuid4())


@pytest.mark.asyncio
async def test_get_by_project_id_absent(repository, project):
    assert await repository.get_by_project_id(project.id) is None


@pytest.mark.asyncio
async def test_add_job_derives_line_totals(repository, project):
    job = await repository.add_job(project.id, _job())

    assert job.total_labor_cost == Decimal("250")
    assert job.total_estimated_price == Decimal("100")
    assert job.total == Decimal("350")


@pytest.mark.asyncio
async def test_add_job_without_price_leaves_totals_unset(repository, project):
    job = await repository.add_job(project.id, _job(estimated_price=None))

    assert job.total_labor_cost == Decimal("250")
    assert job.total_estimated_price is None
    assert job.total is None


@pytest.mark.asyncio
async def test_update_job_recomputes_totals(repository, project):
    job = await repository.add_job(project.id, _job())

    updated = await repository.update_job(
        project.id, job.job_id, _job(quantity=Decimal("1"), estimated_price=None)
    )

    assert updated.job_id == job.job_id
    assert updated.total_labor_cost == Decimal("100")
    assert updated.total_estimated_price is None
    assert updated.total is None


@pytest.mark.asyncio
async def test_update_unknown_job(repository, project):
    await repository.get_or_create(project.id)

    with pytest.raises(NotFound):
        await repository.update_job(project.id, uuid4(), _job())


@pytest.mark.asyncio
async def test_delete_job(repository, project):
    job = await repository.add_job(project.id, _job())

    await repository.delete_job(project.id, job.job_id)

    detail = await repository.get_boq_with_project(project.id)
    assert detail.jobs == []


@pytest.mark.asyncio
async def test_set_general_cost_upserts(repository, project):
    await repository.set_general_cost(project.id, "Transport", Decimal("30"))
    entry = await repository.set_general_cost(project.id, "Transport", Decimal("45"))
    await repository.set_general_cost(project.id, "Insurance", None)

    assert entry.estimated_cost == Decimal("45")
    detail = await repository.get_boq_with_project(project.id)
    assert [(c.type_name, c.estimated_cost) for c in detail.general_costs] == [
        ("Insurance", None),
        ("Transport", Decimal("45")),
    ]


@pytest.mark.asyncio
async def test_get_boq_with_project(repository, project):
    await repository.add_job(project.id, _job())

    detail = await repository.get_boq_with_project(project.id)

    assert detail.project_id == project.id
    assert detail.project_name == "Harbour Offices"
    assert detail.status is BOQStatus.DRAFT
    assert [job.name for job in detail.jobs] == ["Concrete slab pour"]


@pytest.mark.asyncio
async def test_get_boq_with_project_unknown(repository):
    with pytest.raises(NotFound):
        await repository.get_boq_with_project(uuid4())


class TestApprove:
    @pytest.mark.asyncio
    async def test_approves_boq_with_jobs(self, repository, project):
        await repository.add_job(project.id, _job())

        boq = await repository.approve(project.id)

        assert boq.status is BOQStatus.APPROVED
        assert boq.approved_at is not None
        assert not boq.is_editable

    @pytest.mark.asyncio
    async def test_empty_boq_cannot_be_approved(self, repository, project):
        await repository.get_or_create(project.id)

        with pytest.raises(ValidationFailed):
            await repository.approve(project.id)

    @pytest.mark.asyncio
    async def test_already_approved(self, repository, project):
        await repository.add_job(project.id, _job())
        await repository.approve(project.id)

        with pytest.raises(PreconditionFailed):
            await repository.approve(project.id)

    @pytest.mark.asyncio
    async def test_missing_boq(self, repository, project):
        with pytest.raises(NotFound):
            await repository.approve(project.id)

    @pytest.mark.asyncio
    async def test_approved_boq_is_frozen(self, repository, project):
        job = await repository.add_job(project.id, _job())
        await repository.approve(project.id)

        with pytest.raises(PreconditionFailed):
            await repository.add_job(project.id, _job(name="Late addition"))
        with pytest.raises(PreconditionFailed):
            await repository.update_job(project.id, job.job_id, _job())
        with pytest.raises(PreconditionFailed):
            await repository.delete_job(project.id, job.job_id)
        with pytest.raises(PreconditionFailed):
            await repository.set_general_cost(project.id, "Transport", Decimal("10"))
