"""Pytest configuration and fixtures for BOQCalc tests.

Provides common fixtures for testing.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from boqcalc.config import QuotationConfig, reset_config
from boqcalc.db.models import Base, BOQJobModel, BOQModel, GeneralCostModel, ProjectModel
from boqcalc.models import QuotationStatus
from boqcalc.quotation.models import Quotation, QuotationGeneralCost, QuotationJob


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    reset_config()
    yield
    reset_config()


@pytest.fixture
def project_id() -> UUID:
    return uuid4()


@pytest.fixture
def quotation_config() -> QuotationConfig:
    return QuotationConfig(valid_days=30, default_tax_percentage=None)


@pytest.fixture
def draft_quotation(project_id: UUID) -> Quotation:
    return Quotation(
        quotation_id=uuid4(),
        project_id=project_id,
        status=QuotationStatus.DRAFT,
        tax_percentage=Decimal("7"),
    )


@pytest.fixture
def sample_jobs() -> list[QuotationJob]:
    """One fully priced job and one with only labor."""
    return [
        QuotationJob(
            name="Foundation excavation",
            unit="m3",
            quantity=Decimal("1"),
            labor_cost=Decimal("100"),
            total_labor_cost=Decimal("100"),
            estimated_price=Decimal("50"),
            total_estimated_price=Decimal("50"),
            selling_price=Decimal("180"),
            total=Decimal("150"),
        ),
        QuotationJob(
            name="Site cleanup",
            unit="lot",
            quantity=Decimal("1"),
            labor_cost=Decimal("200"),
            total_labor_cost=Decimal("200"),
        ),
    ]


@pytest.fixture
def sample_costs() -> list[QuotationGeneralCost]:
    return [
        QuotationGeneralCost(type_name="Transport", estimated_cost=Decimal("30")),
        QuotationGeneralCost(type_name="Insurance", estimated_cost=None),
    ]


@pytest_asyncio.fixture()
async def db_session() -> AsyncSession:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest_asyncio.fixture()
async def seeded_project(db_session: AsyncSession) -> ProjectModel:
    """Project with an approved BOQ holding two jobs and two general costs."""
    project = ProjectModel(name="Riverside Villa", client_name="Acme Homes", address="12 River Rd")
    db_session.add(project)
    await db_session.flush()

    boq = BOQModel(project_id=project.id, status="approved")
    db_session.add(boq)
    await db_session.flush()

    db_session.add_all(
        [
            BOQJobModel(
                boq_id=boq.id,
                name="Foundation excavation",
                unit="m3",
                quantity=Decimal("1"),
                labor_cost=Decimal("100"),
                total_labor_cost=Decimal("100"),
                estimated_price=Decimal("50"),
                total_estimated_price=Decimal("50"),
                total=Decimal("150"),
            ),
            BOQJobModel(
                boq_id=boq.id,
                name="Site cleanup",
                unit="lot",
                quantity=Decimal("1"),
                labor_cost=Decimal("200"),
                total_labor_cost=Decimal("200"),
            ),
            GeneralCostModel(boq_id=boq.id, type_name="Transport", estimated_cost=Decimal("30")),
            GeneralCostModel(boq_id=boq.id, type_name="Insurance", estimated_cost=None),
        ]
    )
    await db_session.commit()
    return project
