"""Tests for QuotationService workflow gates and error propagation."""

from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from boqcalc.errors import (
    NotFound,
    PreconditionFailed,
    TransientIOFailure,
    ValidationFailed,
)
from boqcalc.models import (
    BOQStatus,
    ExportProject,
    ExportQuotation,
    QuotationExportData,
    QuotationStatus,
    QuotationSummary,
)
from boqcalc.quotation.models import Quotation, QuotationGeneralCost, QuotationJob
from boqcalc.quotation.service import QuotationService


class InMemoryQuotationStore:
    """Quotation store backed by dicts, recording which operations ran."""

    def __init__(
        self,
        boq_status: BOQStatus | None = BOQStatus.APPROVED,
        jobs: list[QuotationJob] | None = None,
        costs: list[QuotationGeneralCost] | None = None,
    ):
        self.boq_status = boq_status
        self.jobs = jobs or []
        self.costs = costs or []
        self.quotations: dict[UUID, Quotation] = {}
        self.calls: list[str] = []
        self.failures: dict[str, Exception] = {}
        self.validate_error: Exception | None = None

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        failure = self.failures.get(name)
        if failure is not None:
            raise failure

    async def check_boq_status(self, project_id):
        self._enter("check_boq_status")
        return self.boq_status

    async def get_by_project_id(self, project_id):
        self._enter("get_by_project_id")
        return self.quotations.get(project_id)

    async def create(self, project_id):
        self._enter("create")
        quotation = self.quotations.setdefault(
            project_id,
            Quotation(
                quotation_id=uuid4(),
                project_id=project_id,
                status=QuotationStatus.DRAFT,
                valid_date=date(2099, 1, 1),
            ),
        )
        return quotation

    async def get_quotation_jobs(self, project_id):
        self._enter("get_quotation_jobs")
        return list(self.jobs)

    async def get_quotation_general_costs(self, project_id):
        self._enter("get_quotation_general_costs")
        return list(self.costs)

    async def validate_approval(self, project_id):
        self._enter("validate_approval")
        if self.validate_error is not None:
            raise self.validate_error

    async def approve_quotation(self, project_id):
        self._enter("approve_quotation")
        self.quotations[project_id].status = QuotationStatus.APPROVED

    async def get_quotation_status(self, project_id):
        self._enter("get_quotation_status")
        quotation = self.quotations.get(project_id)
        return quotation.status if quotation is not None else None

    async def get_export_data(self, project_id):
        self._enter("get_export_data")
        quotation = self.quotations[project_id]
        zero = Decimal("0.00")
        return QuotationExportData(
            project=ExportProject(project_id=project_id, name="Riverside Villa"),
            quotation=ExportQuotation(
                quotation_id=quotation.quotation_id, status=quotation.status
            ),
            jobs=[],
            costs=[],
            summary=QuotationSummary(
                total_labor_cost=zero,
                total_material_cost=zero,
                total_general_cost=zero,
                subtotal=zero,
                tax=zero,
                total=zero,
            ),
        )

    async def update_terms(self, project_id, changes):
        self._enter("update_terms")
        quotation = self.quotations[project_id]
        for field_name, value in changes.items():
            setattr(quotation, field_name, value)
        return quotation


@pytest.fixture
def store(sample_jobs, sample_costs) -> InMemoryQuotationStore:
    return InMemoryQuotationStore(jobs=sample_jobs, costs=sample_costs)


@pytest.fixture
def service(store) -> QuotationService:
    return QuotationService(store)


class TestCreateOrGetQuotation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("boq_status", [BOQStatus.DRAFT, None])
    async def test_requires_approved_boq(self, store, service, project_id, boq_status):
        store.boq_status = boq_status

        with pytest.raises(PreconditionFailed, match="BOQ must be approved before creating quotation"):
            await service.create_or_get_quotation(project_id)

        assert "create" not in store.calls
        assert store.quotations == {}

    @pytest.mark.asyncio
    async def test_creates_draft_on_first_request(self, store, service, project_id):
        response = await service.create_or_get_quotation(project_id)

        assert store.calls.count("create") == 1
        assert response.status == QuotationStatus.DRAFT
        assert response.quotation_id == store.quotations[project_id].quotation_id
        assert response.summary.subtotal == Decimal("380")

    @pytest.mark.asyncio
    async def test_second_request_reuses_quotation(self, store, service, project_id):
        first = await service.create_or_get_quotation(project_id)
        second = await service.create_or_get_quotation(project_id)

        assert first.quotation_id == second.quotation_id
        assert store.calls.count("create") == 1
        assert first == second

    @pytest.mark.asyncio
    async def test_storage_failure_propagates(self, store, service, project_id):
        store.failures["get_quotation_jobs"] = TransientIOFailure("failed to get quotation jobs")

        with pytest.raises(TransientIOFailure):
            await service.create_or_get_quotation(project_id)


class TestApproveQuotation:
    @pytest.mark.asyncio
    async def test_approves_and_returns_nothing(self, store, service, project_id):
        await service.create_or_get_quotation(project_id)

        result = await service.approve_quotation(project_id)

        assert result is None
        assert store.quotations[project_id].status is QuotationStatus.APPROVED
        assert store.calls[-5:] == [
            "validate_approval",
            "approve_quotation",
            "get_by_project_id",
            "get_quotation_jobs",
            "get_quotation_general_costs",
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            PreconditionFailed("only draft quotations can be approved"),
            NotFound("quotation not found"),
            ValidationFailed("quotation must contain at least one job"),
        ],
    )
    async def test_validation_error_is_raised_unchanged(self, store, service, project_id, error):
        store.validate_error = error

        with pytest.raises(type(error)) as exc_info:
            await service.approve_quotation(project_id)

        assert exc_info.value is error
        assert "approve_quotation" not in store.calls

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("failing_call", "context"),
        [
            ("get_by_project_id", "failed to get updated quotation"),
            ("get_quotation_jobs", "failed to get quotation jobs"),
            ("get_quotation_general_costs", "failed to get quotation costs"),
        ],
    )
    async def test_confirmation_failure_keeps_approval(
        self, store, service, project_id, failing_call, context
    ):
        await service.create_or_get_quotation(project_id)
        cause = TransientIOFailure("connection reset")
        store.failures[failing_call] = cause

        with pytest.raises(TransientIOFailure) as exc_info:
            await service.approve_quotation(project_id)

        assert str(exc_info.value) == f"{context}: connection reset"
        assert exc_info.value.__cause__ is cause
        assert store.quotations[project_id].status is QuotationStatus.APPROVED

    @pytest.mark.asyncio
    async def test_missing_quotation_after_approval(self, store, service, project_id):
        async def vanish(pid):
            store.calls.append("get_by_project_id")
            return None

        await service.create_or_get_quotation(project_id)
        store.get_by_project_id = vanish

        with pytest.raises(NotFound, match="failed to get updated quotation"):
            await service.approve_quotation(project_id)

    @pytest.mark.asyncio
    async def test_cancellation_is_not_wrapped(self, store, service, project_id):
        await service.create_or_get_quotation(project_id)
        store.failures["get_quotation_jobs"] = asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await service.approve_quotation(project_id)


class TestExportQuotation:
    @pytest.mark.asyncio
    async def test_requires_approved_boq(self, store, service, project_id):
        store.boq_status = BOQStatus.DRAFT

        with pytest.raises(PreconditionFailed, match="BOQ must be approved before exporting quotation"):
            await service.export_quotation(project_id)

        assert "get_export_data" not in store.calls

    @pytest.mark.asyncio
    async def test_draft_quotation_cannot_be_exported(self, store, service, project_id):
        await service.create_or_get_quotation(project_id)

        with pytest.raises(PreconditionFailed, match="only approved quotations can be exported"):
            await service.export_quotation(project_id)

    @pytest.mark.asyncio
    async def test_missing_quotation_cannot_be_exported(self, store, service, project_id):
        with pytest.raises(PreconditionFailed, match="only approved quotations can be exported"):
            await service.export_quotation(project_id)

    @pytest.mark.asyncio
    async def test_exports_approved_quotation(self, store, service, project_id):
        await service.create_or_get_quotation(project_id)
        await service.approve_quotation(project_id)

        data = await service.export_quotation(project_id)

        assert data.project.project_id == project_id
        assert data.quotation.status == QuotationStatus.APPROVED
        assert store.calls[-1] == "get_export_data"


class TestUpdateQuotationTerms:
    @pytest.mark.asyncio
    async def test_reprices_with_new_tax(self, store, service, project_id):
        await service.create_or_get_quotation(project_id)

        response = await service.update_quotation_terms(
            project_id, {"tax_percentage": Decimal("10"), "valid_date": date(2099, 6, 30)}
        )

        assert response.valid_date == date(2099, 6, 30)
        assert response.summary.tax == Decimal("38.00")
        assert response.summary.total == Decimal("418.00")

    @pytest.mark.asyncio
    async def test_passes_only_sent_terms(self, store, service, project_id):
        await service.create_or_get_quotation(project_id)

        response = await service.update_quotation_terms(
            project_id, {"tax_percentage": Decimal("10")}
        )

        assert response.valid_date == date(2099, 1, 1)
        assert response.summary.tax == Decimal("38.00")
