"""Quotation workflow: create-or-get, approve and export.

Sequences status gates, lazy creation, pricing and approval for one project
at a time. Repository calls are awaited one after another; each later step
depends on the result of the earlier one.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

import structlog

from boqcalc.errors import BOQCalcError, NotFound, PreconditionFailed, with_context
from boqcalc.models import BOQStatus, QuotationExportData, QuotationResponse, QuotationStatus
from boqcalc.quotation.aggregator import build_quotation_response
from boqcalc.quotation.repository import QuotationStore

logger = structlog.get_logger(__name__)


class QuotationService:
    """Orchestrates quotation lifecycle over a :class:`QuotationStore`."""

    def __init__(self, repository: QuotationStore):
        self.repository = repository

    async def create_or_get_quotation(self, project_id: UUID) -> QuotationResponse:
        """Return the priced quotation, creating the draft on first request.

        Raises:
            PreconditionFailed: If the project's BOQ is not approved
        """
        boq_status = await self.repository.check_boq_status(project_id)
        if boq_status is not BOQStatus.APPROVED:
            raise PreconditionFailed("BOQ must be approved before creating quotation")

        quotation = await self.repository.get_by_project_id(project_id)
        if quotation is None:
            quotation = await self.repository.create(project_id)
            logger.info(
                "quotation_created",
                project_id=str(project_id),
                quotation_id=str(quotation.quotation_id),
            )

        jobs = await self.repository.get_quotation_jobs(project_id)
        costs = await self.repository.get_quotation_general_costs(project_id)

        return build_quotation_response(quotation, jobs, costs)

    async def approve_quotation(self, project_id: UUID) -> None:
        """Approve the project's draft quotation.

        All preconditions are checked by ``validate_approval`` and its error is
        raised unchanged. The status write is the commit point. The re-read
        afterwards only confirms the quotation still prices and is not
        returned; callers read the approved quotation via
        ``create_or_get_quotation``.
        """
        await self.repository.validate_approval(project_id)
        await self.repository.approve_quotation(project_id)

        try:
            quotation = await self.repository.get_by_project_id(project_id)
        except BOQCalcError as err:
            raise with_context(err, "failed to get updated quotation") from err
        if quotation is None:
            raise NotFound("failed to get updated quotation: quotation not found")

        try:
            jobs = await self.repository.get_quotation_jobs(project_id)
        except BOQCalcError as err:
            raise with_context(err, "failed to get quotation jobs") from err

        try:
            costs = await self.repository.get_quotation_general_costs(project_id)
        except BOQCalcError as err:
            raise with_context(err, "failed to get quotation costs") from err

        confirmed = build_quotation_response(quotation, jobs, costs)
        logger.info(
            "quotation_approved",
            project_id=str(project_id),
            quotation_id=str(confirmed.quotation_id),
            total=str(confirmed.summary.total),
        )

    async def export_quotation(self, project_id: UUID) -> QuotationExportData:
        """Return the export bundle once both BOQ and quotation are approved."""
        boq_status = await self.repository.check_boq_status(project_id)
        if boq_status is not BOQStatus.APPROVED:
            raise PreconditionFailed("BOQ must be approved before exporting quotation")

        quotation_status = await self.repository.get_quotation_status(project_id)
        if quotation_status is not QuotationStatus.APPROVED:
            raise PreconditionFailed("only approved quotations can be exported")

        export_data = await self.repository.get_export_data(project_id)
        logger.info("quotation_exported", project_id=str(project_id))
        return export_data

    async def update_quotation_terms(
        self, project_id: UUID, changes: Mapping[str, Any]
    ) -> QuotationResponse:
        """Change tax percentage and/or validity date of a draft quotation.

        Terms missing from ``changes`` keep their stored value.
        """
        quotation = await self.repository.update_terms(project_id, changes)
        jobs = await self.repository.get_quotation_jobs(project_id)
        costs = await self.repository.get_quotation_general_costs(project_id)
        return build_quotation_response(quotation, jobs, costs)
