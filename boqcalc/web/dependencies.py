"""Shared dependencies for BOQCalc web routes.

Dependencies are injected using FastAPI's Depends() system; tests replace
them through ``app.dependency_overrides``.

Usage:
    from fastapi import Depends
    from boqcalc.web.dependencies import get_quotation_service

    @router.get("/quotation")
    async def show(service: QuotationService = Depends(get_quotation_service)):
        ...
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from boqcalc.boq.repository import BOQRepository
from boqcalc.db.connection import get_db
from boqcalc.quotation.repository import QuotationRepository
from boqcalc.quotation.service import QuotationService
from boqcalc.suppliers.repository import SupplierRepository


def get_quotation_service(session: AsyncSession = Depends(get_db)) -> QuotationService:
    """Quotation workflow bound to the request's session."""
    return QuotationService(QuotationRepository(session))


def get_boq_repository(session: AsyncSession = Depends(get_db)) -> BOQRepository:
    return BOQRepository(session)


def get_supplier_repository(session: AsyncSession = Depends(get_db)) -> SupplierRepository:
    return SupplierRepository(session)
