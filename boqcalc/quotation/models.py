"""Rows read from storage and consumed by the quotation aggregator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from boqcalc.models import QuotationStatus


@dataclass(slots=True)
class Quotation:
    quotation_id: UUID
    project_id: UUID
    status: QuotationStatus
    valid_date: date | None = None
    tax_percentage: Decimal | None = None  # None means "not set", not 0%
    created_at: datetime | None = None
    approved_at: datetime | None = None


@dataclass(slots=True)
class QuotationJob:
    """BOQ job as seen by the quotation.

    ``labor_cost``/``estimated_price`` are per-unit rates shown on the row;
    ``total_labor_cost``/``total_estimated_price`` are the line amounts that
    feed the summary.
    """

    name: str
    unit: str
    quantity: Decimal
    labor_cost: Decimal
    total_labor_cost: Decimal
    estimated_price: Decimal | None = None
    total_estimated_price: Decimal | None = None
    selling_price: Decimal | None = None
    total: Decimal | None = None
    job_id: UUID | None = None


@dataclass(slots=True)
class QuotationGeneralCost:
    type_name: str
    estimated_cost: Decimal | None = None
