"""BOQCalc Pydantic models for type-safe data validation.

Request payloads accepted by the API and the value objects it returns.
Optional money fields stay ``None`` when a value has not been priced yet;
they are never defaulted to zero here.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class BOQStatus(str, Enum):
    """Approval state of a project's bill of quantities."""

    DRAFT = "draft"
    APPROVED = "approved"


class QuotationStatus(str, Enum):
    """Approval state of a project's quotation."""

    DRAFT = "draft"
    APPROVED = "approved"


# ============================================================================
# Quotation output contract
# ============================================================================


class QuotationJobDetail(BaseModel):
    """One priced job row on a quotation."""

    name: str
    unit: str
    quantity: Decimal
    labor_cost: Decimal
    material_cost: Decimal
    total_cost: Decimal
    selling_price: Decimal | None = None


class GeneralCostDetail(BaseModel):
    """One estimated overhead row on a quotation."""

    type_name: str
    estimated_cost: Decimal


class QuotationSummary(BaseModel):
    """Totals derived from jobs and general costs, rounded to 2 places."""

    total_labor_cost: Decimal
    total_material_cost: Decimal
    total_general_cost: Decimal
    subtotal: Decimal
    tax: Decimal
    total: Decimal


class QuotationResponse(BaseModel):
    """Priced quotation as returned to callers."""

    quotation_id: UUID
    status: QuotationStatus
    valid_date: date | None = None
    jobs: list[QuotationJobDetail] = Field(default_factory=list)
    costs: list[GeneralCostDetail] = Field(default_factory=list)
    summary: QuotationSummary


class ExportProject(BaseModel):
    project_id: UUID
    name: str
    client_name: str | None = None
    address: str | None = None


class ExportQuotation(BaseModel):
    quotation_id: UUID
    status: QuotationStatus
    valid_date: date | None = None
    tax_percentage: Decimal | None = None


class QuotationExportData(BaseModel):
    """Denormalised bundle handed to document/CSV exporters."""

    project: ExportProject
    quotation: ExportQuotation
    jobs: list[QuotationJobDetail]
    costs: list[GeneralCostDetail]
    summary: QuotationSummary


# ============================================================================
# BOQ models
# ============================================================================


class BOQJobRequest(BaseModel):
    """Create/update payload for a BOQ job line."""

    name: str = Field(min_length=1)
    unit: str = Field(min_length=1)
    quantity: Decimal = Field(gt=0)
    labor_cost: Decimal = Field(ge=0)
    estimated_price: Decimal | None = Field(default=None, ge=0)
    selling_price: Decimal | None = Field(default=None, ge=0)

    @field_validator("name", "unit")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Concrete slab pour",
                "unit": "m3",
                "quantity": Decimal("12.5"),
                "labor_cost": Decimal("850.00"),
                "estimated_price": Decimal("2400.00"),
                "selling_price": Decimal("3900.00"),
            }
        }


class GeneralCostRequest(BaseModel):
    """Upsert payload for a general cost category on a BOQ."""

    type_name: str = Field(min_length=1)
    estimated_cost: Decimal | None = Field(default=None, ge=0)


class BOQJobDetail(BaseModel):
    job_id: UUID
    name: str
    unit: str
    quantity: Decimal
    labor_cost: Decimal
    total_labor_cost: Decimal
    estimated_price: Decimal | None = None
    total_estimated_price: Decimal | None = None
    selling_price: Decimal | None = None
    total: Decimal | None = None


class GeneralCostEntry(BaseModel):
    type_name: str
    estimated_cost: Decimal | None = None


class BOQDetail(BaseModel):
    """BOQ together with its project header, jobs and general costs."""

    boq_id: UUID
    project_id: UUID
    project_name: str
    status: BOQStatus
    jobs: list[BOQJobDetail] = Field(default_factory=list)
    general_costs: list[GeneralCostEntry] = Field(default_factory=list)


# ============================================================================
# Quotation & supplier requests
# ============================================================================


class QuotationTermsRequest(BaseModel):
    """Editable commercial terms of a draft quotation."""

    tax_percentage: Decimal | None = Field(default=None, ge=0, le=100)
    valid_date: date | None = None


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1)
    client_name: str | None = None
    address: str | None = None


class SupplierCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    tel: str | None = None
    address: str | None = None

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v


class SupplierUpdate(SupplierCreate):
    pass


class Supplier(BaseModel):
    supplier_id: UUID
    name: str
    email: str
    tel: str | None = None
    address: str | None = None
