"""Quotation pricing: turns job and general-cost rows into a priced response.

Pure and deterministic; no I/O. Accumulation is exact ``Decimal`` arithmetic
and rounding to cents happens only when the summary is produced.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from boqcalc.models import (
    GeneralCostDetail,
    QuotationJobDetail,
    QuotationResponse,
    QuotationSummary,
)
from boqcalc.quotation.models import Quotation, QuotationGeneralCost, QuotationJob

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places, halves away from zero (10.005 -> 10.01)."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def build_quotation_response(
    quotation: Quotation,
    jobs: Iterable[QuotationJob],
    costs: Iterable[QuotationGeneralCost],
) -> QuotationResponse:
    """Price a quotation from its BOQ jobs and general costs.

    Row material cost shows the per-unit estimated price (0 when unpriced),
    while the material total accumulates ``total_estimated_price`` and skips
    jobs where it is absent. General costs without an estimate are left out
    of both the cost list and the totals.
    """
    job_details: list[QuotationJobDetail] = []
    total_labor_cost = ZERO
    total_material_cost = ZERO

    for job in jobs:
        material_cost = ZERO
        if job.estimated_price is not None:
            material_cost = job.estimated_price

        total_cost = job.total_labor_cost
        if job.total is not None:
            total_cost = job.total

        job_details.append(
            QuotationJobDetail(
                name=job.name,
                unit=job.unit,
                quantity=job.quantity,
                labor_cost=job.labor_cost,
                material_cost=material_cost,
                total_cost=total_cost,
                selling_price=job.selling_price,
            )
        )

        total_labor_cost += job.total_labor_cost
        if job.total_estimated_price is not None:
            total_material_cost += job.total_estimated_price

    cost_details: list[GeneralCostDetail] = []
    total_general_cost = ZERO
    for cost in costs:
        if cost.estimated_cost is None:
            continue
        cost_details.append(
            GeneralCostDetail(type_name=cost.type_name, estimated_cost=cost.estimated_cost)
        )
        total_general_cost += cost.estimated_cost

    subtotal = total_labor_cost + total_material_cost + total_general_cost

    if quotation.tax_percentage is not None:
        tax_percentage = quotation.tax_percentage
    else:
        tax_percentage = ZERO

    tax = subtotal * (tax_percentage / HUNDRED)
    total = subtotal + tax

    return QuotationResponse(
        quotation_id=quotation.quotation_id,
        status=quotation.status,
        valid_date=quotation.valid_date,
        jobs=job_details,
        costs=cost_details,
        summary=QuotationSummary(
            total_labor_cost=round_money(total_labor_cost),
            total_material_cost=round_money(total_material_cost),
            total_general_cost=round_money(total_general_cost),
            subtotal=round_money(subtotal),
            tax=round_money(tax),
            total=round_money(total),
        ),
    )
