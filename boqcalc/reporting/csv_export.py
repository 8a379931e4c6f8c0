"""CSV export for approved quotations.

Produces one section each for the quotation header, job rows, general costs
and the summary, streamed row by row.
"""

from __future__ import annotations

import csv
from collections.abc import Iterator
from io import StringIO

from boqcalc.models import QuotationExportData


def quotation_csv_filename(data: QuotationExportData) -> str:
    return f"quotation-{data.quotation.quotation_id}.csv"


def export_quotation_csv(data: QuotationExportData) -> Iterator[str]:
    """Generate CSV stream for an export bundle.

    Yields:
        CSV rows as strings
    """
    output = StringIO()
    writer = csv.writer(output)

    def flush() -> str:
        chunk = output.getvalue()
        output.seek(0)
        output.truncate(0)
        return chunk

    quotation = data.quotation
    writer.writerow(["Project", data.project.name])
    writer.writerow(["Client", data.project.client_name or "-"])
    writer.writerow(["Address", data.project.address or "-"])
    writer.writerow(["Quotation", str(quotation.quotation_id)])
    writer.writerow(["Status", quotation.status.value])
    writer.writerow(["Valid Until", quotation.valid_date.isoformat() if quotation.valid_date else "-"])
    writer.writerow(
        ["Tax %", quotation.tax_percentage if quotation.tax_percentage is not None else "-"]
    )
    writer.writerow([])
    yield flush()

    writer.writerow(
        ["Job", "Unit", "Quantity", "Labor Cost", "Material Cost", "Total Cost", "Selling Price"]
    )
    yield flush()
    for job in data.jobs:
        writer.writerow(
            [
                job.name,
                job.unit,
                job.quantity,
                job.labor_cost,
                job.material_cost,
                job.total_cost,
                job.selling_price if job.selling_price is not None else "-",
            ]
        )
        yield flush()

    writer.writerow([])
    writer.writerow(["General Cost", "Estimated Cost"])
    yield flush()
    for cost in data.costs:
        writer.writerow([cost.type_name, cost.estimated_cost])
        yield flush()

    summary = data.summary
    writer.writerow([])
    writer.writerow(["Total Labor Cost", summary.total_labor_cost])
    writer.writerow(["Total Material Cost", summary.total_material_cost])
    writer.writerow(["Total General Cost", summary.total_general_cost])
    writer.writerow(["Subtotal", summary.subtotal])
    writer.writerow(["Tax", summary.tax])
    writer.writerow(["Total", summary.total])
    yield flush()
