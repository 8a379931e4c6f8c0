"""BOQCalc CLI.

Commands:
- init: Initialize database schema
- quotation show: Create-or-get and print a project's quotation
- quotation approve: Approve a project's quotation
- quotation export: Export an approved quotation to CSV
- web serve: Run the HTTP API
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

from boqcalc.config import get_config
from boqcalc.core.logging import configure_logging
from boqcalc.db.connection import close_db, get_session, init_db
from boqcalc.errors import BOQCalcError
from boqcalc.models import QuotationResponse
from boqcalc.quotation.repository import QuotationRepository
from boqcalc.quotation.service import QuotationService
from boqcalc.reporting.csv_export import export_quotation_csv, quotation_csv_filename

app = typer.Typer(
    name="boqcalc",
    help="BOQCalc - bill of quantities and quotation workflow",
    no_args_is_help=True,
)
quotation_cli = typer.Typer(help="Quotation workflow")
app.add_typer(quotation_cli, name="quotation")

web_cli = typer.Typer(help="HTTP API")
app.add_typer(web_cli, name="web")

console = Console()


def _run(coro):
    """Run a coroutine, printing business errors instead of a traceback."""

    async def _wrapped():
        configure_logging(get_config())
        try:
            return await coro
        finally:
            await close_db()

    try:
        return asyncio.run(_wrapped())
    except BOQCalcError as exc:
        console.print(f"[bold red]✗[/bold red] {exc}")
        raise typer.Exit(code=1) from exc


@app.command()
def init(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables"),
):
    """Initialize database schema."""
    config = get_config()
    console.print(f"[bold]Initializing database:[/bold] {config.db.url}")
    if drop:
        console.print("[yellow]Dropping existing tables...[/yellow]")

    _run(init_db(drop=drop))
    console.print("[bold green]✓[/bold green] Database initialized")


@quotation_cli.command("show")
def quotation_show(project_id: UUID = typer.Argument(..., help="Project UUID")):
    """Create-or-get the project's quotation and print it."""

    async def _show() -> QuotationResponse:
        async with get_session() as session:
            service = QuotationService(QuotationRepository(session))
            return await service.create_or_get_quotation(project_id)

    response = _run(_show())
    _print_quotation(response)


@quotation_cli.command("approve")
def quotation_approve(project_id: UUID = typer.Argument(..., help="Project UUID")):
    """Approve the project's draft quotation."""

    async def _approve() -> None:
        async with get_session() as session:
            service = QuotationService(QuotationRepository(session))
            await service.approve_quotation(project_id)

    _run(_approve())
    console.print(f"[bold green]✓[/bold green] Quotation approved for project {project_id}")


@quotation_cli.command("export")
def quotation_export(
    project_id: UUID = typer.Argument(..., help="Project UUID"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output CSV file"),
):
    """Export an approved quotation to CSV."""

    async def _export():
        async with get_session() as session:
            service = QuotationService(QuotationRepository(session))
            return await service.export_quotation(project_id)

    data = _run(_export())
    target = output or Path(quotation_csv_filename(data))
    with target.open("w", newline="", encoding="utf-8") as fh:
        for chunk in export_quotation_csv(data):
            fh.write(chunk)

    console.print(f"[bold green]✓[/bold green] Exported quotation to {target}")


@web_cli.command("serve")
def web_serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind"),
    port: int = typer.Option(8004, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload (dev only)"),
):
    """Run the FastAPI application."""
    import uvicorn

    typer.echo(f"Starting BOQCalc API on http://{host}:{port}")
    uvicorn.run("boqcalc.web.app:app", host=host, port=port, reload=reload, workers=1)


def _print_quotation(response: QuotationResponse) -> None:
    valid = response.valid_date.isoformat() if response.valid_date else "-"
    console.print(
        f"[bold]Quotation[/bold] {response.quotation_id}  "
        f"status=[cyan]{response.status.value}[/cyan]  valid until {valid}"
    )

    jobs = Table(title="Jobs")
    for column in ("Job", "Unit", "Qty", "Labor", "Material", "Total", "Selling"):
        jobs.add_column(column, justify="left" if column in ("Job", "Unit") else "right")
    for job in response.jobs:
        jobs.add_row(
            job.name,
            job.unit,
            str(job.quantity),
            str(job.labor_cost),
            str(job.material_cost),
            str(job.total_cost),
            str(job.selling_price) if job.selling_price is not None else "-",
        )
    console.print(jobs)

    if response.costs:
        costs = Table(title="General Costs")
        costs.add_column("Type")
        costs.add_column("Estimated", justify="right")
        for cost in response.costs:
            costs.add_row(cost.type_name, str(cost.estimated_cost))
        console.print(costs)

    summary = response.summary
    totals = Table(title="Summary", show_header=False)
    totals.add_column("Field")
    totals.add_column("Amount", justify="right")
    totals.add_row("Labor", str(summary.total_labor_cost))
    totals.add_row("Material", str(summary.total_material_cost))
    totals.add_row("General", str(summary.total_general_cost))
    totals.add_row("Subtotal", str(summary.subtotal))
    totals.add_row("Tax", str(summary.tax))
    totals.add_row("[bold]Total[/bold]", f"[bold]{summary.total}[/bold]")
    console.print(totals)


if __name__ == "__main__":
    app()
