"""CLI entry point for the timetable generator."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .constants import OUTPUT_FILE
from .exceptions import TimetableError
from .excel_generator import generate_timetable_excel
from .exporters import get_exporter, load_assignments
from .loader import SchoolDataLoader
from .report import DiagnosticsReport, build_report
from .runner import GenerationRunner
from .scheduler.config import AVAILABLE_SOLVERS, load_engine_config
from .scheduler.models import ScheduleResult
from .views import ViewType

app = typer.Typer(
    name="timetable-generator",
    help="Generate weekly school timetables from CSV data tables",
    add_completion=False,
)
console = Console()

# Shortfall rows printed before truncating
MAX_SHORTFALL_ROWS = 20


def setup_logging(verbose: bool = False) -> None:
    """Route package logs through Rich. Safe to call more than once."""
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=logging.WARNING,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        )
    logging.getLogger("timetable_generator").setLevel(level)


def _print_result(result: ScheduleResult) -> None:
    stats = result.statistics

    overview = Table(title="Overview", show_header=False)
    overview.add_column("Metric", style="cyan")
    overview.add_column("Value", style="green")
    overview.add_row("Solver", stats.solver)
    overview.add_row("Seed", "-" if result.seed is None else str(result.seed))
    overview.add_row("Tasks", str(stats.total_tasks))
    overview.add_row("Merged Tasks", str(stats.merged_tasks))
    overview.add_row("Occurrences Placed", str(stats.occurrences_placed))
    overview.add_row("Occurrences Unplaced", str(stats.occurrences_unplaced))
    overview.add_row("Periods Unplaced", str(result.total_unplaced_periods))
    overview.add_row("Placement Rate", f"{stats.placement_rate:.1%}")
    overview.add_row("Rows Written", str(result.total_assigned))
    console.print(overview)

    if stats.by_day:
        day_table = Table(title="Rows by Day")
        day_table.add_column("Day", style="cyan")
        day_table.add_column("Rows", style="green")
        for day, count in stats.by_day.items():
            day_table.add_row(day, str(count))
        console.print(day_table)


def _print_report(report: DiagnosticsReport) -> None:
    summary = Table(title="Diagnostics", show_header=False)
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", style="green")
    summary.add_row("Expected Periods", str(report.expected_periods))
    summary.add_row("Placed Periods", str(report.placed_periods))
    summary.add_row("Missing Periods", str(report.missing_periods))
    summary.add_row("Output Rows", str(report.total_rows))
    console.print(summary)

    if report.is_complete:
        console.print("[bold green]✓ Every registered period was placed[/bold green]")
        return

    shortfalls = Table(title=f"Shortfalls ({len(report.shortfalls)})")
    shortfalls.add_column("Group", style="cyan")
    shortfalls.add_column("Subject", style="blue")
    shortfalls.add_column("Name", max_width=40)
    shortfalls.add_column("Missing", style="red")
    for item in report.shortfalls[:MAX_SHORTFALL_ROWS]:
        shortfalls.add_row(
            item.group_id, item.subject_id, item.subject_name[:40], str(item.count)
        )
    if len(report.shortfalls) > MAX_SHORTFALL_ROWS:
        shortfalls.add_row("...", "...", "...", "...")
    console.print(shortfalls)


@app.command()
def generate(
    data_dir: Annotated[
        Path,
        typer.Argument(help="Directory holding the input CSV tables", exists=True, file_okay=False),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output CSV path (default: DATA_DIR/output.csv)"),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Engine configuration JSON file"),
    ] = None,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", help="Seed for day ordering"),
    ] = None,
    no_shuffle: Annotated[
        bool,
        typer.Option("--no-shuffle", help="Search days in fixed Mon-Fri order"),
    ] = False,
    solver: Annotated[
        Optional[str],
        typer.Option("--solver", help=f"Placement strategy: {', '.join(AVAILABLE_SOLVERS)}"),
    ] = None,
    json_output: Annotated[
        Optional[Path],
        typer.Option("--json", help="Also export the full result as JSON"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show debug logging"),
    ] = False,
) -> None:
    """Generate a timetable and overwrite the output table."""
    setup_logging(verbose)

    try:
        engine_config = load_engine_config(config).with_overrides(
            seed=seed,
            solver=solver,
            shuffle_days=False if no_shuffle else None,
        )
        runner = GenerationRunner(data_dir, engine_config, output)

        with console.status("[bold green]Generating timetable..."):
            outcome = runner.generate()
    except TimetableError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"\n[bold]Timetable for:[/bold] {data_dir}")
    _print_result(outcome.result)
    _print_report(outcome.report)

    if json_output:
        json_path = json_output if json_output.suffix == ".json" else json_output.with_suffix(".json")
        get_exporter("json").export(outcome.result, json_path)
        console.print(f"[bold green]✓[/bold green] JSON exported to: {json_path}")

    console.print(f"\n[bold green]✓[/bold green] Timetable written to: {outcome.output_path}")


@app.command()
def report(
    data_dir: Annotated[
        Path,
        typer.Argument(help="Directory holding the input CSV tables", exists=True, file_okay=False),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output CSV to check (default: DATA_DIR/output.csv)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show debug logging"),
    ] = False,
) -> None:
    """Compare an existing output table with the registered load."""
    setup_logging(verbose)

    output_path = output or data_dir / OUTPUT_FILE
    if not output_path.exists():
        console.print(f"[bold red]Error:[/bold red] Output file not found: {output_path}")
        raise typer.Exit(1)

    with console.status("[bold green]Loading data..."):
        data = SchoolDataLoader(data_dir).load()
        assignments = load_assignments(output_path)

    console.print(f"\n[bold]Diagnostics for:[/bold] {output_path}")
    _print_report(build_report(data, assignments))


@app.command("export-excel")
def export_excel(
    data_dir: Annotated[
        Path,
        typer.Argument(help="Directory holding the input CSV tables", exists=True, file_okay=False),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Workbook path (default: DATA_DIR/timetable_<view>.xlsx)"),
    ] = None,
    view: Annotated[
        ViewType,
        typer.Option("--view", help="Whose timetables to render"),
    ] = ViewType.GROUP,
    selected_id: Annotated[
        Optional[str],
        typer.Option("--id", help="Only render this group, teacher or room"),
    ] = None,
    assignments_file: Annotated[
        Optional[Path],
        typer.Option("--assignments", help="Output CSV to render (default: DATA_DIR/output.csv)"),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Engine configuration JSON file"),
    ] = None,
) -> None:
    """Render per-group, per-teacher or per-room timetables to Excel."""
    setup_logging()

    assignments_path = assignments_file or data_dir / OUTPUT_FILE
    if not assignments_path.exists():
        console.print(f"[bold red]Error:[/bold red] Output file not found: {assignments_path}")
        raise typer.Exit(1)

    try:
        engine_config = load_engine_config(config)
    except TimetableError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    workbook_path = output or data_dir / f"timetable_{view.value}.xlsx"
    if not workbook_path.suffix:
        workbook_path = workbook_path.with_suffix(".xlsx")

    with console.status("[bold green]Generating Excel file..."):
        data = SchoolDataLoader(data_dir).load()
        assignments = load_assignments(assignments_path)
        generate_timetable_excel(
            data,
            assignments,
            workbook_path,
            view=view,
            selected_id=selected_id,
            lunch_period=engine_config.lunch_period,
        )

    console.print(f"[bold green]✓[/bold green] {view.value.capitalize()} timetables exported to: {workbook_path}")


if __name__ == "__main__":
    app()
