"""Index coverage command for schema-intel."""

from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from schema_intel.cli.app import app, get_config
from schema_intel.cli.commands.command_utils import locate_schema
from schema_intel.errors import SchemaIntelError
from schema_intel.indexes import analyze_index_coverage
from schema_intel.schema import parse_schema_file
from schema_intel.schema.models import Severity
from schema_intel.schemas import IndexCoverageIssueModel, IndexCoverageReport
from schema_intel.workspace import find_query_files, load_query_sources

console = Console()

SEVERITY_STYLES = {
    Severity.HIGH: "[red]high[/red]",
    Severity.MEDIUM: "[yellow]medium[/yellow]",
    Severity.LOW: "[dim]low[/dim]",
}


@app.command()
def indexes(
    root: Annotated[
        Path,
        typer.Argument(help="Project root containing convex/"),
    ] = Path("."),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    fail_on_high: bool = typer.Option(
        False, "--fail-on-high", help="Exit with error code 1 if any high severity issue is found"
    ),
):
    """Check query chains against the indexes declared in the schema.

    Scans every source file under a convex/ directory for ctx.db.query(...)
    chains and reports full table scans, in-memory filters, and references to
    undefined indexes.
    """
    try:
        config = get_config()
        schema_path = locate_schema(root, config)
        parsed = parse_schema_file(schema_path, config=config)

        query_files = find_query_files(root, limit=config.max_query_files)
        sources = load_query_sources(query_files, root=root)
        issues = analyze_index_coverage(sources, parsed.indexes, config=config)

        if json_output:
            report = IndexCoverageReport(
                files_scanned=len(sources),
                issues=[IndexCoverageIssueModel.from_dataclass(issue) for issue in issues],
            )
            typer.echo(report.to_json())
        elif not issues:
            console.print(
                f"[green]No index coverage issues in {len(sources)} query files.[/green]"
            )
        else:
            table_view = Table(title="Index Coverage")
            table_view.add_column("Severity", justify="center")
            table_view.add_column("Location", style="cyan")
            table_view.add_column("Table")
            table_view.add_column("Issue")
            table_view.add_column("Suggestion")

            for issue in issues:
                table_view.add_row(
                    SEVERITY_STYLES[issue.severity],
                    issue.function_path,
                    issue.table,
                    issue.message,
                    issue.suggested_index or "",
                )

            console.print(table_view)
            counts = {severity: 0 for severity in Severity}
            for issue in issues:
                counts[issue.severity] += 1
            console.print(
                f"\nSummary: {counts[Severity.HIGH]} high, {counts[Severity.MEDIUM]} medium, "
                f"{counts[Severity.LOW]} low in {len(sources)} query files"
            )

        if fail_on_high and any(issue.severity == Severity.HIGH for issue in issues):
            raise typer.Exit(1)
    except (SchemaIntelError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.error(f"Error during index analysis: {e}")
            typer.echo(f"Error during index analysis: {e}", err=True)
            raise typer.Exit(1)
        raise
