"""Snapshot and drift commands for schema-intel.

`schema-intel snapshot` captures the parsed schema, `schema-intel snapshots`
lists what has been captured, and `schema-intel diff` compares two captures.
Snapshots live in SCHEMA_INTEL_SNAPSHOT_DIR (default ~/.schema-intel/snapshots).
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from schema_intel.cli.app import app, get_config
from schema_intel.cli.commands.command_utils import format_types, locate_schema
from schema_intel.errors import SchemaIntelError
from schema_intel.schema import diff_snapshots, parse_schema_file
from schema_intel.schema.models import FieldChange, TableChange
from schema_intel.schemas import SchemaDriftModel
from schema_intel.snapshots import SnapshotStore, create_snapshot

console = Console()

TABLE_CHANGE_MARKERS = {
    TableChange.ADDED: "[green]+[/green]",
    TableChange.REMOVED: "[red]-[/red]",
    TableChange.MODIFIED: "[yellow]~[/yellow]",
}

FIELD_CHANGE_MARKERS = {
    FieldChange.ADDED: "[green]+[/green]",
    FieldChange.REMOVED: "[red]-[/red]",
    FieldChange.TYPE_CHANGED: "[yellow]~[/yellow]",
}


def get_store() -> SnapshotStore:
    return SnapshotStore(get_config().snapshot_dir)


# --- Snapshot ---


@app.command()
def snapshot(
    root: Annotated[
        Path,
        typer.Argument(help="Project root to search for convex/schema.ts"),
    ] = Path("."),
    deployment: str = typer.Option(..., "--deployment", "-d", help="Deployment the schema belongs to"),
):
    """Parse the schema and save it as a new snapshot."""
    try:
        config = get_config()
        schema_path = locate_schema(root, config)
        parsed = parse_schema_file(schema_path, config=config)

        captured = create_snapshot(deployment, parsed.tables, parsed.relations)
        path = get_store().save(captured)
        logger.info(f"Snapshot {captured.id} written to {path}")

        console.print(
            f"[green]Saved snapshot {captured.id}[/green] "
            f"({len(captured.tables)} tables, {len(captured.relations)} relations)"
        )
    except (SchemaIntelError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.error(f"Error during snapshot: {e}")
            typer.echo(f"Error during snapshot: {e}", err=True)
            raise typer.Exit(1)
        raise


# --- Snapshots ---


@app.command()
def snapshots(
    deployment: Optional[str] = typer.Option(
        None, "--deployment", "-d", help="Only list snapshots of this deployment"
    ),
):
    """List saved snapshots, newest first."""
    try:
        saved = get_store().list(deployment)
        if not saved:
            console.print("[yellow]No snapshots found.[/yellow]")
            return

        table_view = Table(title="Snapshots")
        table_view.add_column("ID", style="cyan", no_wrap=True)
        table_view.add_column("Deployment")
        table_view.add_column("Created")
        table_view.add_column("Tables", justify="right")

        for item in saved:
            table_view.add_row(
                item.id,
                item.deployment_id,
                item.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                str(len(item.tables)),
            )

        console.print(table_view)
    except (SchemaIntelError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


# --- Diff ---


@app.command()
def diff(
    from_id: Annotated[str, typer.Argument(help="Snapshot id to diff from")],
    to_id: Annotated[str, typer.Argument(help="Snapshot id to diff to")],
    json_output: bool = typer.Option(False, "--json", help="Print the drift as JSON"),
):
    """Show schema drift between two saved snapshots."""
    try:
        store = get_store()
        drift = diff_snapshots(store.require(from_id), store.require(to_id))

        if json_output:
            typer.echo(SchemaDriftModel.from_dataclass(drift).to_json())
            return

        if not drift.table_diffs:
            console.print(f"[green]{drift.summary}[/green]")
            return

        console.print(f"\n[bold]Schema drift {from_id} -> {to_id}:[/bold]\n")
        for table_diff in drift.table_diffs:
            console.print(
                f"{TABLE_CHANGE_MARKERS[table_diff.change]} {table_diff.table} "
                f"({table_diff.change.value})"
            )
            for field_diff in table_diff.field_diffs:
                marker = FIELD_CHANGE_MARKERS[field_diff.change]
                if field_diff.change == FieldChange.TYPE_CHANGED:
                    detail = (
                        f"{format_types(field_diff.old_types or [])} -> "
                        f"{format_types(field_diff.new_types or [])}"
                    )
                else:
                    detail = format_types(field_diff.new_types or field_diff.old_types or [])
                console.print(f"    {marker} {field_diff.path}: {detail}")

        console.print(f"\n{drift.summary}")
    except (SchemaIntelError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.error(f"Error during diff: {e}")
            typer.echo(f"Error during diff: {e}", err=True)
            raise typer.Exit(1)
        raise
