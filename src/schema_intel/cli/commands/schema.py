"""Schema commands for schema-intel.

`schema-intel parse` reads the declared schema, `schema-intel infer` derives
one from sampled documents, `schema-intel validate` checks documents against
the declared schema, and `schema-intel graph` prints it as nodes and edges.
"""

from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from schema_intel.cli.app import app, get_config
from schema_intel.cli.commands.command_utils import format_types, load_documents, locate_schema
from schema_intel.errors import SchemaIntelError
from schema_intel.graph import build_schema_graph
from schema_intel.schema import infer_table_schema, parse_schema_file, validate_document
from schema_intel.schema.models import ParseResult, TableSchema
from schema_intel.schemas import InferenceResultModel, ParseResultModel, SchemaGraphModel

console = Console()


def _print_table_schema(table: TableSchema, title: str) -> None:
    table_view = Table(title=title)
    table_view.add_column("Field", style="cyan")
    table_view.add_column("Types")
    table_view.add_column("Optional", justify="right")
    table_view.add_column("Confidence", justify="right")

    for field_stat in table.fields:
        table_view.add_row(
            field_stat.path,
            format_types(field_stat.types),
            f"{field_stat.optional_rate:.0%}",
            f"{field_stat.confidence:.2f}",
        )

    console.print(table_view)


def _print_parse_result(result: ParseResult, schema_path: Path) -> None:
    console.print(f"\n[bold]Schema:[/bold] {schema_path}\n")

    for table in result.tables:
        _print_table_schema(table, title=table.table)

    if result.indexes:
        index_view = Table(title="Indexes")
        index_view.add_column("Table", style="cyan")
        index_view.add_column("Index")
        index_view.add_column("Kind")
        index_view.add_column("Fields")
        for index in result.indexes:
            index_view.add_row(index.table, index.name, index.kind.value, ", ".join(index.fields))
        console.print(index_view)

    if result.relations:
        console.print("\n[bold]Relations:[/bold]")
        for relation in result.relations:
            console.print(
                f"  {relation.from_table}.{relation.from_field_path} -> {relation.to_table} "
                f"({relation.source.value}, {relation.confidence:.1f})"
            )

    console.print(
        f"\nSummary: {len(result.tables)} tables, {len(result.indexes)} indexes, "
        f"{len(result.relations)} relations"
    )


# --- Parse ---


@app.command()
def parse(
    root: Annotated[
        Path,
        typer.Argument(help="Project root to search for convex/schema.ts"),
    ] = Path("."),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """Parse the declared schema of a project.

    Finds convex/schema.ts under ROOT, follows its local imports, and prints
    tables, indexes and relations.
    """
    try:
        config = get_config()
        schema_path = locate_schema(root, config)
        result = parse_schema_file(schema_path, config=config)

        if json_output:
            typer.echo(ParseResultModel.from_dataclass(result).to_json())
            return

        if not result.tables:
            console.print(f"[yellow]No tables found in {schema_path}[/yellow]")
            return

        _print_parse_result(result, schema_path)
    except (SchemaIntelError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.error(f"Error during parse: {e}")
            typer.echo(f"Error during parse: {e}", err=True)
            raise typer.Exit(1)
        raise


# --- Graph ---


@app.command()
def graph(
    root: Annotated[
        Path,
        typer.Argument(help="Project root to search for convex/schema.ts"),
    ] = Path("."),
):
    """Print the schema as a JSON graph: one node per table, one edge per relation."""
    try:
        config = get_config()
        parsed = parse_schema_file(locate_schema(root, config), config=config)
        schema_graph = build_schema_graph(parsed.tables, parsed.indexes, parsed.relations)
        typer.echo(SchemaGraphModel.from_dataclass(schema_graph).to_json())
    except (SchemaIntelError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.error(f"Error during graph: {e}")
            typer.echo(f"Error during graph: {e}", err=True)
            raise typer.Exit(1)
        raise


# --- Infer ---


@app.command()
def infer(
    table: Annotated[str, typer.Argument(help="Table the documents were sampled from")],
    docs_json: Annotated[
        Path,
        typer.Argument(help="JSON file holding an array of sampled documents"),
    ],
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """Infer a table schema from sampled documents.

    Reports every field path with its observed types, how often it is
    missing, and a confidence score. Id-like string fields are listed as
    candidate relations.
    """
    try:
        config = get_config()
        documents = load_documents(docs_json)
        result = infer_table_schema(table, documents, config=config)

        if json_output:
            typer.echo(InferenceResultModel.from_dataclass(result).to_json())
            return

        if result.schema.sampled_docs == 0:
            console.print(f"[yellow]No documents found in {docs_json}[/yellow]")
            return

        console.print(
            f"\n[bold]Analyzed {result.schema.sampled_docs} documents from {table}[/bold]\n"
        )
        _print_table_schema(result.schema, title=f"Inferred schema: {table}")

        if result.relations:
            console.print("\n[bold]Candidate relations:[/bold]")
            for relation in result.relations:
                console.print(
                    f"  {relation.from_field_path} -> {relation.to_table} "
                    f"({relation.confidence:.1f})"
                )
    except (SchemaIntelError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.error(f"Error during infer: {e}")
            typer.echo(f"Error during infer: {e}", err=True)
            raise typer.Exit(1)
        raise


# --- Validate ---


@app.command()
def validate(
    table: Annotated[str, typer.Argument(help="Declared table to validate against")],
    docs_json: Annotated[
        Path,
        typer.Argument(help="JSON file holding an array of documents"),
    ],
    root: Annotated[
        Path,
        typer.Option("--root", help="Project root to search for convex/schema.ts"),
    ] = Path("."),
    strict: bool = typer.Option(False, "--strict", help="Exit with error on any warning"),
):
    """Validate documents against the declared schema of a table.

    Missing required fields and type mismatches are warnings; undeclared
    fields are listed for information. Use --strict to exit with error code 1
    if any document has warnings or errors.
    """
    try:
        config = get_config()
        schema_path = locate_schema(root, config)
        parsed = parse_schema_file(schema_path, config=config)

        # last declaration wins for a table declared twice
        declared = {t.table: t for t in parsed.tables}.get(table)
        if declared is None:
            raise ValueError(f"Table {table} is not declared in {schema_path}")

        documents = load_documents(docs_json)
        results = [
            validate_document(_document_identifier(document, position), declared, document)
            for position, document in enumerate(documents)
        ]

        if not results:
            console.print(f"[yellow]No documents found in {docs_json}[/yellow]")
            return

        table_view = Table(title=f"Validation: {table}")
        table_view.add_column("Document", style="cyan")
        table_view.add_column("Status", justify="center")
        table_view.add_column("Warnings", justify="right")
        table_view.add_column("Unmatched")

        for result in results:
            if result.passed and not result.warnings:
                status = "[green]pass[/green]"
            elif result.passed:
                status = "[yellow]warn[/yellow]"
            else:
                status = "[red]fail[/red]"
            table_view.add_row(
                result.identifier,
                status,
                str(len(result.warnings) + len(result.errors)),
                ", ".join(result.unmatched_fields),
            )

        console.print(table_view)

        for result in results:
            for message in result.errors + result.warnings:
                console.print(f"  {result.identifier}: {message}")

        valid_count = sum(1 for r in results if r.passed and not r.warnings)
        console.print(f"\nSummary: {valid_count}/{len(results)} documents valid")

        if strict and valid_count < len(results):
            raise typer.Exit(1)
    except (SchemaIntelError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.error(f"Error during validate: {e}")
            typer.echo(f"Error during validate: {e}", err=True)
            raise typer.Exit(1)
        raise


def _document_identifier(document, position: int) -> str:
    if isinstance(document, dict) and isinstance(document.get("_id"), str):
        return document["_id"]
    return f"#{position}"