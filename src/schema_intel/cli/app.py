from typing import Optional

import typer

from schema_intel.config import SchemaIntelConfig
from schema_intel.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        import schema_intel

        typer.echo(f"Schema Intel version: {schema_intel.__version__}")
        raise typer.Exit()


def get_config() -> SchemaIntelConfig:
    """Settings for the current command, read fresh from the environment."""
    return SchemaIntelConfig()


app = typer.Typer(name="schema-intel", no_args_is_help=True)


@app.callback()
def app_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR). Defaults to SCHEMA_INTEL_LOG_LEVEL.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Schema Intel - schema, index and drift analysis for Convex projects."""
    setup_logging(log_level or get_config().log_level)
