"""Main CLI entry point for schema-intel."""  # pragma: no cover

from schema_intel.cli.app import app  # pragma: no cover

# Register commands
from schema_intel.cli.commands import (  # noqa: F401  # pragma: no cover
    indexes,
    schema,
    snapshot,
)

if __name__ == "__main__":  # pragma: no cover
    # start the app
    app()
