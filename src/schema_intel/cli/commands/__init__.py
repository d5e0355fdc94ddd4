"""CLI commands for schema-intel."""

from . import schema, indexes, snapshot

__all__ = [
    "schema",
    "indexes",
    "snapshot",
]
