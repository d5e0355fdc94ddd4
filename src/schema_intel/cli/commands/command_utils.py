"""Utility functions shared by schema-intel commands."""

import json
from pathlib import Path

from schema_intel.config import SchemaIntelConfig
from schema_intel.errors import SchemaNotFoundError
from schema_intel.workspace import find_schema_file


def locate_schema(root: Path, config: SchemaIntelConfig) -> Path:
    """Find the schema entry file under root.

    Raises:
        SchemaNotFoundError: If no convex/schema.ts or convex/schema.js exists.
    """
    schema_path = find_schema_file(root, limit=config.max_schema_candidates)
    if schema_path is None:
        raise SchemaNotFoundError(f"No convex/schema.ts found under {root}")
    return schema_path


def load_documents(path: Path) -> list:
    """Read a JSON array of documents.

    Raises:
        ValueError: If the file is missing, not valid JSON, or not an array.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"Could not read {path}: {e}") from e

    try:
        documents = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e

    if not isinstance(documents, list):
        raise ValueError(f"{path} must contain a JSON array of documents")
    return documents


def format_types(types: list[str]) -> str:
    return " | ".join(types) if types else "-"
