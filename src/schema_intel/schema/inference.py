"""Schema inference engine for Schema Intel.

Derives a table schema from sampled documents instead of declared validators.
Each document is flattened into dot-delimited paths; a nested object records
both its own path (type "object") and every descendant path:

  {"profile": {"name": "Ada"}}  ->  profile: object, profile.name: string

Per path, across all sampled documents:
  - types          distinct JSON-level type tags, in first-seen order
  - optional_rate  1 - present / total
  - confidence     min(present / max(total, 10), 1)

The confidence floor of 10 keeps a field seen in 2 of 2 documents from
claiming full confidence.

Id-like fields (userId, owner_id) holding strings become candidate relations
with confidence 0.6, always below a declared v.id() reference.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from loguru import logger

from schema_intel.config import DEFAULT_CONFIG, SchemaIntelConfig
from schema_intel.schema.models import (
    FieldStat,
    InferenceResult,
    RelationEdge,
    RelationSource,
    TableSchema,
    path_sort_key,
    utc_now,
)


ROOT_PATH = "(root)"
CONFIDENCE_FLOOR = 10
INFERRED_RELATION_CONFIDENCE = 0.6

# Leading fields in output order; everything else is alphabetical.
SYSTEM_FIELD_ORDER = {"_id": 0, "_creationTime": 1}


@dataclass
class _PathStats:
    types: list[str] = field(default_factory=list)
    present_count: int = 0

    def record(self, type_name: str) -> None:
        if type_name not in self.types:
            self.types.append(type_name)
        self.present_count += 1


# --- Inference Logic ---


def infer_table_schema(
    table: str,
    documents: Sequence[Any],
    config: SchemaIntelConfig | None = None,
    inferred_at: datetime | None = None,
) -> InferenceResult:
    """Infer a table schema and candidate relations from sampled documents.

    Args:
        table: The table the documents were sampled from.
        documents: Deserialized documents, normally string-keyed mappings.
        config: Sample and nesting caps; defaults to DEFAULT_CONFIG.
        inferred_at: Timestamp for the schema; defaults to now.

    Returns:
        An InferenceResult. An empty sample produces a schema with no fields.
    """
    config = config or DEFAULT_CONFIG
    inferred_at = inferred_at or utc_now()
    documents = list(documents)

    if len(documents) > config.max_sample_documents:
        logger.debug(
            f"Sample for {table} truncated from {len(documents)} "
            f"to {config.max_sample_documents} documents"
        )
        documents = documents[: config.max_sample_documents]

    total = len(documents)
    if total == 0:
        return InferenceResult(
            schema=TableSchema(table=table, fields=[], sampled_docs=0, inferred_at=inferred_at),
            relations=[],
        )

    path_stats: dict[str, _PathStats] = {}
    for document in documents:
        flatten_document(document, "", path_stats, config.max_flatten_depth)

    fields: list[FieldStat] = []
    relations: list[RelationEdge] = []
    for path, stats in path_stats.items():
        fields.append(
            FieldStat(
                path=path,
                types=list(stats.types),
                optional_rate=(total - stats.present_count) / total,
                sample_count=stats.present_count,
                confidence=min(stats.present_count / max(total, CONFIDENCE_FLOOR), 1),
            )
        )

        if is_id_like_field(path, stats.types):
            target = guess_target_table(path)
            if target is not None:
                relations.append(
                    RelationEdge(
                        from_table=table,
                        from_field_path=path,
                        to_table=target,
                        confidence=INFERRED_RELATION_CONFIDENCE,
                        source=RelationSource.INFERRED,
                    )
                )

    fields.sort(key=_field_order)

    return InferenceResult(
        schema=TableSchema(table=table, fields=fields, sampled_docs=total, inferred_at=inferred_at),
        relations=relations,
    )


def _field_order(field_stat: FieldStat) -> tuple[int, tuple[str, str]]:
    return SYSTEM_FIELD_ORDER.get(field_stat.path, len(SYSTEM_FIELD_ORDER)), path_sort_key(
        field_stat.path
    )


# --- Flattening ---


def type_name(value: Any) -> str | None:
    """JSON-level type tag for a value, or None for values that aren't JSON-like."""
    if value is None:
        return "null"
    # bool before int: True is an int in Python
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return None


def flatten_document(
    document: Any,
    prefix: str,
    result: dict[str, _PathStats],
    max_depth: int,
    _depth: int = 0,
    _expanded: set[int] | None = None,
) -> None:
    """Record every path in a document into result.

    A None document contributes nothing. A document that isn't a mapping is
    recorded under "(root)". Values of non-JSON types are skipped, and
    mappings nested deeper than max_depth are recorded but not descended into.
    Each mapping object is descended into at most once per document, so a
    subtree shared under several keys (or a mapping that contains itself) is
    expanded only under the first path that reaches it.
    """
    if document is None:
        return
    if _expanded is None:
        _expanded = set()

    if not isinstance(document, Mapping):
        tag = type_name(document)
        if tag is not None:
            result.setdefault(prefix or ROOT_PATH, _PathStats()).record(tag)
        return

    _expanded.add(id(document))

    for key, value in document.items():
        tag = type_name(value)
        if tag is None:
            continue

        path = f"{prefix}.{key}" if prefix else str(key)

        if isinstance(value, Mapping) and _depth + 1 < max_depth and id(value) not in _expanded:
            flatten_document(value, path, result, max_depth, _depth + 1, _expanded)

        result.setdefault(path, _PathStats()).record(tag)


# --- Relation heuristics ---


def is_id_like_field(path: str, types: list[str]) -> bool:
    """Last path segment ends in Id or _id (case-sensitive) and a string was observed."""
    leaf = path.split(".")[-1]
    return (leaf.endswith("Id") or leaf.endswith("_id")) and "string" in types


def guess_target_table(path: str) -> str | None:
    """Guess the referenced table: strip the id suffix and pluralize naively.

    ownerId -> owners, team_id -> teams, status -> status. Irregular plurals
    come out wrong (categoryId -> categorys).
    """
    leaf = path.split(".")[-1]
    cleaned = re.sub(r"Id$", "", leaf)
    cleaned = re.sub(r"_id$", "", cleaned)
    cleaned = re.sub(r"^_", "", cleaned)

    if len(cleaned) < 2:
        return None
    if not cleaned.endswith("s"):
        return cleaned + "s"
    return cleaned
