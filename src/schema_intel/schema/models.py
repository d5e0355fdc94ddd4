"""Data model shared by the parser, inference engine, index analyzer and drift differ.

All types are plain value objects. The parser and the inference engine both
produce TableSchema/RelationEdge values, so a schema parsed from source and a
schema inferred from sampled documents can be snapshotted and diffed the same
way.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class IndexKind(str, Enum):
    BY_FIELD = "by_field"
    SEARCH = "search"
    VECTOR = "vector"


class RelationSource(str, Enum):
    INFERRED = "inferred"
    MANUAL = "manual"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return SEVERITY_RANK[self]


SEVERITY_RANK = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}


class TableChange(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class FieldChange(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    TYPE_CHANGED = "type_changed"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# --- Schema ---


@dataclass
class FieldStat:
    """Statistics for a single (possibly nested) field of a table.

    `types` behaves as a set but keeps first-seen order for stable output.
    """

    path: str  # dot-delimited for nested fields
    types: list[str]
    optional_rate: float  # 1 - present/total when sampled; 1 or 0 when declared
    sample_count: int = 0
    confidence: float = 1.0


@dataclass
class TableSchema:
    """All known fields of one table."""

    table: str
    fields: list[FieldStat] = field(default_factory=list)
    sampled_docs: int = 0
    inferred_at: datetime = field(default_factory=utc_now)

    def get_field(self, path: str) -> FieldStat | None:
        for field_stat in self.fields:
            if field_stat.path == path:
                return field_stat
        return None


@dataclass
class IndexDefinition:
    table: str
    name: str  # unique within the table
    fields: list[str]
    kind: IndexKind = IndexKind.BY_FIELD


@dataclass
class RelationEdge:
    """A directed foreign-key-like link. Several edges may share endpoints."""

    from_table: str
    from_field_path: str
    to_table: str
    confidence: float
    source: RelationSource = RelationSource.INFERRED


@dataclass(frozen=True)
class SchemaSnapshot:
    """A point-in-time capture of a full schema. Never edited once created."""

    id: str
    deployment_id: str
    created_at: datetime
    tables: tuple[TableSchema, ...] = ()
    relations: tuple[RelationEdge, ...] = ()


# --- Analysis results ---


@dataclass
class ParseResult:
    """Everything extracted from schema definition sources."""

    tables: list[TableSchema] = field(default_factory=list)
    indexes: list[IndexDefinition] = field(default_factory=list)
    relations: list[RelationEdge] = field(default_factory=list)

    def extend(self, other: "ParseResult") -> None:
        self.tables.extend(other.tables)
        self.indexes.extend(other.indexes)
        self.relations.extend(other.relations)


@dataclass
class InferenceResult:
    """Schema and relation candidates inferred from sampled documents."""

    schema: TableSchema
    relations: list[RelationEdge] = field(default_factory=list)


@dataclass
class IndexCoverageIssue:
    function_path: str  # "<file>:<line>"
    table: str
    severity: Severity
    message: str
    suggested_index: str | None = None


# --- Drift ---


@dataclass
class FieldDiff:
    path: str
    change: FieldChange
    old_types: list[str] | None = None
    new_types: list[str] | None = None


@dataclass
class TableDiff:
    table: str
    change: TableChange
    field_diffs: list[FieldDiff] = field(default_factory=list)


@dataclass
class SchemaDrift:
    """Structural difference between two snapshots."""

    from_snapshot_id: str
    to_snapshot_id: str
    table_diffs: list[TableDiff] = field(default_factory=list)
    summary: str = ""


def path_sort_key(path: str) -> tuple[str, str]:
    """Alphabetical ordering for field paths and table names.

    Case-folded first so "assignee" and "Assignee" sit together, then the raw
    value so the order is total.
    """
    return path.casefold(), path
