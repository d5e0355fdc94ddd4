"""Pydantic models for the schema system.

These mirror the dataclass structures in schema_intel.schema but are Pydantic
models suitable for JSON export. Field names serialize in camelCase
(optionalRate, fromSnapshotId, ...); either spelling is accepted on input.
The snapshot store writes SchemaSnapshotModel, and the CLI prints these
models for --json output.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from schema_intel.graph import SchemaGraph
from schema_intel.schema.models import (
    FieldChange,
    FieldDiff,
    FieldStat,
    IndexCoverageIssue,
    IndexDefinition,
    IndexKind,
    InferenceResult,
    ParseResult,
    RelationEdge,
    RelationSource,
    SchemaDrift,
    SchemaSnapshot,
    Severity,
    TableChange,
    TableDiff,
    TableSchema,
)


class CamelModel(BaseModel):
    """Base model serializing field names in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self, indent: int | None = 2) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)


# --- Schema Models ---


class FieldStatModel(CamelModel):
    """Statistics for a single field of a table."""

    path: str = Field(description="Dot-delimited path for nested fields")
    types: list[str] = Field(default_factory=list)
    optional_rate: float = Field(ge=0, le=1, description="Share of documents missing the field")
    sample_count: int = Field(default=0, ge=0)
    confidence: float = Field(default=1.0, ge=0, le=1)

    @classmethod
    def from_dataclass(cls, field_stat: FieldStat) -> "FieldStatModel":
        return cls(
            path=field_stat.path,
            types=list(field_stat.types),
            optional_rate=field_stat.optional_rate,
            sample_count=field_stat.sample_count,
            confidence=field_stat.confidence,
        )

    def to_dataclass(self) -> FieldStat:
        return FieldStat(
            path=self.path,
            types=list(self.types),
            optional_rate=self.optional_rate,
            sample_count=self.sample_count,
            confidence=self.confidence,
        )


class TableSchemaModel(CamelModel):
    table: str
    fields: list[FieldStatModel] = Field(default_factory=list)
    sampled_docs: int = Field(default=0, ge=0)
    inferred_at: datetime

    @classmethod
    def from_dataclass(cls, table: TableSchema) -> "TableSchemaModel":
        return cls(
            table=table.table,
            fields=[FieldStatModel.from_dataclass(f) for f in table.fields],
            sampled_docs=table.sampled_docs,
            inferred_at=table.inferred_at,
        )

    def to_dataclass(self) -> TableSchema:
        return TableSchema(
            table=self.table,
            fields=[f.to_dataclass() for f in self.fields],
            sampled_docs=self.sampled_docs,
            inferred_at=self.inferred_at,
        )


class IndexDefinitionModel(CamelModel):
    table: str
    name: str
    fields: list[str] = Field(default_factory=list)
    kind: IndexKind = IndexKind.BY_FIELD

    @classmethod
    def from_dataclass(cls, index: IndexDefinition) -> "IndexDefinitionModel":
        return cls(table=index.table, name=index.name, fields=list(index.fields), kind=index.kind)

    def to_dataclass(self) -> IndexDefinition:
        return IndexDefinition(
            table=self.table, name=self.name, fields=list(self.fields), kind=self.kind
        )


class RelationEdgeModel(CamelModel):
    from_table: str
    from_field_path: str
    to_table: str
    confidence: float = Field(ge=0, le=1)
    source: RelationSource = RelationSource.INFERRED

    @classmethod
    def from_dataclass(cls, relation: RelationEdge) -> "RelationEdgeModel":
        return cls(
            from_table=relation.from_table,
            from_field_path=relation.from_field_path,
            to_table=relation.to_table,
            confidence=relation.confidence,
            source=relation.source,
        )

    def to_dataclass(self) -> RelationEdge:
        return RelationEdge(
            from_table=self.from_table,
            from_field_path=self.from_field_path,
            to_table=self.to_table,
            confidence=self.confidence,
            source=self.source,
        )


class ParseResultModel(CamelModel):
    """Tables, indexes, and relations extracted from schema source."""

    tables: list[TableSchemaModel] = Field(default_factory=list)
    indexes: list[IndexDefinitionModel] = Field(default_factory=list)
    relations: list[RelationEdgeModel] = Field(default_factory=list)

    @classmethod
    def from_dataclass(cls, result: ParseResult) -> "ParseResultModel":
        return cls(
            tables=[TableSchemaModel.from_dataclass(t) for t in result.tables],
            indexes=[IndexDefinitionModel.from_dataclass(i) for i in result.indexes],
            relations=[RelationEdgeModel.from_dataclass(r) for r in result.relations],
        )


class InferenceResultModel(CamelModel):
    """A schema inferred from sampled documents, with candidate relations."""

    schema_: TableSchemaModel = Field(alias="schema")
    relations: list[RelationEdgeModel] = Field(default_factory=list)

    @classmethod
    def from_dataclass(cls, result: InferenceResult) -> "InferenceResultModel":
        return cls(
            schema_=TableSchemaModel.from_dataclass(result.schema),
            relations=[RelationEdgeModel.from_dataclass(r) for r in result.relations],
        )


# --- Snapshot Models ---


class SchemaSnapshotModel(CamelModel):
    """On-disk and JSON form of a schema snapshot."""

    id: str
    deployment_id: str
    created_at: datetime
    tables: list[TableSchemaModel] = Field(default_factory=list)
    relations: list[RelationEdgeModel] = Field(default_factory=list)

    @classmethod
    def from_dataclass(cls, snapshot: SchemaSnapshot) -> "SchemaSnapshotModel":
        return cls(
            id=snapshot.id,
            deployment_id=snapshot.deployment_id,
            created_at=snapshot.created_at,
            tables=[TableSchemaModel.from_dataclass(t) for t in snapshot.tables],
            relations=[RelationEdgeModel.from_dataclass(r) for r in snapshot.relations],
        )

    def to_dataclass(self) -> SchemaSnapshot:
        return SchemaSnapshot(
            id=self.id,
            deployment_id=self.deployment_id,
            created_at=self.created_at,
            tables=tuple(t.to_dataclass() for t in self.tables),
            relations=tuple(r.to_dataclass() for r in self.relations),
        )


# --- Index Coverage Models ---


class IndexCoverageIssueModel(CamelModel):
    function_path: str = Field(description="<file>:<line> of the query chain")
    table: str
    severity: Severity
    message: str
    suggested_index: str | None = None

    @classmethod
    def from_dataclass(cls, issue: IndexCoverageIssue) -> "IndexCoverageIssueModel":
        return cls(
            function_path=issue.function_path,
            table=issue.table,
            severity=issue.severity,
            message=issue.message,
            suggested_index=issue.suggested_index,
        )


class IndexCoverageReport(CamelModel):
    """All index coverage issues found in a workspace."""

    files_scanned: int = 0
    issues: list[IndexCoverageIssueModel] = Field(default_factory=list)


# --- Drift Models ---


class FieldDiffModel(CamelModel):
    path: str
    change: FieldChange
    old_types: list[str] | None = None
    new_types: list[str] | None = None


class TableDiffModel(CamelModel):
    table: str
    change: TableChange
    field_diffs: list[FieldDiffModel] = Field(default_factory=list)


class SchemaDriftModel(CamelModel):
    """Structural difference between two snapshots."""

    from_snapshot_id: str
    to_snapshot_id: str
    table_diffs: list[TableDiffModel] = Field(default_factory=list)
    summary: str = ""

    @classmethod
    def from_dataclass(cls, drift: SchemaDrift) -> "SchemaDriftModel":
        return cls(
            from_snapshot_id=drift.from_snapshot_id,
            to_snapshot_id=drift.to_snapshot_id,
            table_diffs=[_table_diff_model(d) for d in drift.table_diffs],
            summary=drift.summary,
        )


def _table_diff_model(table_diff: TableDiff) -> TableDiffModel:
    return TableDiffModel(
        table=table_diff.table,
        change=table_diff.change,
        field_diffs=[_field_diff_model(d) for d in table_diff.field_diffs],
    )


def _field_diff_model(field_diff: FieldDiff) -> FieldDiffModel:
    return FieldDiffModel(
        path=field_diff.path,
        change=field_diff.change,
        old_types=list(field_diff.old_types) if field_diff.old_types is not None else None,
        new_types=list(field_diff.new_types) if field_diff.new_types is not None else None,
    )


# --- Graph Models ---


class SchemaGraphNodeModel(CamelModel):
    id: str
    table: str
    fields: list[FieldStatModel] = Field(default_factory=list)
    index_count: int = Field(default=0, ge=0)


class SchemaGraphEdgeModel(CamelModel):
    id: str
    source: str
    target: str
    source_field: str
    confidence: float = Field(ge=0, le=1)
    label: str | None = None


class SchemaGraphModel(CamelModel):
    """Node/edge view of a schema for graph renderers."""

    nodes: list[SchemaGraphNodeModel] = Field(default_factory=list)
    edges: list[SchemaGraphEdgeModel] = Field(default_factory=list)

    @classmethod
    def from_dataclass(cls, graph: SchemaGraph) -> "SchemaGraphModel":
        return cls(
            nodes=[
                SchemaGraphNodeModel(
                    id=node.id,
                    table=node.table,
                    fields=[FieldStatModel.from_dataclass(f) for f in node.fields],
                    index_count=node.index_count,
                )
                for node in graph.nodes
            ],
            edges=[
                SchemaGraphEdgeModel(
                    id=edge.id,
                    source=edge.source,
                    target=edge.target,
                    source_field=edge.source_field,
                    confidence=edge.confidence,
                    label=edge.label,
                )
                for edge in graph.edges
            ],
        )
