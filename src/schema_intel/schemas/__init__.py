"""Pydantic models for JSON export of schema data."""

from schema_intel.schemas.schema import (
    CamelModel,
    FieldStatModel,
    TableSchemaModel,
    IndexDefinitionModel,
    RelationEdgeModel,
    ParseResultModel,
    InferenceResultModel,
    SchemaSnapshotModel,
    IndexCoverageIssueModel,
    IndexCoverageReport,
    FieldDiffModel,
    TableDiffModel,
    SchemaDriftModel,
    SchemaGraphNodeModel,
    SchemaGraphEdgeModel,
    SchemaGraphModel,
)

__all__ = [
    "CamelModel",
    "FieldStatModel",
    "TableSchemaModel",
    "IndexDefinitionModel",
    "RelationEdgeModel",
    "ParseResultModel",
    "InferenceResultModel",
    "SchemaSnapshotModel",
    "IndexCoverageIssueModel",
    "IndexCoverageReport",
    "FieldDiffModel",
    "TableDiffModel",
    "SchemaDriftModel",
    "SchemaGraphNodeModel",
    "SchemaGraphEdgeModel",
    "SchemaGraphModel",
]
