"""Schema system for Schema Intel.

Derives table schemas from schema.ts source and from sampled documents, and
compares snapshots of them. The model types are shared, so parsed and
inferred schemas diff the same way.
"""

from schema_intel.schema.models import (
    FieldStat,
    TableSchema,
    IndexDefinition,
    IndexKind,
    RelationEdge,
    RelationSource,
    SchemaSnapshot,
    ParseResult,
    InferenceResult,
    IndexCoverageIssue,
    Severity,
    FieldDiff,
    TableDiff,
    SchemaDrift,
    FieldChange,
    TableChange,
)
from schema_intel.schema.parser import (
    FieldRequirement,
    SourceCache,
    SourceResolver,
    parse_schema,
    parse_schema_file,
    parse_source,
    optionality_map,
)
from schema_intel.schema.resolver import resolve_validator
from schema_intel.schema.inference import infer_table_schema
from schema_intel.schema.validator import (
    FieldResult,
    ValidationResult,
    validate_document,
)
from schema_intel.schema.diff import diff_snapshots

__all__ = [
    # Models
    "FieldStat",
    "TableSchema",
    "IndexDefinition",
    "IndexKind",
    "RelationEdge",
    "RelationSource",
    "SchemaSnapshot",
    "ParseResult",
    "InferenceResult",
    "IndexCoverageIssue",
    "Severity",
    "FieldDiff",
    "TableDiff",
    "SchemaDrift",
    "FieldChange",
    "TableChange",
    # Parser
    "FieldRequirement",
    "SourceCache",
    "SourceResolver",
    "parse_schema",
    "parse_schema_file",
    "parse_source",
    "optionality_map",
    # Resolver
    "resolve_validator",
    # Inference
    "infer_table_schema",
    # Validator
    "FieldResult",
    "ValidationResult",
    "validate_document",
    # Diff
    "diff_snapshots",
]
