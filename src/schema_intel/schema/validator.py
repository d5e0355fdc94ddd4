"""Document validator for Schema Intel.

Checks a single document against a declared table schema. Declared type names
map to the JSON-level type tags produced by inference:

  Declared Type        -> Accepted Tags
  -----------------------------------------------
  string / number / boolean / null / array / object
                       -> the same tag
  Id<projects>         -> string
  "todo" (literal)     -> string
  union, any, custom, unknown
                       -> anything

Validation is soft. Missing fields and type mismatches are warnings, and
undeclared keys are informational. Only a document that isn't an object at
all fails validation.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field as dataclass_field
from typing import Any

from schema_intel.schema.inference import type_name
from schema_intel.schema.models import FieldStat, TableSchema


SYSTEM_FIELDS = ("_id", "_creationTime")

DIRECT_TAGS = {"string", "number", "boolean", "null", "array", "object"}


# --- Result Data Model ---


@dataclass
class FieldResult:
    """Validation result for a single declared field."""

    field: FieldStat
    status: str  # "present" | "missing" | "absent_optional" | "type_mismatch"
    observed_type: str | None = None
    message: str | None = None


@dataclass
class ValidationResult:
    """Complete validation result for one document against a table schema."""

    identifier: str
    table: str
    passed: bool  # True if no errors (warnings are OK)
    field_results: list[FieldResult] = dataclass_field(default_factory=list)
    unmatched_fields: list[str] = dataclass_field(default_factory=list)
    warnings: list[str] = dataclass_field(default_factory=list)
    errors: list[str] = dataclass_field(default_factory=list)


# --- Validation Logic ---


def validate_document(identifier: str, schema: TableSchema, document: Any) -> ValidationResult:
    """Validate a document against a declared table schema.

    Only top-level fields are checked; nested paths in the schema are skipped.

    Args:
        identifier: The document id or any label used for reporting.
        schema: The table schema, normally from the schema parser.
        document: The deserialized document.

    Returns:
        A ValidationResult with per-field results, unmatched keys, and warnings/errors.
    """
    result = ValidationResult(identifier=identifier, table=schema.table, passed=True)

    if not isinstance(document, Mapping):
        result.passed = False
        result.errors.append(
            f"Document {identifier} is not an object (got {type_name(document) or type(document).__name__})"
        )
        return result

    declared: set[str] = set()

    for field_stat in schema.fields:
        if "." in field_stat.path:
            continue
        declared.add(field_stat.path)

        field_result = _validate_field(field_stat, document)
        result.field_results.append(field_result)

        # --- Generate warnings ---
        # Trigger: a required field is absent or holds a value of the wrong type
        # Outcome: warning only; the document still passes
        if field_result.status in ("missing", "type_mismatch") and field_result.message:
            result.warnings.append(field_result.message)

    # --- Collect unmatched keys ---
    for key in document:
        key = str(key)
        if key not in declared and key not in SYSTEM_FIELDS:
            result.unmatched_fields.append(key)

    return result


def _validate_field(field_stat: FieldStat, document: Mapping) -> FieldResult:
    if field_stat.path not in document:
        if field_stat.path in SYSTEM_FIELDS:
            return FieldResult(field=field_stat, status="absent_optional")
        if field_stat.optional_rate < 1:
            return FieldResult(
                field=field_stat,
                status="missing",
                message=f"Missing required field: {field_stat.path}",
            )
        return FieldResult(field=field_stat, status="absent_optional")

    observed = type_name(document[field_stat.path])
    if field_stat.path in SYSTEM_FIELDS or accepts(field_stat.types, observed):
        return FieldResult(field=field_stat, status="present", observed_type=observed)

    expected = " | ".join(field_stat.types)
    return FieldResult(
        field=field_stat,
        status="type_mismatch",
        observed_type=observed,
        message=f"Field '{field_stat.path}' expected {expected}, got {observed or 'unsupported value'}",
    )


# --- Type Acceptance ---


def accepted_tags(declared_type: str) -> set[str] | None:
    """Type tags a declared type accepts, or None if it accepts anything."""
    if declared_type in DIRECT_TAGS:
        return {declared_type}
    if declared_type.startswith("Id<") and declared_type.endswith(">"):
        return {"string"}
    if len(declared_type) >= 2 and declared_type.startswith('"') and declared_type.endswith('"'):
        return {"string"}
    return None


def accepts(declared_types: list[str], observed: str | None) -> bool:
    """Whether any of the declared types accepts the observed tag."""
    if not declared_types:
        return True
    for declared_type in declared_types:
        tags = accepted_tags(declared_type)
        if tags is None or observed in tags:
            return True
    return False
