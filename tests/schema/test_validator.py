"""Tests for schema_intel.schema.validator -- document validation against a declared schema."""

import pytest

from schema_intel.schema.models import FieldStat, TableSchema
from schema_intel.schema.validator import accepted_tags, accepts, validate_document


# --- Helpers ---


def _field(path: str, types: list[str], optional: bool = False) -> FieldStat:
    return FieldStat(path=path, types=types, optional_rate=1.0 if optional else 0.0)


def _make_schema(fields: list[FieldStat], table: str = "tasks") -> TableSchema:
    return TableSchema(table=table, fields=fields)


@pytest.fixture
def tasks_schema() -> TableSchema:
    return _make_schema(
        [
            _field("title", ["string"]),
            _field("projectId", ["Id<projects>"]),
            _field("status", ["union"]),
            _field("done", ["boolean"]),
            _field("dueDate", ["number"], optional=True),
        ]
    )


# --- Passing documents ---


class TestValidDocuments:
    def test_complete_document(self, tasks_schema):
        document = {
            "_id": "k1",
            "_creationTime": 1700000000000.0,
            "title": "Ship it",
            "projectId": "p1",
            "status": "todo",
            "done": False,
            "dueDate": 1700000000000,
        }
        result = validate_document("k1", tasks_schema, document)
        assert result.passed is True
        assert result.warnings == []
        assert result.errors == []
        assert result.unmatched_fields == []
        assert all(r.status == "present" for r in result.field_results)

    def test_optional_field_may_be_absent(self, tasks_schema):
        document = {"title": "a", "projectId": "p1", "status": "todo", "done": True}
        result = validate_document("k2", tasks_schema, document)
        assert result.warnings == []
        due_date = [r for r in result.field_results if r.field.path == "dueDate"][0]
        assert due_date.status == "absent_optional"

    def test_identifier_and_table_reported(self, tasks_schema):
        result = validate_document("doc-7", tasks_schema, {})
        assert result.identifier == "doc-7"
        assert result.table == "tasks"


# --- Warnings ---


class TestMissingFields:
    def test_missing_required_field_is_warning(self, tasks_schema):
        document = {"projectId": "p1", "status": "todo", "done": True}
        result = validate_document("k1", tasks_schema, document)
        assert result.passed is True
        assert result.warnings == ["Missing required field: title"]
        title = [r for r in result.field_results if r.field.path == "title"][0]
        assert title.status == "missing"


class TestTypeMismatch:
    def test_wrong_type(self, tasks_schema):
        document = {"title": 5, "projectId": "p1", "status": "todo", "done": True}
        result = validate_document("k1", tasks_schema, document)
        assert result.passed is True
        assert len(result.warnings) == 1
        assert "title" in result.warnings[0]
        title = [r for r in result.field_results if r.field.path == "title"][0]
        assert title.status == "type_mismatch"
        assert title.observed_type == "number"

    def test_id_requires_string(self, tasks_schema):
        document = {"title": "a", "projectId": 12, "status": "todo", "done": True}
        result = validate_document("k1", tasks_schema, document)
        assert any("projectId" in w for w in result.warnings)

    def test_union_accepts_anything(self, tasks_schema):
        document = {"title": "a", "projectId": "p", "status": 3, "done": True}
        result = validate_document("k1", tasks_schema, document)
        assert result.warnings == []


# --- Unmatched ---


class TestUnmatchedFields:
    def test_undeclared_keys_reported(self, tasks_schema):
        document = {"title": "a", "projectId": "p", "status": "x", "done": True, "extra": 1}
        result = validate_document("k1", tasks_schema, document)
        assert result.unmatched_fields == ["extra"]
        assert result.warnings == []

    def test_system_fields_never_unmatched(self):
        result = validate_document("k1", _make_schema([]), {"_id": "a", "_creationTime": 1.0})
        assert result.unmatched_fields == []


# --- Never raises ---


class TestNonObjectDocuments:
    @pytest.mark.parametrize("document", [None, "text", 3, ["a"]])
    def test_non_object_fails_without_raising(self, tasks_schema, document):
        result = validate_document("bad", tasks_schema, document)
        assert result.passed is False
        assert len(result.errors) == 1

    def test_nested_schema_paths_skipped(self):
        schema = _make_schema([_field("profile", ["object"]), _field("profile.name", ["string"])])
        result = validate_document("k1", schema, {"profile": {}})
        assert [r.field.path for r in result.field_results] == ["profile"]
        assert result.warnings == []


# --- Type acceptance ---


class TestAcceptedTags:
    @pytest.mark.parametrize(
        "declared,expected",
        [
            ("string", {"string"}),
            ("number", {"number"}),
            ("boolean", {"boolean"}),
            ("null", {"null"}),
            ("array", {"array"}),
            ("object", {"object"}),
            ("Id<users>", {"string"}),
            ('"todo"', {"string"}),
            ("union", None),
            ("any", None),
            ("userRole", None),
            ("unknown?", None),
        ],
    )
    def test_accepted_tags(self, declared, expected):
        assert accepted_tags(declared) == expected

    def test_any_declared_type_may_match(self):
        assert accepts(["string", "null"], "null") is True
        assert accepts(["string", "null"], "number") is False

    def test_no_declared_types_accepts_anything(self):
        assert accepts([], "number") is True
