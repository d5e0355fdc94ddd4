"""Tests for the schema-intel CLI commands."""

import json
from datetime import datetime, timezone

import pytest
from loguru import logger
from typer.testing import CliRunner

from schema_intel.cli.main import app
from schema_intel.schema.models import FieldStat, SchemaSnapshot, TableSchema
from schema_intel.snapshots import SnapshotStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger.remove()


def _write_docs(tmp_path, documents, name: str = "docs.json"):
    path = tmp_path / name
    path.write_text(json.dumps(documents), encoding="utf-8")
    return path


def _saved_snapshot(directory, snapshot_id: str, *tables: TableSchema) -> None:
    SnapshotStore(directory).save(
        SchemaSnapshot(
            id=snapshot_id,
            deployment_id="dev",
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
            tables=tables,
        )
    )


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "Schema Intel version" in result.stdout


# --- parse ---


class TestParse:
    def test_json(self, convex_project):
        result = runner.invoke(app, ["parse", str(convex_project), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [t["table"] for t in data["tables"]] == ["users", "projects", "tasks", "messages"]
        assert {i["name"] for i in data["indexes"]} >= {"by_project", "search_content"}
        assert {r["fromFieldPath"] for r in data["relations"]} == {
            "projectId",
            "assigneeId",
            "authorId",
        }

    def test_table_output(self, convex_project):
        result = runner.invoke(app, ["parse", str(convex_project)])
        assert result.exit_code == 0, result.output
        assert "Summary: 4 tables" in result.stdout

    def test_no_schema(self, tmp_path):
        result = runner.invoke(app, ["parse", str(tmp_path)])
        assert result.exit_code == 1
        assert "No convex/schema.ts" in result.stdout

    def test_empty_schema(self, tmp_path):
        (tmp_path / "convex").mkdir()
        (tmp_path / "convex" / "schema.ts").write_text("export default defineSchema({});")
        result = runner.invoke(app, ["parse", str(tmp_path)])
        assert result.exit_code == 0
        assert "No tables found" in result.stdout


class TestGraph:
    def test_graph_json(self, convex_project):
        result = runner.invoke(app, ["graph", str(convex_project)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert len(data["nodes"]) == 4
        assert data["edges"][0]["id"] == "edge-0"


# --- infer / validate ---


class TestInfer:
    def test_json(self, tmp_path):
        docs = _write_docs(tmp_path, [{"title": "a", "ownerId": "u1"}, {"title": "b"}])
        result = runner.invoke(app, ["infer", "tasks", str(docs), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["schema"]["sampledDocs"] == 2
        owner = [f for f in data["schema"]["fields"] if f["path"] == "ownerId"][0]
        assert owner["optionalRate"] == 0.5
        assert data["relations"][0]["toTable"] == "owners"

    def test_table_output(self, tmp_path):
        docs = _write_docs(tmp_path, [{"title": "a"}])
        result = runner.invoke(app, ["infer", "tasks", str(docs)])
        assert result.exit_code == 0, result.output
        assert "Analyzed 1 documents" in result.stdout

    def test_empty_sample(self, tmp_path):
        docs = _write_docs(tmp_path, [])
        result = runner.invoke(app, ["infer", "tasks", str(docs)])
        assert result.exit_code == 0
        assert "No documents found" in result.stdout

    def test_not_an_array(self, tmp_path):
        docs = _write_docs(tmp_path, {"title": "a"})
        result = runner.invoke(app, ["infer", "tasks", str(docs)])
        assert result.exit_code == 1

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "docs.json"
        path.write_text("[{", encoding="utf-8")
        result = runner.invoke(app, ["infer", "tasks", str(path)])
        assert result.exit_code == 1


class TestValidate:
    def test_valid_documents(self, convex_project, tmp_path):
        docs = _write_docs(
            tmp_path,
            [{"_id": "t1", "title": "a", "projectId": "p1", "status": "todo"}],
        )
        result = runner.invoke(
            app, ["validate", "tasks", str(docs), "--root", str(convex_project), "--strict"]
        )
        assert result.exit_code == 0, result.output
        assert "1/1 documents valid" in result.stdout

    def test_strict_fails_on_warnings(self, convex_project, tmp_path):
        docs = _write_docs(tmp_path, [{"_id": "t1", "projectId": "p1", "status": "todo"}])
        result = runner.invoke(
            app, ["validate", "tasks", str(docs), "--root", str(convex_project), "--strict"]
        )
        assert result.exit_code == 1
        assert "Missing required field: title" in result.stdout

    def test_warnings_without_strict(self, convex_project, tmp_path):
        docs = _write_docs(tmp_path, [{"projectId": "p1", "status": "todo"}, "not a doc"])
        result = runner.invoke(app, ["validate", "tasks", str(docs), "--root", str(convex_project)])
        assert result.exit_code == 0, result.output
        assert "0/2 documents valid" in result.stdout

    def test_unknown_table(self, convex_project, tmp_path):
        docs = _write_docs(tmp_path, [])
        result = runner.invoke(
            app, ["validate", "nope", str(docs), "--root", str(convex_project)]
        )
        assert result.exit_code == 1
        assert "not declared" in result.stdout


# --- indexes ---


class TestIndexes:
    def test_json_report(self, convex_project):
        result = runner.invoke(app, ["indexes", str(convex_project), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["filesScanned"] == 1
        assert [i["severity"] for i in data["issues"]] == ["high", "high", "medium", "low"]
        assert data["issues"][0]["functionPath"] == "convex/tasks.ts:18"

    def test_table_output(self, convex_project):
        result = runner.invoke(app, ["indexes", str(convex_project)])
        assert result.exit_code == 0, result.output
        assert "Summary: 2 high, 1 medium, 1 low" in result.stdout

    def test_fail_on_high(self, convex_project):
        result = runner.invoke(app, ["indexes", str(convex_project), "--fail-on-high"])
        assert result.exit_code == 1

    def test_clean_project(self, convex_project):
        (convex_project / "convex" / "tasks.ts").write_text(
            'export const f = query({ handler: (ctx) => ctx.db.query("tasks").first() });',
            encoding="utf-8",
        )
        result = runner.invoke(app, ["indexes", str(convex_project), "--fail-on-high"])
        assert result.exit_code == 0
        assert "No index coverage issues" in result.stdout

    def test_no_schema(self, tmp_path):
        result = runner.invoke(app, ["indexes", str(tmp_path)])
        assert result.exit_code == 1


# --- snapshots ---


class TestSnapshots:
    def test_snapshot_then_list(self, convex_project, snapshot_dir):
        result = runner.invoke(app, ["snapshot", str(convex_project), "--deployment", "dev"])
        assert result.exit_code == 0, result.output
        assert "Saved snapshot" in result.stdout

        saved = SnapshotStore(snapshot_dir).list()
        assert len(saved) == 1
        assert saved[0].deployment_id == "dev"
        assert len(saved[0].tables) == 4

        listing = runner.invoke(app, ["snapshots", "-d", "dev"])
        assert listing.exit_code == 0, listing.output
        assert "Snapshots" in listing.stdout

    def test_snapshot_requires_deployment(self, convex_project, snapshot_dir):
        result = runner.invoke(app, ["snapshot", str(convex_project)])
        assert result.exit_code != 0

    def test_no_snapshots(self, snapshot_dir):
        result = runner.invoke(app, ["snapshots"])
        assert result.exit_code == 0
        assert "No snapshots found." in result.stdout


class TestDiff:
    def test_json(self, snapshot_dir):
        _saved_snapshot(
            snapshot_dir,
            "before",
            TableSchema(table="tasks", fields=[FieldStat(path="title", types=["string"], optional_rate=0)]),
        )
        _saved_snapshot(
            snapshot_dir,
            "after",
            TableSchema(table="tasks", fields=[FieldStat(path="title", types=["number"], optional_rate=0)]),
            TableSchema(table="users"),
        )

        result = runner.invoke(app, ["diff", "before", "after", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [(d["table"], d["change"]) for d in data["tableDiffs"]] == [
            ("users", "added"),
            ("tasks", "modified"),
        ]
        assert data["tableDiffs"][1]["fieldDiffs"][0]["change"] == "type_changed"

    def test_text_output(self, snapshot_dir):
        _saved_snapshot(snapshot_dir, "before")
        _saved_snapshot(snapshot_dir, "after", TableSchema(table="users"))
        result = runner.invoke(app, ["diff", "before", "after"])
        assert result.exit_code == 0, result.output
        assert "1 table(s) added." in result.stdout

    def test_no_changes(self, snapshot_dir):
        _saved_snapshot(snapshot_dir, "same")
        result = runner.invoke(app, ["diff", "same", "same"])
        assert result.exit_code == 0
        assert "No schema changes detected." in result.stdout

    def test_missing_snapshot(self, snapshot_dir):
        _saved_snapshot(snapshot_dir, "before")
        result = runner.invoke(app, ["diff", "before", "missing"])
        assert result.exit_code == 1
        assert "Snapshot not found: missing" in result.stdout


class TestUnexpectedErrors:
    def test_graph_logs_and_exits(self, convex_project, monkeypatch):
        def broken_graph(*args, **kwargs):
            raise RuntimeError("layout exploded")

        monkeypatch.setattr("schema_intel.cli.commands.schema.build_schema_graph", broken_graph)
        result = runner.invoke(app, ["graph", str(convex_project)])
        assert result.exit_code == 1
        assert "Error during graph: layout exploded" in result.output
        assert not isinstance(result.exception, RuntimeError)
