"""Tests for schema_intel.workspace -- schema and query file discovery."""

from pathlib import Path

from schema_intel.workspace import (
    FileSystemResolver,
    find_query_files,
    find_schema_file,
    is_query_file,
    load_query_sources,
)


def _write(root: Path, relative: str, content: str = "") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class TestFileSystemResolver:
    def test_reads_relative_paths(self, tmp_path):
        _write(tmp_path, "convex/schema.ts", "schema")
        resolver = FileSystemResolver(tmp_path)
        assert resolver.read_text("convex/schema.ts") == "schema"
        assert resolver.read_text("convex/../convex/schema.ts") == "schema"

    def test_missing_file(self, tmp_path):
        assert FileSystemResolver(tmp_path).read_text("convex/nope.ts") is None

    def test_directory_is_not_a_file(self, tmp_path):
        (tmp_path / "convex").mkdir()
        assert FileSystemResolver(tmp_path).read_text("convex") is None

    def test_confined_to_root(self, tmp_path):
        _write(tmp_path, "secret.ts", "secret")
        root = tmp_path / "project"
        root.mkdir()
        assert FileSystemResolver(root).read_text("../secret.ts") is None


class TestFindSchemaFile:
    def test_finds_project_schema(self, convex_project):
        assert find_schema_file(convex_project) == convex_project / "convex" / "schema.ts"

    def test_shortest_path_wins(self, tmp_path):
        _write(tmp_path, "packages/backend/convex/schema.ts")
        _write(tmp_path, "convex/schema.ts")
        assert find_schema_file(tmp_path) == tmp_path / "convex" / "schema.ts"

    def test_javascript_schema(self, tmp_path):
        _write(tmp_path, "app/convex/schema.js")
        assert find_schema_file(tmp_path) == tmp_path / "app" / "convex" / "schema.js"

    def test_schema_outside_convex_dir_ignored(self, tmp_path):
        _write(tmp_path, "src/schema.ts")
        assert find_schema_file(tmp_path) is None

    def test_node_modules_ignored(self, tmp_path):
        _write(tmp_path, "node_modules/pkg/convex/schema.ts")
        assert find_schema_file(tmp_path) is None

    def test_gitignore_respected(self, tmp_path):
        _write(tmp_path, ".gitignore", "vendor/\n")
        _write(tmp_path, "vendor/convex/schema.ts")
        assert find_schema_file(tmp_path) is None

    def test_missing_root(self, tmp_path):
        assert find_schema_file(tmp_path / "nope") is None


class TestFindQueryFiles:
    def test_project_query_files(self, convex_project):
        assert find_query_files(convex_project) == [convex_project / "convex" / "tasks.ts"]

    def test_excludes_generated_and_schema(self, tmp_path):
        _write(tmp_path, "convex/schema.ts")
        _write(tmp_path, "convex/_generated/server.ts")
        _write(tmp_path, "convex/users.ts")
        _write(tmp_path, "convex/lib/helpers.tsx")
        _write(tmp_path, "convex/README.md")
        _write(tmp_path, "src/App.tsx")

        assert find_query_files(tmp_path) == [
            tmp_path / "convex" / "lib" / "helpers.tsx",
            tmp_path / "convex" / "users.ts",
        ]

    def test_gitignored_files_skipped(self, tmp_path):
        _write(tmp_path, ".gitignore", "convex/legacy.ts\n*.generated.ts\n")
        _write(tmp_path, "convex/legacy.ts")
        _write(tmp_path, "convex/api.generated.ts")
        _write(tmp_path, "convex/tasks.ts")
        assert find_query_files(tmp_path) == [tmp_path / "convex" / "tasks.ts"]

    def test_limit(self, tmp_path):
        for name in ("a", "b", "c"):
            _write(tmp_path, f"convex/{name}.ts")
        assert len(find_query_files(tmp_path, limit=2)) == 2

    def test_is_query_file(self, tmp_path):
        assert is_query_file(tmp_path / "convex" / "tasks.js", tmp_path)
        assert not is_query_file(tmp_path / "convex" / "schema.js", tmp_path)
        assert not is_query_file(tmp_path / "tasks.ts", tmp_path)
        assert not is_query_file(Path("/elsewhere/convex/tasks.ts"), tmp_path)


class TestLoadQuerySources:
    def test_keys_relative_to_root(self, convex_project):
        sources = load_query_sources(find_query_files(convex_project), root=convex_project)
        assert list(sources) == ["convex/tasks.ts"]
        assert "listByProject" in sources["convex/tasks.ts"]

    def test_unreadable_file_maps_to_none(self, tmp_path):
        missing = tmp_path / "convex" / "gone.ts"
        assert load_query_sources([missing], root=tmp_path) == {"convex/gone.ts": None}

    def test_without_root_uses_full_path(self, tmp_path):
        path = _write(tmp_path, "convex/a.ts", "x")
        assert load_query_sources([path]) == {str(path): "x"}
