"""Schema definition parser for Schema Intel.

Extracts tables, fields, indexes and declared relations from TypeScript schema
sources built with defineTable. Two table shapes are recognised:

  tasks: defineTable({ ... })                   # inline in defineSchema({...})
  export const tasks = defineTable({ ... })     # split schema files

Fields are the top-level entries of the defineTable object:

  title: v.string()                 -> types ["string"], confidence 1.0
  dueDate: v.optional(v.number())   -> types ["number"], optional_rate 1
  projectId: v.id("projects")       -> types ["Id<projects>"] + relation
  role: userRoleValidator           -> types ["userRole"], confidence 0.8

Indexes come from the method chain after the defineTable call:

  .index("by_project", ["projectId", "status"])
  .searchIndex("search_body", { searchField: "body", filterFields: [...] })
  .vectorIndex("by_embedding", { vectorField: "embedding", dimensions: 1536 })

Relative imports and re-exports are followed through a resolver so split
schemas (schema.ts -> ./schemas/index.ts -> ./schemas/users.ts) parse as one.
Parsing is best-effort: malformed input yields partial results, never errors.
"""

import posixpath
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Protocol

from loguru import logger

from schema_intel.config import DEFAULT_CONFIG, SchemaIntelConfig
from schema_intel.schema.lexer import (
    Token,
    TokenType,
    find_matching,
    is_token,
    split_arguments,
    tokenize,
)
from schema_intel.schema.models import (
    FieldStat,
    IndexDefinition,
    IndexKind,
    ParseResult,
    RelationEdge,
    RelationSource,
    TableSchema,
    utc_now,
)
from schema_intel.schema.resolver import custom_validator_type, id_reference, resolve_validator


DECLARED_CONFIDENCE = 1.0
CUSTOM_VALIDATOR_CONFIDENCE = 0.8

SOURCE_EXTENSIONS = (".ts", ".js", ".tsx", ".jsx")

INDEX_METHODS = {
    "index": IndexKind.BY_FIELD,
    "searchIndex": IndexKind.SEARCH,
    "vectorIndex": IndexKind.VECTOR,
}


# --- Source resolution ---


class SourceResolver(Protocol):
    """Reads schema source files by path relative to the schema directory."""

    def read_text(self, path: str) -> str | None:
        """Return the file's text, or None if it doesn't exist."""
        ...


@dataclass
class SourceCache:
    """Contents of source files read during one analysis invocation.

    Keyed by canonical path; None records a path that was tried and not found
    so it is never read twice. Create one per invocation and pass it in; there
    is no shared module-level cache.
    """

    contents: dict[str, str | None] = field(default_factory=dict)

    def read(self, path: str, resolver: SourceResolver) -> str | None:
        path = canonical_path(path)
        if path in self.contents:
            return self.contents[path]

        try:
            content = resolver.read_text(path)
        except (OSError, UnicodeError, ValueError) as e:
            logger.debug(f"Skipping unreadable schema source {path}: {e}")
            content = None

        self.contents[path] = content
        return content


def canonical_path(path: str) -> str:
    """Normalize a relative posix path so equivalent spellings compare equal."""
    normalized = posixpath.normpath(path.replace("\\", "/"))
    return "." if normalized in ("", ".") else normalized


def candidate_paths(base_dir: str, specifier: str) -> list[str]:
    """Files an import specifier may refer to, most specific first."""
    joined = canonical_path(posixpath.join(base_dir, specifier))
    if joined.endswith(SOURCE_EXTENSIONS):
        return [joined]
    return [
        f"{joined}/index.ts",
        f"{joined}/index.js",
        f"{joined}.ts",
        f"{joined}.js",
    ]


def relative_specifiers(tokens: list[Token]) -> list[str]:
    """Relative module specifiers from import, export-from and side-effect import statements."""
    specifiers: list[str] = []
    for index, token in enumerate(tokens):
        if token.type != TokenType.IDENTIFIER or token.value not in ("from", "import"):
            continue
        if not is_token(tokens, index + 1, TokenType.STRING):
            continue
        specifier = tokens[index + 1].value
        if specifier.startswith(("./", "../")) and specifier not in specifiers:
            specifiers.append(specifier)
    return specifiers


def collect_sources(
    entry_text: str,
    resolver: SourceResolver,
    entry_path: str = "schema.ts",
    cache: SourceCache | None = None,
    config: SchemaIntelConfig | None = None,
) -> list[tuple[str, str]]:
    """Walk relative imports breadth-first from the entry file.

    Returns (canonical path, text) pairs in visit order, entry first. The walk
    is bounded by a visited set, config.max_import_depth hops and
    config.max_source_files files, so import cycles always terminate.
    """
    config = config or DEFAULT_CONFIG
    cache = cache if cache is not None else SourceCache()

    entry_path = canonical_path(entry_path)
    visited = {entry_path}
    sources: list[tuple[str, str]] = [(entry_path, entry_text)]
    queue: list[tuple[str, str, int]] = [(entry_path, entry_text, 0)]

    while queue:
        path, text, depth = queue.pop(0)
        if depth >= config.max_import_depth:
            continue

        base_dir = posixpath.dirname(path) or "."
        for specifier in relative_specifiers(tokenize(text)):
            for candidate in candidate_paths(base_dir, specifier):
                if candidate in visited:
                    break
                if len(visited) >= config.max_source_files:
                    logger.debug(f"Source file cap reached, not following {specifier} from {path}")
                    return sources
                content = cache.read(candidate, resolver)
                if content is None:
                    continue
                visited.add(candidate)
                sources.append((candidate, content))
                queue.append((candidate, content, depth + 1))
                break

    return sources


# --- Main Parser ---


def parse_schema(
    entry_text: str | None,
    resolver: SourceResolver,
    entry_path: str = "schema.ts",
    cache: SourceCache | None = None,
    config: SchemaIntelConfig | None = None,
) -> ParseResult:
    """Parse a schema entry file and every local file it imports.

    Args:
        entry_text: Text of the schema entry file, or None if it doesn't exist.
        resolver: Reads imported files by path relative to the entry's directory.
        entry_path: Path of the entry file relative to the same root.
        cache: Per-invocation source cache; a fresh one is used when omitted.
        config: Traversal caps; defaults to DEFAULT_CONFIG.

    Returns:
        Tables, indexes and relations from all reached files, concatenated in
        visit order.
    """
    if resolver is None:
        raise TypeError("parse_schema requires a source resolver")

    if entry_text is None:
        return ParseResult()

    result = ParseResult()
    sources = collect_sources(entry_text, resolver, entry_path, cache, config)
    inferred_at = utc_now()
    for _, text in sources:
        result.extend(parse_source(text, inferred_at=inferred_at))

    logger.debug(
        f"Parsed {len(sources)} schema source(s): {len(result.tables)} tables, "
        f"{len(result.indexes)} indexes, {len(result.relations)} relations"
    )
    return result


def parse_schema_file(path: str | Path, config: SchemaIntelConfig | None = None) -> ParseResult:
    """Parse an on-disk schema entry file, following its local imports."""
    from schema_intel.workspace import FileSystemResolver

    path = Path(path)
    if not path.is_file():
        logger.debug(f"No schema file at {path}")
        return ParseResult()

    resolver = FileSystemResolver(path.parent)
    return parse_schema(resolver.read_text(path.name), resolver, entry_path=path.name, config=config)


def parse_source(text: str, inferred_at: datetime | None = None) -> ParseResult:
    """Parse a single source text for table definitions, indexes and relations."""
    inferred_at = inferred_at or utc_now()
    tokens = tokenize(text)
    result = ParseResult()

    for index, token in enumerate(tokens):
        if token.type != TokenType.IDENTIFIER or token.value != "defineTable":
            continue
        if not is_token(tokens, index + 1, TokenType.LPAREN):
            continue

        table_name = _table_name(tokens, index)
        if table_name is None:
            continue

        parsed = _parse_table(text, tokens, table_name, index + 1, inferred_at)
        if parsed is not None:
            result.extend(parsed)

    return result


def _table_name(tokens: list[Token], define_index: int) -> str | None:
    """Name bound to the defineTable call at define_index, if it has one we recognise."""
    # name: defineTable(   /   "name": defineTable(
    if is_token(tokens, define_index - 1, TokenType.COLON):
        key = tokens[define_index - 2] if define_index >= 2 else None
        if key is not None and key.type in (TokenType.IDENTIFIER, TokenType.STRING) and key.value:
            return key.value
        return None

    # export const name = defineTable(
    if (
        is_token(tokens, define_index - 1, TokenType.EQUALS)
        and is_token(tokens, define_index - 2, TokenType.IDENTIFIER)
        and is_token(tokens, define_index - 3, TokenType.IDENTIFIER, "const")
        and is_token(tokens, define_index - 4, TokenType.IDENTIFIER, "export")
    ):
        return tokens[define_index - 2].value

    return None


def _parse_table(
    text: str,
    tokens: list[Token],
    table_name: str,
    open_paren: int,
    inferred_at: datetime,
) -> ParseResult | None:
    """Parse one defineTable({...}) call and the index chain that follows it."""
    open_brace = open_paren + 1
    if not is_token(tokens, open_brace, TokenType.LBRACE):
        return None
    close_brace = find_matching(tokens, open_brace)
    if close_brace is None:
        return None

    fields, relations = _parse_fields(text, tokens, table_name, open_brace, close_brace)
    table = TableSchema(
        table=table_name,
        fields=fields,
        sampled_docs=0,
        inferred_at=inferred_at,
    )

    close_paren = find_matching(tokens, open_paren)
    indexes = [] if close_paren is None else _parse_index_chain(tokens, table_name, close_paren)

    return ParseResult(tables=[table], indexes=indexes, relations=relations)


# --- Fields ---


def _parse_fields(
    text: str,
    tokens: list[Token],
    table_name: str,
    open_brace: int,
    close_brace: int,
) -> tuple[list[FieldStat], list[RelationEdge]]:
    """Parse the top-level entries of a defineTable object.

    A repeated key keeps its first position but takes the last declaration,
    the same way an object literal behaves.
    """
    fields: dict[str, FieldStat] = {}
    relations: dict[str, RelationEdge] = {}

    for first, last in split_arguments(tokens, open_brace, close_brace):
        key = tokens[first]
        if key.type not in (TokenType.IDENTIFIER, TokenType.STRING) or not key.value:
            continue
        if first + 2 > last or not is_token(tokens, first + 1, TokenType.COLON):
            continue

        parsed = _parse_field_value(text, tokens, key.value, first + 2, last)
        if parsed is None:
            continue
        field_stat, referenced_table = parsed

        fields[key.value] = field_stat
        relations.pop(key.value, None)
        if referenced_table is not None:
            relations[key.value] = RelationEdge(
                from_table=table_name,
                from_field_path=key.value,
                to_table=referenced_table,
                confidence=DECLARED_CONFIDENCE,
                source=RelationSource.INFERRED,
            )

    return list(fields.values()), list(relations.values())


def _parse_field_value(
    text: str,
    tokens: list[Token],
    name: str,
    first: int,
    last: int,
) -> tuple[FieldStat, str | None] | None:
    """Parse a validator expression spanning tokens[first..last].

    Returns the field and the table it references (if any), or None when the
    expression isn't a validator we recognise.
    """
    # --- v.<validator>(args) ---
    if (
        is_token(tokens, first, TokenType.IDENTIFIER, "v")
        and is_token(tokens, first + 1, TokenType.DOT)
        and is_token(tokens, first + 2, TokenType.IDENTIFIER)
        and is_token(tokens, first + 3, TokenType.LPAREN)
    ):
        close = find_matching(tokens, first + 3)
        if close is None or close > last:
            return None
        validator = tokens[first + 2].value
        raw_args = text[tokens[first + 3].end : tokens[close].start]

        field_stat = FieldStat(
            path=name,
            types=resolve_validator(validator, raw_args),
            optional_rate=1.0 if validator == "optional" else 0.0,
            sample_count=0,
            confidence=DECLARED_CONFIDENCE,
        )
        return field_stat, id_reference(validator, raw_args)

    # --- customValidator reference ---
    if first == last and tokens[first].type == TokenType.IDENTIFIER:
        type_name = custom_validator_type(tokens[first].value)
        if type_name is None:
            return None
        field_stat = FieldStat(
            path=name,
            types=[type_name],
            optional_rate=0.0,
            sample_count=0,
            confidence=CUSTOM_VALIDATOR_CONFIDENCE,
        )
        return field_stat, None

    return None


# --- Indexes ---


def _parse_index_chain(tokens: list[Token], table_name: str, close_paren: int) -> list[IndexDefinition]:
    """Follow .index/.searchIndex/.vectorIndex calls chained after defineTable(...)."""
    indexes: dict[str, IndexDefinition] = {}
    position = close_paren + 1

    while (
        is_token(tokens, position, TokenType.DOT)
        and is_token(tokens, position + 1, TokenType.IDENTIFIER)
        and is_token(tokens, position + 2, TokenType.LPAREN)
    ):
        method = tokens[position + 1].value
        open_paren = position + 2
        close = find_matching(tokens, open_paren)
        if close is None:
            break

        kind = INDEX_METHODS.get(method)
        if kind is not None:
            index = _parse_index_call(tokens, table_name, kind, open_paren, close)
            if index is not None:
                indexes[index.name] = index

        position = close + 1

    return list(indexes.values())


def _parse_index_call(
    tokens: list[Token],
    table_name: str,
    kind: IndexKind,
    open_paren: int,
    close_paren: int,
) -> IndexDefinition | None:
    arguments = split_arguments(tokens, open_paren, close_paren)
    if not arguments:
        return None

    name_first, name_last = arguments[0]
    if name_first != name_last or tokens[name_first].type != TokenType.STRING:
        return None
    name = tokens[name_first].value
    if not name:
        return None

    fields: list[str] = []
    if len(arguments) > 1:
        config_first, config_last = arguments[1]
        if kind == IndexKind.BY_FIELD:
            fields = _index_fields(tokens, config_first, config_last)
        else:
            key = "searchField" if kind == IndexKind.SEARCH else "vectorField"
            value = _object_string(tokens, config_first, config_last, key)
            fields = [value] if value else []

    return IndexDefinition(table=table_name, name=name, fields=fields, kind=kind)


def _index_fields(tokens: list[Token], first: int, last: int) -> list[str]:
    """Fields of a by-field index: ["a", "b"] or { fields: ["a", "b"] }."""
    if tokens[first].type == TokenType.LBRACE:
        entry = _object_entry(tokens, first, last, "fields")
        if entry is None:
            return []
        first, last = entry

    if tokens[first].type != TokenType.LBRACKET:
        return []
    close = find_matching(tokens, first)
    if close is None or close > last:
        return []

    return [
        tokens[a].value
        for a, b in split_arguments(tokens, first, close)
        if a == b and tokens[a].type == TokenType.STRING and tokens[a].value
    ]


def _object_entry(tokens: list[Token], first: int, last: int, key: str) -> tuple[int, int] | None:
    """Token span of the value for `key` in the object literal at tokens[first]."""
    if tokens[first].type != TokenType.LBRACE:
        return None
    close = find_matching(tokens, first)
    if close is None or close > last:
        return None

    for entry_first, entry_last in split_arguments(tokens, first, close):
        entry_key = tokens[entry_first]
        if (
            entry_key.type in (TokenType.IDENTIFIER, TokenType.STRING)
            and entry_key.value == key
            and is_token(tokens, entry_first + 1, TokenType.COLON)
            and entry_first + 2 <= entry_last
        ):
            return entry_first + 2, entry_last
    return None


def _object_string(tokens: list[Token], first: int, last: int, key: str) -> str | None:
    entry = _object_entry(tokens, first, last, key)
    if entry is None:
        return None
    value_first, value_last = entry
    if value_first != value_last or tokens[value_first].type != TokenType.STRING:
        return None
    return tokens[value_first].value or None


# --- Optionality view ---


@dataclass(frozen=True)
class FieldRequirement:
    """Whether a declared field may be omitted, and its primary type."""

    optional: bool
    type: str


def optionality_map(tables: list[TableSchema]) -> dict[str, dict[str, FieldRequirement]]:
    """Table -> field -> requirement, for form-style document validation.

    A table declared more than once keeps its last declaration.
    """
    result: dict[str, dict[str, FieldRequirement]] = {}
    for table in tables:
        result[table.table] = {
            field_stat.path: FieldRequirement(
                optional=field_stat.optional_rate >= 1.0,
                type=field_stat.types[0] if field_stat.types else "unknown",
            )
            for field_stat in table.fields
        }
    return result
