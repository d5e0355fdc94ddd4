"""Index coverage analysis for Schema Intel.

Scans query source files for database query chains and checks each one
against the indexes declared in the schema:

  ctx.db.query("tasks").collect()                      -> high: full table scan
  ctx.db.query("tasks").filter(...).first()            -> medium: in-memory filter
  ctx.db.query("tasks").withIndex("by_due_date")...    -> high: index not defined
  ctx.db.query("tasks").withIndex("by_status").collect()
                                                       -> medium: no range constraint
  ctx.db.query("tasks").withIndex("by_project", q => q.eq(...)).filter(...)
                                                       -> low: filter beside index

Chains are read with the token scanner, so they may span lines, and string
literals or comments that merely mention .collect() do not count. A chain is
followed for at most config.chain_window_lines lines from its entry point and
ends at the first token that doesn't continue it. This is advisory analysis:
nothing here raises for odd input, and unreadable files are skipped.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass

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
from schema_intel.schema.models import IndexCoverageIssue, IndexDefinition, Severity


QUERY_RECEIVERS = ("ctx", "context")

FULL_MATERIALIZATION = {"collect"}
BOUNDED_TAKE = {"take", "paginate"}
FIRST_ONLY = {"first", "unique"}
FILTER_STAGE = {"filter"}

INDEX_METHODS = {"withIndex", "withSearchIndex"}
RANGE_OPERATORS = {"eq", "lt", "gt", "lte", "gte"}
SEARCH_OPERATORS = {"search"}


@dataclass
class QueryUsage:
    """One ctx.db.query(...) chain found in a source file."""

    file_path: str
    line: int
    table: str
    index_name: str | None = None
    has_collect: bool = False
    has_take: bool = False
    has_first: bool = False
    has_filter: bool = False
    range_constraint_count: int = 0

    @property
    def function_path(self) -> str:
        return f"{self.file_path}:{self.line}"


# --- Usage Extraction ---


def extract_query_usages(
    file_path: str,
    content: str,
    config: SchemaIntelConfig | None = None,
) -> list[QueryUsage]:
    """Find every query chain in a source file, in source order."""
    config = config or DEFAULT_CONFIG
    tokens = tokenize(content)
    usages: list[QueryUsage] = []

    for index in range(len(tokens)):
        table = _query_entry_table(tokens, index)
        if table is None:
            continue

        usage = QueryUsage(file_path=file_path, line=tokens[index].line, table=table)
        last_line = usage.line + config.chain_window_lines - 1
        # ctx . db . query ( "table" ) -> the chain continues after token index + 7
        _read_chain(tokens, index + 8, last_line, config.max_chain_calls, usage)
        usages.append(usage)

    return usages


def _query_entry_table(tokens: list[Token], index: int) -> str | None:
    """Table name if tokens[index:] start with ctx.db.query("table")."""
    token = tokens[index]
    if token.type != TokenType.IDENTIFIER or token.value not in QUERY_RECEIVERS:
        return None
    if not (
        is_token(tokens, index + 1, TokenType.DOT)
        and is_token(tokens, index + 2, TokenType.IDENTIFIER, "db")
        and is_token(tokens, index + 3, TokenType.DOT)
        and is_token(tokens, index + 4, TokenType.IDENTIFIER, "query")
        and is_token(tokens, index + 5, TokenType.LPAREN)
        and is_token(tokens, index + 6, TokenType.STRING)
        and is_token(tokens, index + 7, TokenType.RPAREN)
    ):
        return None

    table = tokens[index + 6].value
    if not re.fullmatch(r"\w+", table):
        return None
    return table


def _read_chain(
    tokens: list[Token],
    position: int,
    last_line: int,
    max_calls: int,
    usage: QueryUsage,
) -> None:
    """Record the properties of the .method(...) calls chained from position."""
    calls = 0
    while (
        calls < max_calls
        and is_token(tokens, position, TokenType.DOT)
        and is_token(tokens, position + 1, TokenType.IDENTIFIER)
        and is_token(tokens, position + 2, TokenType.LPAREN)
        and tokens[position + 1].line <= last_line
    ):
        method = tokens[position + 1].value
        open_paren = position + 2
        close = find_matching(tokens, open_paren)
        if close is None:
            close = len(tokens) - 1

        if method in INDEX_METHODS and usage.index_name is None:
            usage.index_name = _index_name(tokens, open_paren, close)
            operators = RANGE_OPERATORS | (SEARCH_OPERATORS if method == "withSearchIndex" else set())
            usage.range_constraint_count = _count_operators(
                tokens, open_paren, close, operators, last_line
            )
        elif method in FULL_MATERIALIZATION:
            usage.has_collect = True
        elif method in BOUNDED_TAKE:
            usage.has_take = True
        elif method in FIRST_ONLY:
            usage.has_first = True
        elif method in FILTER_STAGE:
            usage.has_filter = True

        calls += 1
        position = close + 1


def _index_name(tokens: list[Token], open_paren: int, close_paren: int) -> str | None:
    arguments = split_arguments(tokens, open_paren, close_paren)
    if not arguments:
        return None
    first, last = arguments[0]
    if first != last or tokens[first].type != TokenType.STRING:
        return None
    return tokens[first].value or None


def _count_operators(
    tokens: list[Token],
    open_paren: int,
    close_paren: int,
    operators: set[str],
    last_line: int,
) -> int:
    """Count .eq(/.lt(/... calls inside an index call's range callback."""
    count = 0
    for position in range(open_paren + 1, close_paren):
        if tokens[position].line > last_line:
            break
        if (
            tokens[position].type == TokenType.DOT
            and is_token(tokens, position + 1, TokenType.IDENTIFIER)
            and tokens[position + 1].value in operators
            and is_token(tokens, position + 2, TokenType.LPAREN)
        ):
            count += 1
    return count


# --- Rule Evaluation ---


def build_index_map(indexes: list[IndexDefinition]) -> dict[str, list[IndexDefinition]]:
    """Group index definitions by table, keeping declaration order."""
    index_map: dict[str, list[IndexDefinition]] = {}
    for index in indexes:
        index_map.setdefault(index.table, []).append(index)
    return index_map


def evaluate_usage(
    usage: QueryUsage,
    index_map: dict[str, list[IndexDefinition]],
) -> list[IndexCoverageIssue]:
    """Apply the coverage rules to one query chain."""
    issues: list[IndexCoverageIssue] = []
    table_indexes = index_map.get(usage.table, [])

    # --- No index referenced ---
    # Trigger: the chain never calls .withIndex()
    # Why: collect() reads every document; filter() runs in memory after the scan
    # Outcome: high for a full materialization, otherwise medium for a filter
    if usage.index_name is None:
        if usage.has_collect:
            suggestion = (
                f'Consider .withIndex("{table_indexes[0].name}")'
                if table_indexes
                else f'Add an index to "{usage.table}" for the fields being queried.'
            )
            issues.append(
                IndexCoverageIssue(
                    function_path=usage.function_path,
                    table=usage.table,
                    severity=Severity.HIGH,
                    message=(
                        f'Full table scan: db.query("{usage.table}").collect() without an index. '
                        "This reads every document."
                    ),
                    suggested_index=suggestion,
                )
            )
        elif usage.has_filter:
            issues.append(
                IndexCoverageIssue(
                    function_path=usage.function_path,
                    table=usage.table,
                    severity=Severity.MEDIUM,
                    message=(
                        "Query uses .filter() without .withIndex(). "
                        "Filter runs in-memory after scanning."
                    ),
                    suggested_index="Move filter conditions into a .withIndex() for server-side filtering.",
                )
            )
        return issues

    # --- Referenced index doesn't exist ---
    # Trigger: index name not among the table's declared indexes
    # Why: catches stale or renamed index references
    # Outcome: high, and no further rules for this usage
    if not any(index.name == usage.index_name for index in table_indexes):
        issues.append(
            IndexCoverageIssue(
                function_path=usage.function_path,
                table=usage.table,
                severity=Severity.HIGH,
                message=(
                    f'Index "{usage.index_name}" referenced but not defined on table "{usage.table}".'
                ),
                suggested_index=f'Define .index("{usage.index_name}", [...]) in schema.ts.',
            )
        )
        return issues

    # --- Index without range constraints ---
    if usage.has_collect and usage.range_constraint_count == 0:
        issues.append(
            IndexCoverageIssue(
                function_path=usage.function_path,
                table=usage.table,
                severity=Severity.MEDIUM,
                message=(
                    f'Query uses .withIndex("{usage.index_name}") but no range constraints. '
                    "This scans the full index."
                ),
                suggested_index="Add .eq(), .lt(), .gt() etc. in the index range callback.",
            )
        )

    # --- Filter alongside an index ---
    if usage.has_filter:
        issues.append(
            IndexCoverageIssue(
                function_path=usage.function_path,
                table=usage.table,
                severity=Severity.LOW,
                message=(
                    f'Query uses .filter() after .withIndex("{usage.index_name}"). '
                    "Consider extending the index to cover filter fields."
                ),
            )
        )

    return issues


def analyze_index_coverage(
    sources: Mapping[str, str | None],
    known_indexes: list[IndexDefinition],
    config: SchemaIntelConfig | None = None,
) -> list[IndexCoverageIssue]:
    """Check every query chain in the given sources against the known indexes.

    Args:
        sources: Ordered mapping of file identifier -> text. None marks an
            unreadable file, which is skipped.
        known_indexes: Index definitions from the schema parser.
        config: Chain bounds; defaults to DEFAULT_CONFIG.

    Returns:
        Issues ordered by severity (high, medium, low); equal severities keep
        file order, then line order.
    """
    if not isinstance(sources, Mapping):
        raise TypeError("analyze_index_coverage requires a mapping of file path to content")
    if known_indexes is None:
        raise TypeError("analyze_index_coverage requires a list of known indexes")

    config = config or DEFAULT_CONFIG
    index_map = build_index_map(list(known_indexes))
    issues: list[IndexCoverageIssue] = []
    usage_count = 0

    for file_path, content in sources.items():
        if content is None:
            logger.debug(f"Skipping unreadable query source {file_path}")
            continue

        usages = extract_query_usages(file_path, content, config)
        usage_count += len(usages)
        for usage in usages:
            issues.extend(evaluate_usage(usage, index_map))

    logger.debug(f"Checked {usage_count} query chain(s), found {len(issues)} issue(s)")

    # sorted() is stable, so equal severities keep discovery order
    return sorted(issues, key=lambda issue: issue.severity.rank)
