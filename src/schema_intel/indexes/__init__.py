"""Index coverage analysis for query source files."""

from schema_intel.indexes.analyzer import (
    QueryUsage,
    analyze_index_coverage,
    evaluate_usage,
    extract_query_usages,
)

__all__ = [
    "QueryUsage",
    "analyze_index_coverage",
    "evaluate_usage",
    "extract_query_usages",
]
