"""Schema graph for Schema Intel.

A plain node/edge view of a parsed schema: one node per table and one edge
per relation. Layout and rendering are left to whoever consumes it.
"""

from dataclasses import dataclass, field

from schema_intel.schema.models import FieldStat, IndexDefinition, RelationEdge, TableSchema


@dataclass
class SchemaGraphNode:
    id: str
    table: str
    fields: list[FieldStat] = field(default_factory=list)
    index_count: int = 0


@dataclass
class SchemaGraphEdge:
    id: str
    source: str
    target: str
    source_field: str
    confidence: float
    label: str | None = None


@dataclass
class SchemaGraph:
    nodes: list[SchemaGraphNode] = field(default_factory=list)
    edges: list[SchemaGraphEdge] = field(default_factory=list)

    def get_node(self, table: str) -> SchemaGraphNode | None:
        for node in self.nodes:
            if node.table == table:
                return node
        return None


def build_schema_graph(
    tables: list[TableSchema],
    indexes: list[IndexDefinition],
    relations: list[RelationEdge],
) -> SchemaGraph:
    """Build the graph for a set of tables, their indexes, and their relations.

    Edges keep relation order and are numbered from edge-0. An edge may point
    at a table with no node (e.g. a guessed relation target).
    """
    index_counts: dict[str, int] = {}
    for index in indexes:
        index_counts[index.table] = index_counts.get(index.table, 0) + 1

    nodes = [
        SchemaGraphNode(
            id=table.table,
            table=table.table,
            fields=list(table.fields),
            index_count=index_counts.get(table.table, 0),
        )
        for table in tables
    ]
    edges = [
        SchemaGraphEdge(
            id=f"edge-{position}",
            source=relation.from_table,
            target=relation.to_table,
            source_field=relation.from_field_path,
            confidence=relation.confidence,
            label=relation.from_field_path,
        )
        for position, relation in enumerate(relations)
    ]
    return SchemaGraph(nodes=nodes, edges=edges)
