"""Schema drift diff for Schema Intel.

Compares two schema snapshots and reports how the structure moved between
them. The diff is pure and deterministic:

  - Tables only in `to`    -> added, every field reported added
  - Tables only in `from`  -> removed, every field reported removed
  - Tables in both         -> modified when at least one field was added,
                              removed, or changed its set of types

Type sets compare order-independently, so ["string", "null"] and
["null", "string"] are the same type. Field diffs are ordered by path; table
diffs by change kind (added, modified, removed) and then by table name.
"""

from schema_intel.schema.models import (
    FieldChange,
    FieldDiff,
    FieldStat,
    SchemaDrift,
    SchemaSnapshot,
    TableChange,
    TableDiff,
    TableSchema,
    path_sort_key,
)


CHANGE_ORDER = {TableChange.ADDED: 0, TableChange.MODIFIED: 1, TableChange.REMOVED: 2}

NO_CHANGES_SUMMARY = "No schema changes detected."


def diff_snapshots(from_snapshot: SchemaSnapshot, to_snapshot: SchemaSnapshot) -> SchemaDrift:
    """Compute the structural drift from one snapshot to another.

    A table name that appears twice in one snapshot, or a field path that
    appears twice in one table, resolves to its last occurrence.

    Raises:
        TypeError: If either snapshot is None.
    """
    if from_snapshot is None or to_snapshot is None:
        raise TypeError("diff_snapshots requires two snapshots")

    from_tables = _tables_by_name(from_snapshot.tables)
    to_tables = _tables_by_name(to_snapshot.tables)

    table_diffs: list[TableDiff] = []

    # --- Added tables ---
    for name, to_table in to_tables.items():
        if name not in from_tables:
            table_diffs.append(
                TableDiff(
                    table=name,
                    change=TableChange.ADDED,
                    field_diffs=sorted(
                        (
                            FieldDiff(path=f.path, change=FieldChange.ADDED, new_types=list(f.types))
                            for f in _fields_by_path(to_table.fields).values()
                        ),
                        key=lambda d: path_sort_key(d.path),
                    ),
                )
            )

    # --- Removed tables ---
    for name, from_table in from_tables.items():
        if name not in to_tables:
            table_diffs.append(
                TableDiff(
                    table=name,
                    change=TableChange.REMOVED,
                    field_diffs=sorted(
                        (
                            FieldDiff(path=f.path, change=FieldChange.REMOVED, old_types=list(f.types))
                            for f in _fields_by_path(from_table.fields).values()
                        ),
                        key=lambda d: path_sort_key(d.path),
                    ),
                )
            )

    # --- Modified tables ---
    for name, from_table in from_tables.items():
        to_table = to_tables.get(name)
        if to_table is None:
            continue

        field_diffs = diff_fields(from_table.fields, to_table.fields)
        if field_diffs:
            table_diffs.append(
                TableDiff(table=name, change=TableChange.MODIFIED, field_diffs=field_diffs)
            )

    table_diffs.sort(key=lambda d: (CHANGE_ORDER[d.change], path_sort_key(d.table)))

    return SchemaDrift(
        from_snapshot_id=from_snapshot.id,
        to_snapshot_id=to_snapshot.id,
        table_diffs=table_diffs,
        summary=build_summary(table_diffs),
    )


def diff_fields(from_fields: list[FieldStat], to_fields: list[FieldStat]) -> list[FieldDiff]:
    """Field-level diff between two versions of a table, sorted by path."""
    from_map = _fields_by_path(from_fields)
    to_map = _fields_by_path(to_fields)
    diffs: list[FieldDiff] = []

    for path, to_field in to_map.items():
        from_field = from_map.get(path)
        if from_field is None:
            diffs.append(FieldDiff(path=path, change=FieldChange.ADDED, new_types=list(to_field.types)))
        elif sorted(from_field.types) != sorted(to_field.types):
            diffs.append(
                FieldDiff(
                    path=path,
                    change=FieldChange.TYPE_CHANGED,
                    old_types=list(from_field.types),
                    new_types=list(to_field.types),
                )
            )

    for path, from_field in from_map.items():
        if path not in to_map:
            diffs.append(
                FieldDiff(path=path, change=FieldChange.REMOVED, old_types=list(from_field.types))
            )

    return sorted(diffs, key=lambda d: path_sort_key(d.path))


def build_summary(table_diffs: list[TableDiff]) -> str:
    """One-sentence summary: "1 table(s) added, 2 table(s) modified (5 field changes)."."""
    added = sum(1 for d in table_diffs if d.change == TableChange.ADDED)
    removed = sum(1 for d in table_diffs if d.change == TableChange.REMOVED)
    modified = [d for d in table_diffs if d.change == TableChange.MODIFIED]

    parts: list[str] = []
    if added:
        parts.append(f"{added} table(s) added")
    if removed:
        parts.append(f"{removed} table(s) removed")
    if modified:
        field_changes = sum(len(d.field_diffs) for d in modified)
        parts.append(f"{len(modified)} table(s) modified ({field_changes} field changes)")

    if not parts:
        return NO_CHANGES_SUMMARY
    return ", ".join(parts) + "."


def _tables_by_name(tables) -> dict[str, TableSchema]:
    return {table.table: table for table in tables}


def _fields_by_path(fields: list[FieldStat]) -> dict[str, FieldStat]:
    return {f.path: f for f in fields}
