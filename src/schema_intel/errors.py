"""
Custom exceptions for Schema Intel.

The analysis core never raises for data-shape reasons; these cover the
persistence and CLI surfaces.
"""


class SchemaIntelError(Exception):
    """Base exception for all Schema Intel errors."""

    pass


class SnapshotNotFoundError(SchemaIntelError):
    """Raised when a snapshot id has no stored snapshot."""

    def __init__(self, snapshot_id: str):
        self.snapshot_id = snapshot_id
        super().__init__(f"Snapshot not found: {snapshot_id}")


class SnapshotStoreError(SchemaIntelError):
    """Raised when a snapshot cannot be written."""

    pass


class SchemaNotFoundError(SchemaIntelError):
    """Raised by the CLI when no schema entry file exists in the workspace."""

    pass
