"""Snapshot persistence for Schema Intel.

Each snapshot is one JSON file, <snapshot id>.json, in the store directory.
Snapshots are immutable once written; saving the same id again replaces the
file with identical content.
"""

import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from loguru import logger
from pydantic import ValidationError

from schema_intel.errors import SnapshotNotFoundError, SnapshotStoreError
from schema_intel.file_utils import FileWriteError, ensure_directory, read_text_file, write_file_atomic
from schema_intel.schema.models import RelationEdge, SchemaSnapshot, TableSchema, utc_now
from schema_intel.schemas import SchemaSnapshotModel


SNAPSHOT_SUFFIX = ".json"
SNAPSHOT_ID_PATTERN = re.compile(r"[\w-]+")


def create_snapshot(
    deployment_id: str,
    tables: Iterable[TableSchema],
    relations: Iterable[RelationEdge],
) -> SchemaSnapshot:
    """Capture tables and relations as a new snapshot with a fresh id."""
    return SchemaSnapshot(
        id=uuid.uuid4().hex,
        deployment_id=deployment_id,
        created_at=utc_now(),
        tables=tuple(tables),
        relations=tuple(relations),
    )


def _created_at_key(snapshot: SchemaSnapshot) -> datetime:
    created_at = snapshot.created_at
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=timezone.utc)
    return created_at


class SnapshotStore:
    """Stores snapshots as JSON files in a directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory).expanduser()

    def _path_for(self, snapshot_id: str) -> Path | None:
        if not SNAPSHOT_ID_PATTERN.fullmatch(snapshot_id):
            return None
        return self.directory / f"{snapshot_id}{SNAPSHOT_SUFFIX}"

    def save(self, snapshot: SchemaSnapshot) -> Path:
        """Write a snapshot to disk.

        Raises:
            SnapshotStoreError: If the id is not a valid file name or the write fails.
        """
        path = self._path_for(snapshot.id)
        if path is None:
            raise SnapshotStoreError(f"Invalid snapshot id: {snapshot.id!r}")

        content = SchemaSnapshotModel.from_dataclass(snapshot).to_json()
        try:
            ensure_directory(self.directory)
            write_file_atomic(path, content)
        except (OSError, FileWriteError) as e:
            raise SnapshotStoreError(f"Failed to save snapshot {snapshot.id}: {e}") from e

        logger.debug(f"Saved snapshot {snapshot.id} for {snapshot.deployment_id} to {path}")
        return path

    def get(self, snapshot_id: str) -> SchemaSnapshot | None:
        """Load a snapshot by id, or None if it is absent or unreadable."""
        path = self._path_for(snapshot_id)
        if path is None or not path.is_file():
            return None
        return self._load(path)

    def require(self, snapshot_id: str) -> SchemaSnapshot:
        """Load a snapshot by id.

        Raises:
            SnapshotNotFoundError: If no readable snapshot has this id.
        """
        snapshot = self.get(snapshot_id)
        if snapshot is None:
            raise SnapshotNotFoundError(snapshot_id)
        return snapshot

    def _load(self, path: Path) -> SchemaSnapshot | None:
        content = read_text_file(path)
        if content is None:
            logger.warning(f"Skipping unreadable snapshot file {path}")
            return None
        try:
            return SchemaSnapshotModel.model_validate_json(content).to_dataclass()
        except ValidationError as e:
            logger.warning(f"Skipping invalid snapshot file {path}: {e.error_count()} error(s)")
            return None

    def list(self, deployment_id: str | None = None) -> list[SchemaSnapshot]:
        """All readable snapshots, newest first, optionally for one deployment."""
        if not self.directory.is_dir():
            return []

        snapshots: list[SchemaSnapshot] = []
        for path in sorted(self.directory.glob(f"*{SNAPSHOT_SUFFIX}")):
            if not path.is_file():
                continue
            snapshot = self._load(path)
            if snapshot is None:
                continue
            if deployment_id is None or snapshot.deployment_id == deployment_id:
                snapshots.append(snapshot)

        snapshots.sort(key=_created_at_key, reverse=True)
        return snapshots
