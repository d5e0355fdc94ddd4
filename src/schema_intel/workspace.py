"""Workspace discovery for Schema Intel.

Implements the file-system side of the analysis: reading schema sources for
the parser's import walk, locating convex/schema.ts, and enumerating query
source files for index coverage. Everything here is bounded by a result cap
and honours gitignore-style patterns (node_modules and friends by default).
"""

import os
from pathlib import Path
from typing import Iterator

import pathspec
from loguru import logger

from schema_intel.file_utils import build_gitignore_spec, read_text_file, should_ignore_file


SCHEMA_FILE_NAMES = ("schema.ts", "schema.js")
QUERY_FILE_SUFFIXES = (".ts", ".tsx", ".js", ".jsx")
SCHEMA_DIR_NAME = "convex"
GENERATED_DIR_NAME = "_generated"


class FileSystemResolver:
    """Reads source files relative to a root directory.

    Paths that escape the root resolve to None, the same as missing files.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def read_text(self, path: str) -> str | None:
        target = (self.root / path).resolve()
        if not target.is_relative_to(self.root):
            logger.debug(f"Refusing to read {path}: outside {self.root}")
            return None
        if not target.is_file():
            return None
        return read_text_file(target)


def _walk_files(root: Path, spec: pathspec.PathSpec) -> Iterator[Path]:
    """Yield files under root in sorted order, pruning ignored directories."""
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        relative_dir = current.relative_to(root)

        dirnames[:] = sorted(
            name
            for name in dirnames
            if not spec.match_file(f"{(relative_dir / name).as_posix()}/")
        )
        for name in sorted(filenames):
            path = current / name
            if not should_ignore_file(path, root, spec):
                yield path


def find_schema_file(root: str | Path, limit: int = 10) -> Path | None:
    """Find convex/schema.{ts,js} at any depth under root.

    At most `limit` candidates are collected; the one closest to the root
    (shortest path) wins.
    """
    root = Path(root)
    if not root.is_dir():
        return None

    candidates: list[Path] = []
    for path in _walk_files(root, build_gitignore_spec(root)):
        if path.name in SCHEMA_FILE_NAMES and path.parent.name == SCHEMA_DIR_NAME:
            candidates.append(path)
            if len(candidates) >= limit:
                break

    if not candidates:
        return None
    return min(candidates, key=lambda p: len(str(p)))


def is_query_file(path: Path, root: Path) -> bool:
    """Whether a file is query source: inside a convex/ directory, not schema or generated code."""
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        return False

    directories = parts[:-1]
    return (
        path.suffix in QUERY_FILE_SUFFIXES
        and SCHEMA_DIR_NAME in directories
        and GENERATED_DIR_NAME not in directories
        and path.name not in SCHEMA_FILE_NAMES
    )


def find_query_files(root: str | Path, limit: int = 200) -> list[Path]:
    """Query source files under any convex/ directory, at most `limit` of them."""
    root = Path(root)
    if not root.is_dir():
        return []

    files: list[Path] = []
    for path in _walk_files(root, build_gitignore_spec(root)):
        if is_query_file(path, root):
            files.append(path)
            if len(files) >= limit:
                logger.debug(f"Query file cap of {limit} reached under {root}")
                break
    return files


def load_query_sources(paths: list[Path], root: str | Path | None = None) -> dict[str, str | None]:
    """Read query files into an ordered mapping of display path -> text.

    Unreadable files map to None so the analyzer can skip them.
    """
    sources: dict[str, str | None] = {}
    for path in paths:
        key = str(path)
        if root is not None:
            try:
                key = path.relative_to(root).as_posix()
            except ValueError:
                pass
        sources[key] = read_text_file(path)
    return sources
