"""Gitignore pattern handling."""

from pathlib import Path
from typing import List

import pathspec


# Default ignore patterns for JavaScript/TypeScript workspaces
DEFAULT_PATTERNS = [
    # Dependencies and build output
    "node_modules/",
    "dist/",
    "build/",
    "out/",
    ".next/",
    ".turbo/",
    "coverage/",
    # Version control
    ".git/",
    # IDE and editor files
    ".idea/",
    ".vscode/",
    ".DS_Store",
]


def get_gitignore_patterns(project_root: Path) -> List[str]:
    """Get gitignore patterns from .gitignore file.

    Args:
        project_root: Root directory containing .gitignore

    Returns:
        List of gitignore pattern strings, defaults first
    """
    gitignore_path = project_root / ".gitignore"
    patterns = list(DEFAULT_PATTERNS)

    if gitignore_path.exists():
        try:
            with open(gitignore_path, encoding="utf-8") as f:
                # Add each non-empty line that doesn't start with #
                patterns.extend(
                    line.strip() for line in f if line.strip() and not line.strip().startswith("#")
                )
        except (OSError, UnicodeDecodeError):
            pass

    return patterns


def build_gitignore_spec(project_root: Path) -> pathspec.PathSpec:
    """Build a PathSpec object from gitignore patterns.

    Args:
        project_root: Root directory containing .gitignore

    Returns:
        PathSpec object for matching paths
    """
    patterns = get_gitignore_patterns(project_root)
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


def should_ignore_file(file_path: Path, project_root: Path, spec: pathspec.PathSpec | None = None) -> bool:
    """Check if a file should be ignored based on gitignore patterns.

    Args:
        file_path: Path to the file to check
        project_root: Root directory containing .gitignore
        spec: Prebuilt spec, to avoid re-reading .gitignore for every file

    Returns:
        True if the file should be ignored, False otherwise
    """
    if spec is None:
        spec = build_gitignore_spec(project_root)

    # Get the relative path from the project root
    try:
        relative_path = Path(file_path).relative_to(project_root)
    except ValueError:
        # If the path is not relative to the project root, don't ignore it
        return False

    return spec.match_file(relative_path.as_posix())
