"""Path utilities for finding manifest files and filtering paths."""

import fnmatch
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from ..core.parsers.base import Ecosystem


DEFAULT_IGNORE_PATTERNS = [
    "*/node_modules/*",
    "*/.git/*",
    "*/__pycache__/*",
    "*/.venv/*",
    "*/venv/*",
    "*/env/*",
    "*/dist/*",
    "*/build/*",
    "*/vendor/*",
    "*/.tox/*",
    "*/.pytest_cache/*",
]


@dataclass
class ManifestFile:
    """A manifest file found on disk."""

    path: Path
    ecosystem: Ecosystem


class PathFilter:
    """Filters paths based on glob patterns."""

    def __init__(self, ignore_patterns: Optional[List[str]] = None) -> None:
        """Initialize path filter.

        Args:
            ignore_patterns: Additional glob patterns to ignore
        """
        self.ignore_patterns = DEFAULT_IGNORE_PATTERNS + list(ignore_patterns or [])

    def is_ignored(self, path: Path) -> bool:
        path_str = path.as_posix()
        return any(fnmatch.fnmatch(path_str, pattern) for pattern in self.ignore_patterns)


class ManifestFinder:
    """Finds supported manifest files in a project directory."""

    def __init__(self, ignore_patterns: Optional[List[str]] = None) -> None:
        self.path_filter = PathFilter(ignore_patterns)

    def find_manifests(self, root_path: Path) -> List[ManifestFile]:
        """Find all manifests in a directory tree.

        Args:
            root_path: Root directory to search, or a single manifest file

        Returns:
            Manifests sorted by path
        """
        if not root_path.exists():
            raise ValueError(f"Root path does not exist: {root_path}")

        if root_path.is_file():
            ecosystem = Ecosystem.from_filename(root_path.name)
            return [ManifestFile(root_path, ecosystem)] if ecosystem else []

        manifests = []
        for file_path in self._walk_files(root_path):
            ecosystem = Ecosystem.from_filename(file_path.name)
            if ecosystem:
                manifests.append(ManifestFile(path=file_path, ecosystem=ecosystem))

        return sorted(manifests, key=lambda manifest: manifest.path)

    def _walk_files(self, root_path: Path) -> Iterator[Path]:
        for ecosystem in Ecosystem:
            for file_path in root_path.rglob(ecosystem.file_name):
                relative = Path("/") / file_path.relative_to(root_path)
                if file_path.is_file() and not self.path_filter.is_ignored(relative):
                    yield file_path


def find_manifests(
    root_path: Path,
    ignore_patterns: Optional[List[str]] = None
) -> List[ManifestFile]:
    """Convenience function to find manifest files.

    Args:
        root_path: Root directory to search
        ignore_patterns: Additional ignore patterns

    Returns:
        List of found manifests
    """
    return ManifestFinder(ignore_patterns).find_manifests(root_path)
