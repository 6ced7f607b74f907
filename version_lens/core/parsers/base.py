"""Base parser class and data models for manifest parsing."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional


LATEST = "latest"


class PackageIndex(str, Enum):
    """Remote package index queried for a manifest's dependencies."""

    NPM = "npm"
    PYPI = "pypi"
    RUBYGEMS = "rubygems"


class Ecosystem(str, Enum):
    """Supported manifest formats, keyed by their file name."""

    REQUIREMENTS = "requirements.txt"
    PACKAGE_JSON = "package.json"
    PYPROJECT = "pyproject.toml"
    GEMFILE = "Gemfile"

    @property
    def file_name(self) -> str:
        return self.value

    @property
    def package_index(self) -> PackageIndex:
        """Package index that publishes this manifest's dependencies."""
        return _PACKAGE_INDEXES[self]

    @classmethod
    def from_filename(cls, name: str, case_sensitive: bool = True) -> Optional["Ecosystem"]:
        """Detect the ecosystem from a file name or path.

        Only the base name is considered.

        Args:
            name: File name or path
            case_sensitive: Require an exact match of the base name

        Returns:
            Matching ecosystem or None
        """
        base_name = Path(name).name
        for ecosystem in cls:
            if case_sensitive:
                if base_name == ecosystem.file_name:
                    return ecosystem
            elif base_name.lower() == ecosystem.file_name.lower():
                return ecosystem
        return None


_PACKAGE_INDEXES: Dict[Ecosystem, PackageIndex] = {
    Ecosystem.REQUIREMENTS: PackageIndex.PYPI,
    Ecosystem.PACKAGE_JSON: PackageIndex.NPM,
    Ecosystem.PYPROJECT: PackageIndex.PYPI,
    Ecosystem.GEMFILE: PackageIndex.RUBYGEMS,
}


def strip_range_operators(version: str, operators: str = "^~>=<") -> str:
    """Strip leading range/comparison operators from a version string.

    Args:
        version: Raw version constraint, e.g. ``^1.2.3`` or ``~> 7.0.0``
        operators: Characters treated as operators

    Returns:
        Version with leading operators and surrounding whitespace removed
    """
    return version.strip().lstrip(operators).strip()


@dataclass(frozen=True)
class Dependency:
    """A single ``(name, version)`` declaration parsed from a manifest.

    ``version`` is always operator-stripped. A name-only declaration uses
    the ``"latest"`` sentinel.
    """

    name: str
    version: str
    ecosystem: Ecosystem
    line_number: Optional[int] = None
    specifier: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Dependency name cannot be empty")

    @property
    def key(self) -> str:
        """Cache key for this declaration."""
        return f"{self.name}@{self.version}"


@dataclass
class ParsedDependencies:
    """Container for dependencies parsed from one manifest."""

    dependencies: List[Dependency] = field(default_factory=list)
    source_file: Optional[Path] = None
    ecosystem: Optional[Ecosystem] = None

    def add_dependency(self, dependency: Dependency) -> None:
        self.dependencies.append(dependency)


class BaseParser(ABC):
    """Abstract base class for manifest parsers.

    A parser is a stateful object owned by one processing pass. ``reset``
    must be called before each new manifest; ``parse_lines``, ``parse_text``
    and ``parse`` do this themselves.
    """

    ecosystem: Ecosystem

    @abstractmethod
    def parse_line(self, line: str, line_number: Optional[int] = None) -> Optional[Dependency]:
        """Parse a single manifest line.

        Args:
            line: Raw line text
            line_number: Zero-based line index, recorded on the declaration

        Returns:
            Parsed dependency or None when the line declares nothing
        """

    def parse_document(self) -> List[Dependency]:
        """Parse state accumulated from ``parse_line`` calls as a whole document."""
        return []

    def reset(self) -> None:
        """Clear session state before a new manifest pass."""

    def parse_declaration(self, line: str, line_number: Optional[int] = None) -> Optional[Dependency]:
        """Parse one line on its own, outside of any manifest pass.

        Formats whose declarations depend on surrounding lines override this
        to recognize a declaration from the line text alone.
        """
        self.reset()
        return self.parse_line(line, line_number)

    def parse_lines(self, lines: Iterable[str], source_file: Optional[Path] = None) -> ParsedDependencies:
        """Run a full pass: reset, every line in order, then the document parse.

        Args:
            lines: Manifest lines in order
            source_file: Optional path recorded on the result

        Returns:
            Parsed dependencies in document order
        """
        result = ParsedDependencies(source_file=source_file, ecosystem=self.ecosystem)

        self.reset()
        for line_number, line in enumerate(lines):
            dependency = self.parse_line(line, line_number)
            if dependency:
                result.add_dependency(dependency)

        for dependency in self.parse_document():
            result.add_dependency(dependency)

        return result

    def parse_text(self, text: str, source_file: Optional[Path] = None) -> ParsedDependencies:
        return self.parse_lines(text.splitlines(), source_file=source_file)

    def parse(self, file_path: Path) -> ParsedDependencies:
        """Parse a manifest file.

        Args:
            file_path: Path to the file to parse

        Returns:
            Parsed dependencies from the file
        """
        self.validate_file(file_path)
        text = file_path.read_text(encoding="utf-8")
        return self.parse_text(text, source_file=file_path)

    def validate_file(self, file_path: Path) -> None:
        """Validate that the file exists and is a regular file.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a file
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        if not file_path.is_file():
            raise ValueError(f"Path is not a file: {file_path}")
