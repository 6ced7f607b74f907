"""Python manifest parsers."""

import re
from typing import Any, Dict, Iterator, List, Optional

from ...utils.logging import get_logger
from .base import LATEST, BaseParser, Dependency, Ecosystem

try:
    import tomllib
except ImportError:
    import tomli as tomllib


logger = get_logger("version_lens.parsers.python")

_NAME = r"[A-Za-z0-9\-_.]+"
_VERSION = r"[0-9A-Za-z\-_.]+"

# Tried in order, first match wins
REQUIREMENT_PATTERNS = [
    re.compile(rf"^({_NAME})\s*(===|==|>=|<=|~=|!=|>|<)\s*({_VERSION})"),
    re.compile(rf"^({_NAME})\[[^\]]+\]\s*(===|==|>=|<=|~=|!=|>|<)\s*({_VERSION})"),
    re.compile(rf"^({_NAME})$"),
]

TABLE_ENTRY_PATTERN = re.compile(rf"^({_NAME})\s*(==|>=|~=)\s*({_VERSION})")

QUOTED_STRING_PATTERN = re.compile(r"""["']([^"']+)["']""")


class RequirementsParser(BaseParser):
    """Parser for line-oriented requirements.txt files."""

    ecosystem = Ecosystem.REQUIREMENTS

    def parse_line(self, line: str, line_number: Optional[int] = None) -> Optional[Dependency]:
        # Remove comments
        line = re.sub(r"#.*$", "", line).strip()
        # Blank, or a pip option such as -r / -e / --index-url
        if not line or line.startswith("-"):
            return None

        for pattern in REQUIREMENT_PATTERNS:
            match = pattern.match(line)
            if not match:
                continue

            name = match.group(1)
            if match.lastindex and match.lastindex >= 3:
                operator, version = match.group(2), match.group(3)
                specifier = f"{operator}{version}"
            else:
                version, specifier = LATEST, None

            return Dependency(
                name=name,
                version=version,
                ecosystem=self.ecosystem,
                line_number=line_number,
                specifier=specifier,
            )

        return None


class PyProjectParser(BaseParser):
    """Parser for pyproject.toml files.

    Lines are only buffered by ``parse_line``; declarations come from
    ``parse_document`` once the whole file has been ingested. Both
    ``project.dependencies`` and every group of
    ``project.optional-dependencies`` are read and flattened in document
    order.
    """

    ecosystem = Ecosystem.PYPROJECT

    def __init__(self) -> None:
        self._lines: List[str] = []

    def reset(self) -> None:
        self._lines = []

    def parse_line(self, line: str, line_number: Optional[int] = None) -> Optional[Dependency]:
        self._lines.append(line)
        return None

    @property
    def content(self) -> str:
        return "".join(f"{line}\n" for line in self._lines)

    def parse_document(self) -> List[Dependency]:
        try:
            data = tomllib.loads(self.content)
        except tomllib.TOMLDecodeError as e:
            logger.warning(f"Failed to parse pyproject.toml: {e}")
            return []

        dependencies = []
        for entry in self._iter_entries(data):
            dependency = self._parse_entry(entry, self._find_line(entry))
            if dependency:
                dependencies.append(dependency)
        return dependencies

    def parse_declaration(self, line: str, line_number: Optional[int] = None) -> Optional[Dependency]:
        """Recognize a quoted ``name<op>version`` requirement on a single line."""
        for entry in QUOTED_STRING_PATTERN.findall(line):
            dependency = self._parse_entry(entry, line_number)
            if dependency:
                return dependency
        return None

    def _iter_entries(self, data: Dict[str, Any]) -> Iterator[str]:
        """Yield requirement strings from the primary and optional lists."""
        project = data.get("project")
        if not isinstance(project, dict):
            return

        primary = project.get("dependencies")
        if isinstance(primary, list):
            yield from (entry for entry in primary if isinstance(entry, str))

        optional = project.get("optional-dependencies")
        if isinstance(optional, dict):
            for group in optional.values():
                if isinstance(group, list):
                    yield from (entry for entry in group if isinstance(entry, str))

    def _parse_entry(self, entry: str, line_number: Optional[int]) -> Optional[Dependency]:
        match = TABLE_ENTRY_PATTERN.match(entry.strip())
        if not match:
            return None

        name, operator, version = match.groups()
        return Dependency(
            name=name,
            version=version,
            ecosystem=self.ecosystem,
            line_number=line_number,
            specifier=f"{operator}{version}",
        )

    def _find_line(self, entry: str) -> Optional[int]:
        """Locate the first buffered line holding the quoted entry."""
        candidates = (f'"{entry}"', f"'{entry}'")
        for index, line in enumerate(self._lines):
            if any(candidate in line for candidate in candidates):
                return index
        return None
