"""Node.js package.json parser."""

import re
from typing import Dict, Optional

from ...utils.logging import get_logger
from .base import BaseParser, Dependency, Ecosystem, strip_range_operators


logger = get_logger("version_lens.parsers.nodejs")

DEPENDENCY_SECTIONS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)

PAIR_PATTERN = re.compile(r'"([^"]+)":\s*"([^"]+)"')


class PackageJsonParser(BaseParser):
    """Line-oriented parser for package.json files.

    Tracks whether the cursor is inside one of the dependency sections.
    A section opens on the line carrying its quoted key and every section
    closes on a line that is exactly ``},`` once trimmed.
    """

    ecosystem = Ecosystem.PACKAGE_JSON

    def __init__(self) -> None:
        self._active: Dict[str, bool] = {}
        self.reset()

    def reset(self) -> None:
        self._active = {section: False for section in DEPENDENCY_SECTIONS}

    @property
    def in_dependency_block(self) -> bool:
        return any(self._active.values())

    def parse_line(self, line: str, line_number: Optional[int] = None) -> Optional[Dependency]:
        for section in DEPENDENCY_SECTIONS:
            if f'"{section}"' in line:
                # "dependencies": {} opens and closes on one line
                if not re.search(r"\{\s*\}", line):
                    self._active[section] = True
                return None

        if line.strip() == "},":
            self.reset()
            return None

        if not self.in_dependency_block:
            return None

        return self._parse_pair(line, line_number)

    def parse_declaration(self, line: str, line_number: Optional[int] = None) -> Optional[Dependency]:
        # A lone line carries no section context, so any "key": "value" pair counts
        if any(f'"{section}"' in line for section in DEPENDENCY_SECTIONS):
            return None
        return self._parse_pair(line, line_number)

    def _parse_pair(self, line: str, line_number: Optional[int]) -> Optional[Dependency]:
        match = PAIR_PATTERN.search(line)
        if not match:
            return None

        name, specifier = match.groups()
        version = strip_range_operators(specifier)
        if not version:
            return None

        logger.debug(f"Parsed npm dependency: {name}@{version}")
        return Dependency(
            name=name,
            version=version,
            ecosystem=self.ecosystem,
            line_number=line_number,
            specifier=specifier,
        )
