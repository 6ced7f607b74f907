"""Ruby Gemfile parser."""

import re
from typing import Optional

from ...utils.logging import get_logger
from .base import BaseParser, Dependency, Ecosystem, strip_range_operators


logger = get_logger("version_lens.parsers.ruby")

# gem 'rails', '~> 7.0.0'
GEM_PATTERN = re.compile(r"""^\s*gem\s+['"]([^'"]+)['"](?:\s*,\s*['"]([^'"]*)['"])?""")


class GemfileParser(BaseParser):
    """Parser for Gemfile ``gem`` declarations.

    Gems declared without a version argument are not tracked.
    """

    ecosystem = Ecosystem.GEMFILE

    def parse_line(self, line: str, line_number: Optional[int] = None) -> Optional[Dependency]:
        match = GEM_PATTERN.match(line)
        if not match:
            return None

        name, specifier = match.groups()
        if specifier is None:
            return None

        version = strip_range_operators(specifier)
        if not version:
            logger.warning(f"Failed to parse version for Ruby gem: {name}")
            return None

        logger.debug(f"Parsed Ruby gem: {name}@{version}")
        return Dependency(
            name=name,
            version=version,
            ecosystem=self.ecosystem,
            line_number=line_number,
            specifier=specifier,
        )
