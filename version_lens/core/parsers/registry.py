"""Registry mapping each manifest ecosystem to its parser."""

from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

from .base import BaseParser, Ecosystem, PackageIndex


ParserFactory = Callable[[], BaseParser]


class ParserRegistry:
    """Closed dispatch table from :class:`Ecosystem` to parser.

    Every ecosystem must have a factory; parsers are created lazily and
    then reused, so callers must ``reset`` them before each manifest pass.
    """

    def __init__(self, factories: Mapping[Ecosystem, ParserFactory]) -> None:
        missing = [ecosystem.name for ecosystem in Ecosystem if ecosystem not in factories]
        if missing:
            raise ValueError(f"No parser registered for: {', '.join(missing)}")

        self._factories: Dict[Ecosystem, ParserFactory] = dict(factories)
        self._parsers: Dict[Ecosystem, BaseParser] = {}

    def get_parser(self, ecosystem: Ecosystem) -> BaseParser:
        """Get the parser instance for an ecosystem.

        Args:
            ecosystem: Manifest ecosystem

        Returns:
            Parser instance
        """
        parser = self._parsers.get(ecosystem)
        if parser is None:
            parser = self._factories[ecosystem]()
            self._parsers[ecosystem] = parser
        return parser

    def find_parser_for_file(self, file_path: Path) -> Optional[BaseParser]:
        """Find a parser that can handle the given file.

        Args:
            file_path: Path to the file

        Returns:
            Parser that can handle the file or None
        """
        ecosystem = Ecosystem.from_filename(file_path.name)
        if ecosystem is None:
            return None
        return self.get_parser(ecosystem)

    def get_supported_indexes(self) -> List[PackageIndex]:
        return sorted({ecosystem.package_index for ecosystem in Ecosystem}, key=lambda index: index.value)
