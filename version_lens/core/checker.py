"""Version comparison and per-manifest aggregation for version-lens."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from packaging.version import InvalidVersion, Version

from ..clients import BaseRegistryClient, create_clients
from ..utils.logging import get_logger
from .parsers import Dependency, Ecosystem, PackageIndex, ParserRegistry, create_registry


logger = get_logger("version_lens.checker")


@dataclass
class VersionInfo:
    """A declared dependency joined with its registry lookup.

    ``latest_version`` is None when the lookup failed.
    """

    name: str
    current_version: str
    latest_version: Optional[str] = None
    line_number: Optional[int] = None

    @classmethod
    def from_dependency(cls, dependency: Dependency, latest_version: Optional[str]) -> "VersionInfo":
        return cls(
            name=dependency.name,
            current_version=dependency.version,
            latest_version=latest_version,
            line_number=dependency.line_number,
        )

    @property
    def is_up_to_date(self) -> bool:
        """Exact, case-sensitive string comparison of the stripped versions."""
        return self.latest_version is not None and self.latest_version == self.current_version

    @property
    def update_kind(self) -> str:
        """Size of the pending update: major, minor, patch or unknown.

        Informational only; it never affects :attr:`is_up_to_date`.
        """
        if self.latest_version is None or self.is_up_to_date:
            return "unknown"

        try:
            old_ver = Version(self.current_version)
            new_ver = Version(self.latest_version)
        except InvalidVersion:
            return "unknown"

        if new_ver <= old_ver:
            return "unknown"
        if new_ver.major > old_ver.major:
            return "major"
        if new_ver.minor > old_ver.minor:
            return "minor"
        if new_ver.micro > old_ver.micro:
            return "patch"
        return "unknown"


@dataclass
class VersionReport:
    """Verdicts for one manifest pass, split by up-to-date status."""

    up_to_date: List[VersionInfo] = field(default_factory=list)
    needs_update: List[VersionInfo] = field(default_factory=list)
    source: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.up_to_date) + len(self.needs_update)

    def grouped_by_latest(self) -> Dict[str, List[VersionInfo]]:
        return group_by_latest_version(self.needs_update)


def group_by_latest_version(infos: Iterable[VersionInfo]) -> Dict[str, List[VersionInfo]]:
    """Group outdated entries by target version, in first-seen order."""
    groups: Dict[str, List[VersionInfo]] = {}
    for info in infos:
        if info.latest_version is None:
            continue
        groups.setdefault(info.latest_version, []).append(info)
    return groups


def build_report(infos: Iterable[VersionInfo], source: Optional[str] = None) -> VersionReport:
    """Classify version infos; entries whose lookup failed are left out.

    Args:
        infos: Version infos in document order
        source: Optional manifest name recorded on the report

    Returns:
        Version report
    """
    report = VersionReport(source=source)
    for info in infos:
        if info.latest_version is None:
            continue
        if info.is_up_to_date:
            report.up_to_date.append(info)
        else:
            report.needs_update.append(info)
    return report


class VersionChecker:
    """Runs manifest processing passes.

    One pass resets the ecosystem's parser, feeds it every line, runs the
    whole-document parse, and looks each declaration up on its package
    index one at a time in document order.
    """

    def __init__(
        self,
        parsers: Optional[ParserRegistry] = None,
        clients: Optional[Mapping[PackageIndex, BaseRegistryClient]] = None,
    ) -> None:
        self.parsers = parsers or create_registry()
        self.clients: Dict[PackageIndex, BaseRegistryClient] = dict(clients or create_clients())

        missing = [index.name for index in PackageIndex if index not in self.clients]
        if missing:
            raise ValueError(f"No registry client for: {', '.join(missing)}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        for client in self.clients.values():
            await client.close()

    def parse_lines(self, lines: Iterable[str], ecosystem: Ecosystem) -> List[Dependency]:
        """Run the parsing half of a pass.

        Args:
            lines: Manifest lines in order
            ecosystem: Manifest ecosystem

        Returns:
            Declarations from line parsing followed by the document parse
        """
        return self.parsers.get_parser(ecosystem).parse_lines(lines).dependencies

    async def lookup(self, dependency: Dependency) -> VersionInfo:
        client = self.clients[dependency.ecosystem.package_index]
        latest_version = await client.get_latest_version(dependency.name)
        if latest_version is None:
            logger.warning(f"Failed to fetch latest version for {dependency.name}")
        return VersionInfo.from_dependency(dependency, latest_version)

    async def lookup_all(self, dependencies: Iterable[Dependency]) -> List[VersionInfo]:
        """Resolve declarations one at a time, in document order."""
        infos = []
        for dependency in dependencies:
            logger.debug(f"Checking {dependency.key}")
            infos.append(await self.lookup(dependency))
        return infos

    async def check_lines(self, lines: Iterable[str], ecosystem: Ecosystem) -> List[VersionInfo]:
        """Parse manifest lines and resolve every declaration.

        Returns:
            One version info per declaration, in document order
        """
        return await self.lookup_all(self.parse_lines(lines, ecosystem))

    async def check_text(self, text: str, file_name: str) -> VersionReport:
        """Check manifest text.

        Args:
            text: Complete manifest contents
            file_name: File name or path used to pick the ecosystem

        Returns:
            Version report

        Raises:
            ValueError: If the file name is not a supported manifest
        """
        ecosystem = Ecosystem.from_filename(file_name)
        if ecosystem is None:
            raise ValueError(f"Unsupported manifest: {file_name}")

        infos = await self.check_lines(text.splitlines(), ecosystem)
        return build_report(infos, source=file_name)

    async def check_file(self, file_path: Path) -> VersionReport:
        parser = self.parsers.find_parser_for_file(file_path)
        if parser is None:
            raise ValueError(f"Unsupported manifest: {file_path}")

        parsed = parser.parse(file_path)
        infos = await self.lookup_all(parsed.dependencies)
        return build_report(infos, source=str(file_path))
