"""Core parsing, version comparison and scheduling for version-lens."""

from .parsers import Dependency, Ecosystem, PackageIndex, ParsedDependencies, ParserRegistry, create_registry
from .checker import VersionChecker, VersionInfo, VersionReport, build_report, group_by_latest_version
from .scheduler import UpdateScheduler

__all__ = [
    "Dependency",
    "Ecosystem",
    "PackageIndex",
    "ParsedDependencies",
    "ParserRegistry",
    "UpdateScheduler",
    "VersionChecker",
    "VersionInfo",
    "VersionReport",
    "build_report",
    "create_registry",
    "group_by_latest_version",
]
