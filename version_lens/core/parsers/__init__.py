"""Manifest parsers for the supported ecosystems."""

from .base import (
    LATEST,
    BaseParser,
    Dependency,
    Ecosystem,
    PackageIndex,
    ParsedDependencies,
    strip_range_operators,
)
from .python import RequirementsParser, PyProjectParser
from .nodejs import PackageJsonParser
from .ruby import GemfileParser
from .registry import ParserRegistry


def create_registry() -> ParserRegistry:
    """Build a registry with the built-in parser for every ecosystem."""
    return ParserRegistry({
        Ecosystem.REQUIREMENTS: RequirementsParser,
        Ecosystem.PACKAGE_JSON: PackageJsonParser,
        Ecosystem.PYPROJECT: PyProjectParser,
        Ecosystem.GEMFILE: GemfileParser,
    })


__all__ = [
    "LATEST",
    "BaseParser",
    "Dependency",
    "Ecosystem",
    "PackageIndex",
    "ParsedDependencies",
    "ParserRegistry",
    "RequirementsParser",
    "PyProjectParser",
    "PackageJsonParser",
    "GemfileParser",
    "create_registry",
    "strip_range_operators",
]
