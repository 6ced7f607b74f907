"""version-lens - annotate manifest dependencies with their latest published versions."""

__version__ = "0.1.0"

from .core import Dependency, Ecosystem, PackageIndex, UpdateScheduler, VersionChecker, VersionInfo, VersionReport
from .core.parsers import create_registry
from .changelog import ChangelogCache, ChangelogResolver
from .clients import NpmClient, PyPIClient, RubyGemsClient
from .output import ConsoleFormatter, JSONFormatter

__all__ = [
    "ChangelogCache",
    "ChangelogResolver",
    "ConsoleFormatter",
    "Dependency",
    "Ecosystem",
    "JSONFormatter",
    "NpmClient",
    "PackageIndex",
    "PyPIClient",
    "RubyGemsClient",
    "UpdateScheduler",
    "VersionChecker",
    "VersionInfo",
    "VersionReport",
    "create_registry",
]
