"""Package index clients for version-lens."""

from typing import Dict, Optional

import aiohttp

from ..core.parsers import PackageIndex
from .base import BaseRegistryClient, HTTPClient
from .npm import NpmClient
from .pypi import PyPIClient
from .rubygems import RubyGemsClient


def create_clients(session: Optional[aiohttp.ClientSession] = None) -> Dict[PackageIndex, BaseRegistryClient]:
    """Build one registry client per package index, optionally sharing a session."""
    return {
        PackageIndex.NPM: NpmClient(session),
        PackageIndex.PYPI: PyPIClient(session),
        PackageIndex.RUBYGEMS: RubyGemsClient(session),
    }


__all__ = [
    "BaseRegistryClient",
    "HTTPClient",
    "NpmClient",
    "PyPIClient",
    "RubyGemsClient",
    "create_clients",
]
