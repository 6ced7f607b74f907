"""npm registry client."""

from typing import Any

from ..core.parsers import PackageIndex
from .base import BaseRegistryClient


class NpmClient(BaseRegistryClient):
    """Client for registry.npmjs.org; reads the ``latest`` distribution tag."""

    BASE_URL = "https://registry.npmjs.org"
    index = PackageIndex.NPM

    def version_url(self, package_name: str) -> str:
        return f"{self.BASE_URL}/{package_name}"

    def extract_version(self, data: Any) -> str:
        return data["dist-tags"]["latest"]
