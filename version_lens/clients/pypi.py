"""PyPI JSON API client."""

from typing import Any

from ..core.parsers import PackageIndex
from .base import BaseRegistryClient


class PyPIClient(BaseRegistryClient):
    """Client for the PyPI JSON API; reads ``info.version``."""

    BASE_URL = "https://pypi.org/pypi"
    index = PackageIndex.PYPI

    def version_url(self, package_name: str) -> str:
        return f"{self.BASE_URL}/{package_name}/json"

    def extract_version(self, data: Any) -> str:
        return data["info"]["version"]
