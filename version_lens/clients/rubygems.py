"""RubyGems API client."""

from typing import Any

from ..core.parsers import PackageIndex
from .base import BaseRegistryClient


class RubyGemsClient(BaseRegistryClient):
    """Client for the rubygems.org v1 gem API; reads the flat ``version`` field."""

    BASE_URL = "https://rubygems.org/api/v1"
    index = PackageIndex.RUBYGEMS

    def version_url(self, package_name: str) -> str:
        return f"{self.BASE_URL}/gems/{package_name}.json"

    def extract_version(self, data: Any) -> str:
        return data["version"]
