"""Shared async HTTP plumbing for registry and changelog lookups."""

import asyncio
import ssl
from abc import ABC, abstractmethod
from typing import Any, Optional

import aiohttp
import certifi

from ..core.parsers import PackageIndex
from ..utils.logging import get_logger


# Failures a single lookup recovers from
LOOKUP_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ValueError, KeyError, TypeError)


class HTTPClient:
    """Thin aiohttp wrapper issuing read-only GET requests.

    The session is created lazily and reused; use the client as an async
    context manager or call :meth:`close` when done.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None) -> None:
        self._session = session
        self._owns_session = session is None
        self._ssl_context = ssl.create_default_context(cafile=certifi.where())

    async def __aenter__(self):
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None if self._owns_session else self._session

    def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if not self._session or self._session.closed:
            connector = aiohttp.TCPConnector(ssl=self._ssl_context)
            self._session = aiohttp.ClientSession(connector=connector)
            self._owns_session = True
        return self._session

    async def fetch_json(self, url: str) -> Any:
        """GET a URL and decode its JSON body.

        Raises:
            aiohttp.ClientResponseError: On a non-2xx status
            ValueError: If the body is not valid JSON
        """
        session = self._get_session()
        async with session.get(url, headers={"Accept": "application/json"}) as response:
            response.raise_for_status()
            return await response.json(content_type=None)

    async def fetch_text(self, url: str) -> str:
        """GET a URL and return its body as text.

        Raises:
            aiohttp.ClientResponseError: On a non-2xx status
        """
        session = self._get_session()
        async with session.get(url) as response:
            response.raise_for_status()
            return await response.text()


class BaseRegistryClient(HTTPClient, ABC):
    """Looks up the latest published version of a package on one index."""

    index: PackageIndex

    def __init__(self, session: Optional[aiohttp.ClientSession] = None) -> None:
        super().__init__(session)
        self.logger = get_logger(f"version_lens.clients.{self.index.value}")

    @abstractmethod
    def version_url(self, package_name: str) -> str:
        """URL of the package's metadata document."""

    @abstractmethod
    def extract_version(self, data: Any) -> str:
        """Pull the latest version out of the metadata document."""

    async def get_latest_version(self, package_name: str) -> Optional[str]:
        """Fetch the latest published version of a package.

        Never raises; failures are logged and reported as ``None``.

        Args:
            package_name: Package name as written in the manifest

        Returns:
            Version string exactly as published, or None
        """
        if not package_name:
            return None

        url = self.version_url(package_name)
        self.logger.debug(f"Fetching latest version for {package_name}: {url}")
        try:
            data = await self.fetch_json(url)
            version = self.extract_version(data)
        except LOOKUP_ERRORS as e:
            self.logger.error(f"Error fetching {self.index.value} version for {package_name}: {e!r}")
            return None

        if not isinstance(version, str) or not version:
            self.logger.error(f"Malformed {self.index.value} response for {package_name}")
            return None
        return version
