"""Changelog discovery across package indexes and source repositories."""

import asyncio
import re
from typing import Any, Dict, List, Optional

import aiohttp

from ..clients.base import HTTPClient
from ..core.parsers import LATEST, Dependency, Ecosystem, PackageIndex, ParserRegistry, create_registry
from ..utils.config import Settings
from ..utils.logging import get_logger
from .cache import ChangelogCache
from .repository import (
    CHANGELOG_FILES,
    normalize_github_url,
    raw_file_urls,
    release_api_url,
    to_raw_url,
)


logger = get_logger("version_lens.changelog")

NPM_REGISTRY_URL = "https://registry.npmjs.org"
PYPI_API_URL = "https://pypi.org/pypi"
RUBYGEMS_API_URL = "https://rubygems.org/api/v2/rubygems"

PYPI_CHANGELOG_LABELS = ["Changelog", "Changes", "Release Notes", "History"]
PYPI_CHANGELOG_FILES = CHANGELOG_FILES + ["CHANGELOG.rst", "changelog.rst"]
DESCRIPTION_KEYWORDS = ["changelog", "changes", "history", "what's new", "release notes"]

_PROBE_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError, ValueError)


class ChangelogResolver:
    """Resolves the changelog text for one package version.

    Each package index has its own candidate chain: explicit changelog links
    declared by the author first, then well-known changelog files in the
    source repository, then (PyPI only) the package description. The first
    source that yields text wins and is cached under ``name@version``.
    """

    def __init__(
        self,
        http: Optional[HTTPClient] = None,
        cache: Optional[ChangelogCache] = None,
        settings: Optional[Settings] = None,
        parsers: Optional[ParserRegistry] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.parsers = parsers or create_registry()
        self.http = http or HTTPClient()
        if cache is None:
            cache = ChangelogCache(ttl=self.settings.changelog_cache_ttl)
        self.cache = cache

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.http.close()

    async def resolve(self, name: str, version: str, file_hint: str) -> Optional[str]:
        """Resolve a changelog.

        Args:
            name: Package name
            version: Package version
            file_hint: Manifest file name or path, matched case-insensitively

        Returns:
            Changelog text, or None when nothing could be found
        """
        logger.debug(f"Fetching changelog for {name}@{version} (file: {file_hint})")
        key = ChangelogCache.make_key(name, version)

        if self.settings.enable_changelog_cache:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Found cached changelog for {key}")
                return cached

        ecosystem = Ecosystem.from_filename(file_hint, case_sensitive=False)
        if ecosystem is None:
            logger.warning(f"Unsupported file type: {file_hint}")
            return None
        index = ecosystem.package_index

        try:
            changelog = await self._dispatch(index, name, version)
        except Exception as e:
            logger.error(f"Error during changelog fetch for {key}: {e!r}")
            return None

        if not changelog:
            logger.warning(f"No changelog found for {key}")
            return None

        logger.info(f"Found {index.value} changelog for {key}")
        if self.settings.enable_changelog_cache:
            self.cache.set(key, changelog)
        return changelog

    def dependency_for_line(self, file_hint: str, line: str) -> Optional[Dependency]:
        """Identify the dependency declared on one manifest line.

        The line is read on its own with the ecosystem's parser; a
        requirements entry without a version yields ``latest``.

        Args:
            file_hint: Manifest file name or path, matched case-insensitively
            line: Raw line text

        Returns:
            Declared dependency, or None when the line declares nothing
        """
        ecosystem = Ecosystem.from_filename(file_hint, case_sensitive=False)
        if ecosystem is None:
            logger.warning(f"Unsupported file type: {file_hint}")
            return None

        dependency = self.parsers.get_parser(ecosystem).parse_declaration(line)
        if dependency is None:
            logger.debug(f"No dependency declared on line: {line!r}")
        return dependency

    async def _dispatch(self, index: PackageIndex, name: str, version: str) -> Optional[str]:
        if index is PackageIndex.NPM:
            return await self.fetch_npm_changelog(name, version)
        if index is PackageIndex.PYPI:
            return await self.fetch_pypi_changelog(name, version)
        if index is PackageIndex.RUBYGEMS:
            return await self.fetch_rubygems_changelog(name, version)
        raise ValueError(f"Unhandled package index: {index}")

    async def _try_fetch_text(self, url: str) -> Optional[str]:
        """Fetch a candidate URL, treating any failure as a miss."""
        try:
            text = await self.http.fetch_text(url)
        except _PROBE_ERRORS as e:
            logger.debug(f"Failed to fetch changelog from {url}: {e!r}")
            return None
        return text or None

    async def _search_repository(self, repository: str, filenames: List[str]) -> Optional[str]:
        """Try well-known changelog files in a GitHub repository, in order."""
        repository_url = normalize_github_url(repository)
        if repository_url is None:
            logger.debug(f"Not a GitHub repository: {repository}")
            return None

        for url in raw_file_urls(repository_url, filenames):
            logger.debug(f"Trying changelog URL: {url}")
            text = await self._try_fetch_text(url)
            if text:
                return text
        return None

    async def fetch_npm_changelog(self, name: str, version: str) -> Optional[str]:
        data = await self.http.fetch_json(f"{NPM_REGISTRY_URL}/{name}")
        if version == LATEST:
            version = data.get("dist-tags", {}).get("latest", version)
        version_data = data.get("versions", {}).get(version) or {}

        changelog_url = version_data.get("changelog")
        if isinstance(changelog_url, str):
            text = await self._try_fetch_text(changelog_url)
            if text:
                return text

        repository = _repository_url(version_data.get("repository")) or _repository_url(data.get("repository"))
        if repository:
            return await self._search_repository(repository, CHANGELOG_FILES)
        return None

    async def fetch_pypi_changelog(self, name: str, version: str) -> Optional[str]:
        if version == LATEST:
            url = f"{PYPI_API_URL}/{name}/json"
        else:
            url = f"{PYPI_API_URL}/{name}/{version}/json"
        info = (await self.http.fetch_json(url)).get("info") or {}
        project_urls: Dict[str, str] = info.get("project_urls") or {}

        for label in PYPI_CHANGELOG_LABELS:
            changelog_url = project_urls.get(label)
            if not changelog_url:
                continue
            if "docs." in changelog_url or "/docs/" in changelog_url:
                logger.debug(f"Skipping documentation URL: {changelog_url}")
                continue
            text = await self._try_fetch_text(to_raw_url(changelog_url))
            if text:
                return text

        repo_candidates = [info.get("home_page"), project_urls.get("Homepage"), project_urls.get("Source")]
        for candidate in repo_candidates:
            if candidate and "github.com" in candidate:
                text = await self._search_repository(candidate, PYPI_CHANGELOG_FILES)
                if text:
                    return text
                break

        description = info.get("description")
        if description:
            return extract_changelog_section(description)
        return None

    async def fetch_rubygems_changelog(self, name: str, version: str) -> Optional[str]:
        version = version.strip()
        data = await self.http.fetch_json(f"{RUBYGEMS_API_URL}/{name}/versions/{version}.json")
        metadata = data.get("metadata") or {}

        changelog_uri = metadata.get("changelog_uri")
        if changelog_uri:
            text = await self._fetch_declared_changelog(changelog_uri)
            if text:
                return text

        source_code_uri = metadata.get("source_code_uri")
        if source_code_uri:
            return await self._search_repository(source_code_uri, CHANGELOG_FILES)
        return None

    async def _fetch_declared_changelog(self, changelog_uri: str) -> Optional[str]:
        api_url = release_api_url(changelog_uri)
        if api_url is None:
            return await self._try_fetch_text(to_raw_url(changelog_uri))

        logger.debug(f"Fetching GitHub release notes from: {api_url}")
        try:
            release = await self.http.fetch_json(api_url)
        except _PROBE_ERRORS as e:
            logger.debug(f"Failed to fetch release notes from {api_url}: {e!r}")
            return None
        body = release.get("body") if isinstance(release, dict) else None
        return body or None


def _repository_url(repository: Any) -> Optional[str]:
    """Read npm's ``repository`` field, which is either a string or ``{url: ...}``."""
    if isinstance(repository, str):
        return repository
    if isinstance(repository, dict) and isinstance(repository.get("url"), str):
        return repository["url"]
    return None


def extract_changelog_section(description: str) -> Optional[str]:
    """Cut the changelog-looking section out of a free-text description.

    Keywords are tried in priority order; the section runs from the first
    hit of a keyword to the next top-level markdown heading.
    """
    lowered = description.lower()
    for keyword in DESCRIPTION_KEYWORDS:
        index = lowered.find(keyword)
        if index != -1:
            logger.debug(f"Found {keyword} section in description")
            return re.split(r"\n#\s", description[index:])[0]
    return None
