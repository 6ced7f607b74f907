"""Changelog discovery and caching."""

from .cache import CacheEntry, ChangelogCache
from .resolver import ChangelogResolver, extract_changelog_section

__all__ = [
    "CacheEntry",
    "ChangelogCache",
    "ChangelogResolver",
    "extract_changelog_section",
]
