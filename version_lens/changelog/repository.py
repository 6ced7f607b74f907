"""Repository URL helpers for locating changelog files."""

import re
from typing import List, Optional


DEFAULT_BRANCH = "master"

CHANGELOG_FILES = [
    "CHANGELOG.md",
    "changelog.md",
    "CHANGES.md",
    "changes.md",
    "HISTORY.md",
    "history.md",
]

_GITHUB_REPO = re.compile(r"github\.com[:/]+([^/\s]+)/([^/\s#?]+)")
_GITHUB_BLOB = re.compile(r"^https?://github\.com/([^/]+)/([^/]+)/blob/(.+)$")
_GITHUB_RELEASE_TAG = re.compile(r"github\.com/([^/]+/[^/]+)/releases/tag/([^?#]+)")


def normalize_github_url(repository: str) -> Optional[str]:
    """Turn any GitHub repository reference into ``https://github.com/owner/repo``.

    Handles ``git+https://``, ``git://``, ``git@github.com:`` and
    ``github:owner/repo`` forms, trailing ``.git`` and deep links such as
    ``/tree/main``. Returns None for non-GitHub repositories.
    """
    repository = repository.strip()
    if repository.startswith("github:"):
        repository = f"github.com/{repository[len('github:'):]}"

    match = _GITHUB_REPO.search(repository)
    if not match:
        return None

    owner, repo = match.groups()
    if repo.endswith(".git"):
        repo = repo[:-len(".git")]
    if not repo:
        return None
    return f"https://github.com/{owner}/{repo}"


def raw_file_urls(repository_url: str, filenames: List[str], branch: str = DEFAULT_BRANCH) -> List[str]:
    """Candidate raw-content URLs for files at the root of a GitHub repository."""
    base = repository_url.replace("https://github.com/", "https://raw.githubusercontent.com/", 1)
    return [f"{base}/{branch}/{filename}" for filename in filenames]


def to_raw_url(url: str) -> str:
    """Rewrite a GitHub ``blob`` URL to its raw-content mirror; other URLs pass through."""
    match = _GITHUB_BLOB.match(url)
    if not match:
        return url
    owner, repo, path = match.groups()
    return f"https://raw.githubusercontent.com/{owner}/{repo}/{path}"


def release_api_url(url: str) -> Optional[str]:
    """Rewrite a GitHub release tag page URL to the releases API endpoint."""
    match = _GITHUB_RELEASE_TAG.search(url)
    if not match:
        return None
    repo, tag = match.groups()
    return f"https://api.github.com/repos/{repo}/releases/tags/{tag}"
