"""
Location domain objects for transferrer.

A package location is either a repository on GitHub, identified by owner,
repo and an optional subdirectory, or an arbitrary git URL. Only GitHub
locations take part in transfers; the generic variant exists so registry
metadata can be read faithfully.
"""

import re
from dataclasses import dataclass
from typing import Optional, Dict, Any, Union

from ..exit_codes import UnsupportedOperationError


@dataclass(frozen=True)
class GitHubLocation:
    """A repository hosted on GitHub."""
    owner: str
    repo: str
    subdir: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'githubOwner': self.owner,
            'githubRepo': self.repo,
        }
        if self.subdir is not None:
            data['subdir'] = self.subdir
        return data

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class GitLocation:
    """A repository reachable at an arbitrary git URL."""
    url: str
    subdir: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'gitUrl': self.url}
        if self.subdir is not None:
            data['subdir'] = self.subdir
        return data

    def __str__(self) -> str:
        return self.url


Location = Union[GitHubLocation, GitLocation]


def location_from_dict(data: Dict[str, Any]) -> Location:
    """
    Parse a serialized location.

    Raises:
        ValueError: If the object matches neither location shape
    """
    if not isinstance(data, dict):
        raise ValueError(f"Location must be an object, got {type(data).__name__}")

    subdir = data.get('subdir')
    if subdir is not None and not isinstance(subdir, str):
        raise ValueError("Location subdir must be a string")

    if 'githubOwner' in data or 'githubRepo' in data:
        owner = data.get('githubOwner')
        repo = data.get('githubRepo')
        if not isinstance(owner, str) or not isinstance(repo, str) or not owner or not repo:
            raise ValueError("GitHub location requires non-empty githubOwner and githubRepo")
        return GitHubLocation(owner=owner, repo=repo, subdir=subdir)

    if 'gitUrl' in data:
        url = data['gitUrl']
        if not isinstance(url, str) or not url:
            raise ValueError("Git location requires a non-empty gitUrl")
        return GitLocation(url=url, subdir=subdir)

    raise ValueError(f"Unrecognized location: {sorted(data)}")


# github.com/owner/repo with optional .git suffix and trailing path
_GITHUB_HTTPS = re.compile(
    r"^(?:https?|git)://(?:www\.)?github\.com/([^/\s]+)/([^/\s]+?)(?:\.git)?(?:/.*)?$"
)
_GITHUB_SSH = re.compile(r"^(?:ssh://)?git@github\.com[:/]([^/\s]+)/([^/\s]+?)(?:\.git)?/?$")
# Commit URLs from the tags API: api.github.com/repos/owner/repo/commits/sha
_GITHUB_API = re.compile(r"^https://api\.github\.com/repos/([^/\s]+)/([^/\s]+?)(?:/.*)?$")


def parse_github_url(url: str) -> Optional[GitHubLocation]:
    """
    Extract owner and repo from a GitHub URL.

    Handles HTTPS, SSH and GitHub API repository URLs.

    Returns:
        GitHubLocation, or None if the URL is not a GitHub repository URL
    """
    if not url:
        return None

    url = url.strip()
    for pattern in (_GITHUB_API, _GITHUB_HTTPS, _GITHUB_SSH):
        match = pattern.match(url)
        if match:
            owner, repo = match.groups()
            if owner and repo:
                return GitHubLocation(owner=owner, repo=repo)

    return None


def locations_match(a: Location, b: Location) -> bool:
    """
    Check whether two locations name the same GitHub repository.

    Owner and repo compare case-insensitively; subdir is ignored.

    Raises:
        UnsupportedOperationError: If either location is not on GitHub
    """
    for location in (a, b):
        if not isinstance(location, GitHubLocation):
            raise UnsupportedOperationError(
                f"Cannot compare non-GitHub location {location}"
            )
    return a.owner.lower() == b.owner.lower() and a.repo.lower() == b.repo.lower()


def location_url(location: Location) -> str:
    """
    Canonical clone URL for a GitHub location.

    Raises:
        UnsupportedOperationError: If the location is not on GitHub
    """
    if not isinstance(location, GitHubLocation):
        raise UnsupportedOperationError(
            f"Cannot derive a GitHub URL from non-GitHub location {location}"
        )
    return f"https://github.com/{location.owner}/{location.repo}.git"
