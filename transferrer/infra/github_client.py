"""
GitHub API client infrastructure for transferrer.

Provides a clean abstraction over GitHub API access:
- Token authentication via requests
- Tracks rate limits from response headers
- Handles rate limiting with exponential backoff
- Lists repository tags across pages
"""

import time
import logging
from dataclasses import dataclass
from typing import Optional, List, Dict, Any

import requests

from ..domain import VersionTag, parse_github_url
from ..exit_codes import APIError, PackageValidationError

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
TAGS_PAGE_SIZE = 100


@dataclass
class RateLimitStatus:
    """GitHub API rate limit status."""
    remaining: int
    limit: int
    reset_time: int  # Unix timestamp
    used: int

    @property
    def minutes_until_reset(self) -> int:
        """Minutes until rate limit resets."""
        now = int(time.time())
        return max(0, (self.reset_time - now) // 60)

    @property
    def is_low(self) -> bool:
        """Check if rate limit is getting low (< 100 remaining)."""
        return self.remaining < 100


def _is_rate_limited(response) -> bool:
    """429, or a 403 that reports an exhausted rate limit."""
    if response.status_code == 429:
        return True
    return (response.status_code == 403
            and response.headers.get('X-RateLimit-Remaining') == '0')


class GitHubClient:
    """
    GitHub API client with rate limiting.

    Example:
        client = GitHubClient(token)
        tags = client.list_tags("owner", "repo")
        if tags is None:
            print("repository not found")
    """

    def __init__(
        self,
        token: Optional[str] = None,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHubClient.

        Args:
            token: GitHub token
            max_retries: Maximum retry attempts for rate-limited requests
            base_delay: Base delay for exponential backoff
            max_delay: Maximum delay between retries
            timeout: HTTP request timeout in seconds
            session: Optional requests session (for testing)
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'transferrer',
        })
        if token:
            self.session.headers['Authorization'] = f'token {token}'
        self._rate_limit_status: Optional[RateLimitStatus] = None

    def _update_rate_limit_from_headers(self, headers: Dict[str, str]) -> None:
        """Update rate limit status from response headers."""
        try:
            remaining = int(headers.get('X-RateLimit-Remaining', -1))
            limit = int(headers.get('X-RateLimit-Limit', -1))
            reset_time = int(headers.get('X-RateLimit-Reset', 0))
            used = int(headers.get('X-RateLimit-Used', 0))
        except (ValueError, TypeError):
            return

        if remaining >= 0 and limit >= 0:
            self._rate_limit_status = RateLimitStatus(
                remaining=remaining,
                limit=limit,
                reset_time=reset_time,
                used=used
            )

            if self._rate_limit_status.is_low:
                logger.warning(
                    f"GitHub API rate limit low: {remaining}/{limit} remaining, "
                    f"resets in {self._rate_limit_status.minutes_until_reset} minutes"
                )

    @property
    def rate_limit_status(self) -> Optional[RateLimitStatus]:
        """Rate limit status from the last API call, if any."""
        return self._rate_limit_status

    def _backoff(self, attempt: int) -> float:
        return min(self.base_delay * (2 ** attempt), self.max_delay)

    def _api(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """
        Call the GitHub API.

        Returns:
            Decoded JSON, or None if the resource does not exist

        Raises:
            APIError: When the request fails after all retries
        """
        url = f"{GITHUB_API_BASE}/{endpoint}"
        last_error = "no attempts made"

        for attempt in range(self.max_retries):
            try:
                response = self.session.get(url, params=params, timeout=self.timeout)
            except requests.RequestException as e:
                last_error = str(e)
                logger.warning(f"GitHub API request failed: {e}")
                if attempt < self.max_retries - 1:
                    time.sleep(self._backoff(attempt))
                continue

            # Track rate limit from headers
            self._update_rate_limit_from_headers(response.headers)

            if response.status_code == 200:
                try:
                    return response.json()
                except ValueError as e:
                    raise APIError(f"GitHub API returned invalid JSON for {endpoint}: {e}") from e

            if response.status_code == 404:
                return None

            if _is_rate_limited(response):
                last_error = f"rate limited ({response.status_code})"
                if attempt == self.max_retries - 1:
                    break

                reset_time = response.headers.get('X-RateLimit-Reset')
                if reset_time and reset_time.isdigit():
                    wait_time = int(reset_time) - int(time.time())
                    if 0 < wait_time < self.max_delay:
                        logger.info(f"Rate limited, waiting {wait_time}s")
                        time.sleep(wait_time)
                        continue

                # Exponential backoff
                delay = self._backoff(attempt)
                logger.info(f"Rate limited, waiting {delay}s (attempt {attempt + 1})")
                time.sleep(delay)
                continue

            if response.status_code == 403:
                raise APIError(f"GitHub API refused access to {endpoint} (403)")

            if response.status_code >= 500:
                last_error = f"server error {response.status_code}"
                logger.warning(f"GitHub API error {response.status_code} for {endpoint}")
                if attempt < self.max_retries - 1:
                    time.sleep(self._backoff(attempt))
                continue

            raise APIError(f"GitHub API error {response.status_code} for {endpoint}")

        raise APIError(f"GitHub API request for {endpoint} failed: {last_error}")

    def list_tags(self, owner: str, name: str) -> Optional[List[VersionTag]]:
        """
        List every tag in a repository.

        GitHub reports each tag with the API URL of its commit. Those URLs
        follow repository renames and transfers, so they name where the
        repository lives now.

        Args:
            owner: Repository owner
            name: Repository name

        Returns:
            Tags in the reverse of the API's listing order, or None if the
            repository does not exist. GitHub lists tags by name, newest
            version first in practice, so the first tag returned is treated
            as the earliest. Tags are not sorted by commit date.
        """
        tags: List[VersionTag] = []
        page = 1

        while True:
            data = self._api(
                f"repos/{owner}/{name}/tags",
                params={'per_page': TAGS_PAGE_SIZE, 'page': page},
            )
            if data is None:
                if page == 1:
                    return None
                break
            if not isinstance(data, list):
                raise APIError(f"Unexpected tag listing for {owner}/{name}")

            for item in data:
                commit = item.get('commit') or {}
                tags.append(VersionTag(name=item.get('name', ''), url=commit.get('url', '')))

            if len(data) < TAGS_PAGE_SIZE:
                break
            page += 1

        # Earliest = last in API order
        tags.reverse()
        logger.debug(f"Found {len(tags)} tags for {owner}/{name}")
        return tags


class GitHubTagLister:
    """
    Lists the tags of a legacy package's repository.

    The legacy registry records each package as a repository URL string;
    anything that is not a GitHub repository, or a repository that no
    longer exists, is a package validation failure.
    """

    def __init__(self, client: GitHubClient):
        self.client = client

    def list_tags(self, package_name: str, location: str) -> List[VersionTag]:
        """
        Raises:
            PackageValidationError: If the location is not a reachable GitHub repository
        """
        address = parse_github_url(location)
        if address is None:
            raise PackageValidationError(
                f"{package_name}: location {location!r} is not a GitHub repository"
            )

        tags = self.client.list_tags(address.owner, address.repo)
        if tags is None:
            raise PackageValidationError(
                f"{package_name}: repository {address} does not exist"
            )
        return tags
