"""
Infrastructure layer for transferrer.

Contains abstractions for external systems:
- GitHubClient / GitHubTagLister: GitHub API access
- MetadataStore: Registry metadata files
- RegistryClient: Registry write API
- FileStore: JSON file persistence for the legacy snapshot

These provide clean interfaces that can be mocked for testing.
"""

from .github_client import GitHubClient, GitHubTagLister, RateLimitStatus
from .metadata_store import MetadataStore
from .registry_client import RegistryClient
from .file_store import FileStore

__all__ = [
    'GitHubClient',
    'GitHubTagLister',
    'RateLimitStatus',
    'MetadataStore',
    'RegistryClient',
    'FileStore',
]
