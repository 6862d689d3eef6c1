"""
transferrer - Keep registry package locations in step with GitHub.

Packages imported from a legacy registry record the repository they were
published from. When a repository is renamed or moves to a new owner, the
registry's record goes stale. transferrer finds those packages and submits
a signed change-of-location request for each one.

Quick Start:
    from transferrer import (
        GitHubClient, GitHubTagLister, MetadataStore, RegistryClient,
        LocationReconciler, TransferService, resolve_secrets,
    )

    secrets = resolve_secrets()
    reconciler = LocationReconciler(
        GitHubTagLister(GitHubClient(secrets.github_token)),
        MetadataStore("registry/metadata", ["purescript-"]),
    )
    service = TransferService(
        reconciler,
        RegistryClient("https://registry.purescript.org/api", secrets.bot_token),
        secrets.credentials,
        legacy_prefixes=["purescript-"],
    )
    urls = service.run({"foo": "https://github.com/old-owner/purescript-foo"})

Domain Objects:
    GitHubLocation / GitLocation - Where a package's source lives
    VersionTag - A repository tag
    PackageMetadata - The registry's record of a package
    TransferPayload / SignedEnvelope - A change-of-location request

Services:
    LocationReconciler - Decides whether a package moved
    TransferService - Signs and submits transfers
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    GitHubLocation,
    GitLocation,
    VersionTag,
    PackageMetadata,
    PackageLocations,
    TransferPayload,
    SignedEnvelope,
)

# Services
from .services import LocationReconciler, TransferService

# Infrastructure
from .infra import GitHubClient, GitHubTagLister, MetadataStore, RegistryClient, FileStore

# Secrets and signing
from .credentials import Credentials, EnvKey, ENV_KEYS, resolve_credentials, resolve_secrets
from .signing import sign, verify

# Configuration
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "GitHubLocation",
    "GitLocation",
    "VersionTag",
    "PackageMetadata",
    "PackageLocations",
    "TransferPayload",
    "SignedEnvelope",
    # Services
    "LocationReconciler",
    "TransferService",
    # Infrastructure
    "GitHubClient",
    "GitHubTagLister",
    "MetadataStore",
    "RegistryClient",
    "FileStore",
    # Secrets and signing
    "Credentials",
    "EnvKey",
    "ENV_KEYS",
    "resolve_credentials",
    "resolve_secrets",
    "sign",
    "verify",
    # Configuration
    "load_config",
    "save_config",
]
