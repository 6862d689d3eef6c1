"""
Domain layer for transferrer.

Contains pure domain objects with no I/O or side effects:
- GitHubLocation / GitLocation: Where a package's source lives
- VersionTag: A repository tag as reported by the host
- PackageMetadata: The registry's record of a package
- TransferPayload / SignedEnvelope: A location-change request

These objects are immutable and provide to_dict() for JSON output.
"""

from .location import (
    GitHubLocation,
    GitLocation,
    Location,
    location_from_dict,
    parse_github_url,
    locations_match,
    location_url,
)
from .version import VersionTag, parse_version, parse_lenient, format_version
from .metadata import PackageMetadata, PublishedInfo
from .package_name import strip_legacy_prefix, validate_package_name, normalize_package_name
from .transfer import PackageLocations, TransferPayload, SignedEnvelope

__all__ = [
    'GitHubLocation',
    'GitLocation',
    'Location',
    'location_from_dict',
    'parse_github_url',
    'locations_match',
    'location_url',
    'VersionTag',
    'parse_version',
    'parse_lenient',
    'format_version',
    'PackageMetadata',
    'PublishedInfo',
    'strip_legacy_prefix',
    'validate_package_name',
    'normalize_package_name',
    'PackageLocations',
    'TransferPayload',
    'SignedEnvelope',
]
