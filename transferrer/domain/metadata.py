"""
Registry metadata domain object for transferrer.

Mirrors the metadata file the registry keeps for every published package:

    {
      "location": {"githubOwner": "...", "githubRepo": "..."},
      "published": {"1.0.0": {"ref": "v1.0.0", "publishedTime": "...", ...}},
      "unpublished": {}
    }
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from packaging.version import Version

from .location import Location, location_from_dict
from .version import parse_version, format_version


@dataclass(frozen=True)
class PublishedInfo:
    """Publication record for a single version."""
    ref: Optional[str] = None
    published_time: Optional[str] = None
    bytes: Optional[int] = None
    hash: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PublishedInfo':
        return cls(
            ref=data.get('ref'),
            published_time=data.get('publishedTime'),
            bytes=data.get('bytes'),
            hash=data.get('hash'),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.ref is not None:
            data['ref'] = self.ref
        if self.published_time is not None:
            data['publishedTime'] = self.published_time
        if self.bytes is not None:
            data['bytes'] = self.bytes
        if self.hash is not None:
            data['hash'] = self.hash
        return data


@dataclass(frozen=True)
class PackageMetadata:
    """The registry's record of a package's location and published versions."""
    location: Location
    published: Dict[Version, PublishedInfo] = field(default_factory=dict)
    unpublished: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackageMetadata':
        """
        Create from a metadata JSON object.

        Raises:
            ValueError: If the location or a version key is malformed
        """
        if not isinstance(data, dict):
            raise ValueError("Metadata must be a JSON object")
        if 'location' not in data:
            raise ValueError("Metadata has no location")

        published = {}
        for version_str, info in (data.get('published') or {}).items():
            if info is not None and not isinstance(info, dict):
                raise ValueError(f"Published entry for {version_str} must be an object")
            published[parse_version(version_str)] = PublishedInfo.from_dict(info or {})

        return cls(
            location=location_from_dict(data['location']),
            published=published,
            unpublished=dict(data.get('unpublished') or {}),
        )

    @property
    def latest_version(self) -> Optional[Version]:
        """Highest published version, or None if nothing is published."""
        if not self.published:
            return None
        return max(self.published)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'location': self.location.to_dict(),
            'published': {
                format_version(v): info.to_dict()
                for v, info in sorted(self.published.items())
            },
            'unpublished': dict(self.unpublished),
        }
