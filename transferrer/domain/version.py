"""
Version and tag domain objects for transferrer.

Registry versions are strict ``MAJOR.MINOR.PATCH`` strings. Repository tags
are looser: ``v1.2.3``, ``V1.2.3`` and ``01.02.03`` all name version 1.2.3.
"""

import re
from dataclasses import dataclass
from typing import Optional, Dict, Any

from packaging.version import Version, InvalidVersion

_STRICT = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")
_LENIENT = re.compile(r"^[vV]?(\d+)\.(\d+)\.(\d+)$")


@dataclass(frozen=True)
class VersionTag:
    """A source-control tag as reported by the host."""
    name: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'url': self.url}


def parse_version(version_str: str) -> Version:
    """
    Parse a registry version string.

    Raises:
        ValueError: If the string is not of the form MAJOR.MINOR.PATCH
    """
    if not isinstance(version_str, str) or not _STRICT.match(version_str):
        raise ValueError(f"Expected a version of the form X.Y.Z, got {version_str!r}")
    return Version(version_str)


def parse_lenient(version_str: str) -> Optional[Version]:
    """
    Parse a tag name as a version, tolerating cosmetic variations.

    Accepts surrounding whitespace, a leading 'v' or 'V' and leading zeros
    in each component.

    Returns:
        Version, or None if the tag does not name a version
    """
    if not version_str:
        return None

    match = _LENIENT.match(version_str.strip())
    if not match:
        return None

    major, minor, patch = (int(part) for part in match.groups())
    try:
        return Version(f"{major}.{minor}.{patch}")
    except InvalidVersion:
        return None


def format_version(version: Version) -> str:
    """Render a version as MAJOR.MINOR.PATCH."""
    return f"{version.major}.{version.minor}.{version.micro}"
