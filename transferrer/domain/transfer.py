"""
Transfer request domain objects for transferrer.

A transfer asks the registry to record a new location for a package. The
request travels as a signed envelope: the structured payload, the exact
string that was signed, and a detached signature over that string.
"""

import json
from dataclasses import dataclass
from typing import Dict, Any

from .location import Location, GitHubLocation


@dataclass(frozen=True)
class PackageLocations:
    """Recorded location versus the location implied by the trusted tag."""
    metadata_location: Location
    tag_location: GitHubLocation

    def to_dict(self) -> Dict[str, Any]:
        return {
            'metadata_location': self.metadata_location.to_dict(),
            'tag_location': self.tag_location.to_dict(),
        }


@dataclass(frozen=True)
class TransferPayload:
    """The semantic content of a transfer request."""
    name: str
    new_location: Location

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'newLocation': self.new_location.to_dict(),
        }

    def to_json(self) -> str:
        """Canonical serialized form; this exact string is what gets signed."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(',', ':'), ensure_ascii=False)


@dataclass(frozen=True)
class SignedEnvelope:
    """
    The unit submitted to the registry.

    Attributes:
        email: Identity the signing key belongs to
        payload: Structured transfer request
        raw_payload: The exact string the signature covers
        signature: Base64 Ed25519 signature over raw_payload
    """
    email: str
    payload: TransferPayload
    raw_payload: str
    signature: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'email': self.email,
            'payload': self.payload.to_dict(),
            'rawPayload': self.raw_payload,
            'signature': self.signature,
        }
