"""
Location reconciliation for transferrer.

Decides, one package at a time, whether the location the registry has on
record still matches the repository the package's tags now live in.

The trusted signal is the tag for the latest published version (or, for
a package with nothing published, its earliest tag). GitHub reports each
tag's commit under the repository's current owner and name, so a tag that
points somewhere other than the recorded location means the repository
moved. Anything ambiguous is treated as "leave it alone".
"""

import logging
from typing import List, Optional

from packaging.version import Version

from ..domain import (
    PackageLocations,
    PackageMetadata,
    VersionTag,
    format_version,
    locations_match,
    parse_github_url,
    parse_lenient,
)
from ..exit_codes import MetadataAbsentError, PackageValidationError
from ..infra import GitHubTagLister, MetadataStore

logger = logging.getLogger(__name__)


class LocationReconciler:
    """
    Compares recorded package locations against tag locations.

    Example:
        reconciler = LocationReconciler(tag_lister, metadata_store)
        locations = reconciler.reconcile("foo", "https://github.com/owner/foo")
        if locations:
            print(f"moved to {locations.tag_location}")
    """

    def __init__(self, tag_lister: GitHubTagLister, metadata_reader: MetadataStore):
        """
        Initialize LocationReconciler.

        Args:
            tag_lister: Provides list_tags(package_name, location)
            metadata_reader: Provides read_metadata(package_name)
        """
        self.tag_lister = tag_lister
        self.metadata_reader = metadata_reader

    def reconcile(self, package_name: str, recorded_location: str) -> Optional[PackageLocations]:
        """
        Decide whether a package needs a transfer.

        Args:
            package_name: Name as it appears in the legacy snapshot
            recorded_location: Location string from the legacy snapshot

        Returns:
            PackageLocations when the package has drifted, otherwise None

        Raises:
            MetadataAbsentError: The package has tags but no registry metadata
            UnsupportedOperationError: The recorded location is not on GitHub
        """
        try:
            tags = self.tag_lister.list_tags(package_name, recorded_location)
        except PackageValidationError as e:
            logger.warning(f"Skipping {package_name}: {e}")
            return None

        if not tags:
            logger.debug(f"Skipping {package_name}: no tags")
            return None

        metadata = self.metadata_reader.read_metadata(package_name)
        if metadata is None:
            raise MetadataAbsentError(package_name)

        trusted = self._trusted_version(metadata, tags)
        if trusted is None:
            logger.warning(
                f"Skipping {package_name}: earliest tag {tags[0].name!r} is not a version"
            )
            return None

        tag = find_tag(tags, trusted)
        if tag is None:
            logger.warning(
                f"Skipping {package_name}: no tag matches version {format_version(trusted)}"
            )
            return None

        tag_location = parse_github_url(tag.url)
        if tag_location is None:
            logger.warning(
                f"Skipping {package_name}: cannot read a repository from tag URL {tag.url!r}"
            )
            return None

        if locations_match(metadata.location, tag_location):
            return None

        logger.info(f"{package_name} moved from {metadata.location} to {tag_location}")
        return PackageLocations(metadata_location=metadata.location, tag_location=tag_location)

    @staticmethod
    def _trusted_version(metadata: PackageMetadata, tags: List[VersionTag]) -> Optional[Version]:
        # Nothing published yet: fall back to the earliest tag
        if not metadata.published:
            return parse_lenient(tags[0].name)
        return metadata.latest_version


def find_tag(tags: List[VersionTag], version: Version) -> Optional[VersionTag]:
    """First tag whose name parses leniently to the given version."""
    for tag in tags:
        if parse_lenient(tag.name) == version:
            return tag
    return None
