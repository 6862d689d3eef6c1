"""
Registry metadata reader for transferrer.

Reads the per-package metadata files of a registry checkout, laid out as
``<metadata_dir>/<package-name>.json``.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from ..domain import PackageMetadata, strip_legacy_prefix
from ..exit_codes import MetadataFormatError

logger = logging.getLogger(__name__)


class MetadataStore:
    """
    Metadata reader over a directory of JSON files.

    Legacy names are looked up under their registry name, with any legacy
    ecosystem prefix removed.
    """

    def __init__(self, metadata_dir: Path, legacy_prefixes: Iterable[str] = ()):
        self.metadata_dir = Path(metadata_dir).expanduser()
        self.legacy_prefixes = list(legacy_prefixes)

    def path_for(self, package_name: str) -> Path:
        name = strip_legacy_prefix(package_name, self.legacy_prefixes)
        return self.metadata_dir / f"{name}.json"

    def read_metadata(self, package_name: str) -> Optional[PackageMetadata]:
        """
        Read the registry's metadata for a package.

        Returns:
            PackageMetadata, or None if the package has no metadata file

        Raises:
            MetadataFormatError: If the file exists but is not valid metadata
        """
        path = self.path_for(package_name)
        if not path.exists():
            logger.debug(f"No metadata at {path}")
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return PackageMetadata.from_dict(data)
        except (json.JSONDecodeError, ValueError) as e:
            raise MetadataFormatError(f"Invalid metadata for {package_name} in {path}: {e}") from e
