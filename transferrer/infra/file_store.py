"""
Legacy snapshot persistence for transferrer.

The legacy registry snapshot is one JSON object mapping package names to
repository URLs. Writes go to a temp file in the same directory and are
moved into place with os.replace, so a crash never leaves a half-written
snapshot. Key order is preserved so diffs against the snapshot stay small.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)


class FileStore:
    """
    JSON object file with atomic writes.

    Example:
        store = FileStore(Path("bower-packages.json"))
        packages = store.read()
        packages["foo"] = "https://github.com/new-owner/foo.git"
        store.write(packages)
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser().resolve()

    def read(self) -> Dict[str, Any]:
        """
        Read the whole snapshot.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not a JSON object
        """
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a JSON object")
        return data

    def write(self, data: Dict[str, Any]) -> None:
        """Replace the snapshot atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
        )
        temp_path = Path(temp_name)

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write('\n')
            os.replace(temp_path, self.path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

        logger.debug(f"Wrote {len(data)} entries to {self.path}")

