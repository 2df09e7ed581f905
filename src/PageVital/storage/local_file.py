# ============================================================================
# PageVital - Local File Store
#
# Purpose: Persist each key as a JSON file in a directory
# Inputs: String keys and values
# Outputs: <directory>/<key>.json
# Dependencies: pathlib, re, base
# Usage: store = LocalFileStore("runs/pagevital"); store.set("k", "[]")
#
# Changelog:
#   2026-09-02: Initial LocalFileStore
#   2026-09-20: Writes go through a temp file + rename so a crash mid-write
#               never leaves a truncated document behind
# ============================================================================

import os
import re
from pathlib import Path
from typing import Optional

from PageVital.errors import PersistenceError
from PageVital.logging_utils import get_logger
from PageVital.storage.base import KeyValueStore

logger = get_logger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


class LocalFileStore(KeyValueStore):
    """
    Store that keeps one file per key under a directory.
    """

    def __init__(self, directory: str = "runs/pagevital"):
        """
        Initialize local file store.

        Args:
            directory: Directory path for stored files (created if missing)
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        logger.info(f"LocalFileStore initialized: {self.directory}")

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE.sub('_', key)}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to read {path}", details=str(e)) from e

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.exception(f"Failed to write {path}")
            raise PersistenceError(f"Failed to write {path}", details=str(e)) from e

    def delete(self, key: str) -> None:
        try:
            self._path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to delete key {key!r}", details=str(e)) from e
