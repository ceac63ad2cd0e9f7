"""Local filesystem key-value store for the serialized client collection.

Storage layout:
    <storage_dir>/<key>.json    — one blob per key
"""

import logging
import os
import re
import tempfile
from pathlib import Path

from app.application.interfaces import KeyValueStore
from app.domain.exceptions import StorageError

logger = logging.getLogger(__name__)

_BACKEND = "file"


def _sanitise(name: str, max_len: int = 80) -> str:
    """Replace non-word characters with underscores and truncate."""
    return re.sub(r"[^\w\-]", "_", name)[:max_len].strip("_") or "unnamed"


class JsonFileKeyValueStore(KeyValueStore):
    """Infrastructure adapter storing each key as a file under ``storage_dir``."""

    def __init__(self, storage_dir: str):
        self._storage_dir = Path(storage_dir)

    def path_for(self, key: str) -> Path:
        """Return the file backing ``key``."""
        return self._storage_dir / f"{_sanitise(key)}.json"

    async def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(_BACKEND, key, f"could not read {path}: {exc}") from exc

    async def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self._storage_dir.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file, then swap it in
            fd, tmp_name = tempfile.mkstemp(dir=self._storage_dir, prefix=f".{path.stem}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    tmp.write(value)
                os.replace(tmp_name, path)
            finally:
                Path(tmp_name).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(_BACKEND, key, f"could not write {path}: {exc}") from exc

        logger.debug("Stored key '%s' at %s (%d chars)", key, path, len(value))
