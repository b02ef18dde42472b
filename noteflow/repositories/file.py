"""
File Key-Value Store.

One UTF-8 file per key inside a data directory. Key names are percent-encoded
into file names, so any key string is safe. Writes go to a temporary file
that is then renamed over the target.
"""

import os
from pathlib import Path
from urllib.parse import quote, unquote

from noteflow.core.exceptions import StorageError
from noteflow.core.logging import get_logger
from noteflow.repositories.base import KeyValueStore

logger = get_logger(__name__)

_SUFFIX = ".json"


class FileKeyValueStore(KeyValueStore):
    """Directory-backed store: ``<data_dir>/<quoted key>.json``."""

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{quote(key, safe='-_.')}{_SUFFIX}"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("File store write failed", extra={"key": key, "error": str(e)})
            raise StorageError(f"Could not write key: {key}") from e

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            logger.error("File store delete failed", extra={"key": key, "error": str(e)})
            raise StorageError(f"Could not delete key: {key}") from e

    def keys(self) -> list[str]:
        if not self.data_dir.exists():
            return []
        return sorted(
            unquote(path.name[: -len(_SUFFIX)])
            for path in self.data_dir.iterdir()
            if path.is_file() and path.name.endswith(_SUFFIX)
        )
