"""
Key-Value Store Backends

InMemoryKeyValueStore: dict-backed, for tests and throwaway sessions.
JsonFileKeyValueStore: one <key>.json file per key in a directory.

TRADEOFFS (file backend):
- Writes go to a temp file then os.replace(), so a reader never
  sees a half-written document
- No locking: two processes writing the same key are last-writer-wins
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from homebooks.services.storage.interface import (
    KeyValueStore,
    QuotaExceededError,
    StorageReadError,
    StorageWriteError,
    validate_key,
)


class InMemoryKeyValueStore(KeyValueStore):
    """
    Process-local store.

    quota_bytes mimics browser storage limits: a value whose UTF-8
    size pushes the store over quota is rejected.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self._data: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            others = sum(
                len(v.encode("utf-8")) for k, v in self._data.items() if k != key
            )
            if others + len(value.encode("utf-8")) > self._quota_bytes:
                raise QuotaExceededError(
                    f"Storing '{key}' would exceed the {self._quota_bytes} byte quota"
                )
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def clear(self) -> None:
        self._data.clear()


class JsonFileKeyValueStore(KeyValueStore):
    """Persists each key as <directory>/<key>.json."""

    SUFFIX = ".json"

    def __init__(self, directory: Union[str, Path]):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        return self._directory / f"{validate_key(key)}{self.SUFFIX}"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageWriteError(f"Failed to write {path}: {e}") from e

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {path}: {e}") from e

    def keys(self) -> list[str]:
        if not self._directory.is_dir():
            return []
        return sorted(
            p.name[: -len(self.SUFFIX)]
            for p in self._directory.glob(f"*{self.SUFFIX}")
            if not p.name.startswith(".")
        )
