"""
Key-Value Blob Stores

DESIGN DECISION: The ledger is stored as one string blob under one key,
the way a browser keeps it in local storage.

- InMemoryKeyValueStore: nothing survives the process (tests, demos)
- JsonFileKeyValueStore: one JSON object file on disk mapping keys to blobs

TRADEOFFS:
- The whole file is rewritten on every set (fine for a personal ledger)
- Writes go to a temporary file that is renamed into place, so a crash
  mid-write leaves the previous file intact
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from expense_tracker.services.storage.interface import (
    CorruptDataError,
    KeyValueStoreInterface,
    StorageUnavailableError,
)


class InMemoryKeyValueStore(KeyValueStoreInterface):
    """Dict-backed store."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore(KeyValueStoreInterface):
    """
    File-backed store.

    The file holds a JSON object whose values are the stored blobs.
    A missing file is an empty store.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as e:
            raise CorruptDataError(f"Store file {self._path} is not valid UTF-8: {e}")
        except OSError as e:
            raise StorageUnavailableError(f"Failed to read store file {self._path}: {e}")

        if not text.strip():
            return {}

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Store file {self._path} is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise CorruptDataError(f"Store file {self._path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            raise CorruptDataError(f"Value under '{key}' in {self._path} is not a string blob")
        return value

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=self._path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageUnavailableError(f"Failed to write store file {self._path}: {e}")
