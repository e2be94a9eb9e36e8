"""
Key-value storage backends for quest persistence.

Values are strings. A backend commits all pending writes at once when
``flush()`` is called.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class StorageError(OSError):
    """A storage backend could not read or write its data."""


class Storage(ABC):
    """Abstract string key-value store."""

    @abstractmethod
    def get(self, key: str, default: str | None = None) -> str | None:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        ...

    def flush(self) -> None:
        """Commit pending writes. No-op for in-memory backends."""


class MemoryStorage(Storage):
    """In-memory storage (tests, throwaway sessions)."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})
        self.flush_count = 0

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.data.get(key, default)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self.data)

    def flush(self) -> None:
        self.flush_count += 1


class JsonFileStorage(Storage):
    """
    Key-value storage in a single JSON file.

    The whole file is rewritten on flush through a temporary file and
    ``os.replace``, so a crash leaves either the old or the new contents.
    A SHA-256 checksum guards against a damaged file: on mismatch the
    data is discarded and the backend starts empty.
    """

    VERSION = "1.0"

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.load_error: str | None = None
        self._data: dict[str, str] = self._read()

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key, default)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def flush(self) -> None:
        payload = {'version': self.VERSION, 'entries': self._data}
        payload['checksum'] = _calculate_checksum(payload)

        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.load_error = f"unreadable save file: {e}"
            logger.error(f"Failed to read {self.path}: {e}")
            return {}

        checksum = payload.pop('checksum', None) if isinstance(payload, dict) else None
        if not checksum:
            self.load_error = "missing checksum"
            logger.error(f"Save file corrupted: missing checksum in {self.path}")
            return {}

        if _calculate_checksum(payload) != checksum:
            self.load_error = "checksum mismatch"
            logger.error(f"Save file corrupted: checksum mismatch in {self.path}")
            return {}

        entries = payload.get('entries', {})
        if not isinstance(entries, dict):
            self.load_error = "malformed entries"
            logger.error(f"Save file corrupted: malformed entries in {self.path}")
            return {}

        return {str(k): str(v) for k, v in entries.items()}


def _calculate_checksum(data: dict) -> str:
    """Calculate checksum for save data."""
    json_str = json.dumps(data, sort_keys=True, separators=(',', ':'))
    hash_bytes = hashlib.sha256(json_str.encode('utf-8')).digest()
    return base64.b64encode(hash_bytes).decode('ascii')
