"""Key-value persistence for feed snapshots."""

import hashlib
import logging
import re
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Interface for the local byte store holding snapshots."""

    def get(self, key: str) -> bytes | None:
        """Return the stored bytes, or None when absent."""
        ...

    def set(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...


class MemoryStore:
    """Process-local store. Contents are lost when the process exits."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = value


_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


class FileStore:
    """One file per key inside a directory.

    Args:
        directory: Where files are written. Created on first write.
    """

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        # Readable prefix plus a digest so distinct keys never collide.
        digest = hashlib.sha256(key.encode()).hexdigest()[:16]
        stem = _UNSAFE.sub("_", key)[:64]
        return self._directory / f"{stem}-{digest}.json"

    def get(self, key: str) -> bytes | None:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError:
            logger.warning("Could not read %s", path, exc_info=True)
            return None

    def set(self, key: str, value: bytes) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_bytes(value)
        tmp.replace(path)
