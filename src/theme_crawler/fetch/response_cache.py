"""
Response Cache - Persistent URL -> response text store.

The whole store is loaded once at startup and written back as a single
JSON object at checkpoints, so a later run resumes without re-fetching.
"""

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from ..exceptions import InvariantError, CacheCorruptError, CacheWriteError


@dataclass
class CacheConfig:
    """Configuration for the response cache."""
    cache_path: str = "cache.json"


class ResponseCache:
    """
    In-memory URL -> text store backed by one JSON file.

    store/query are in-memory and safe under concurrent callers;
    load/save/clear touch the backing file.
    """

    def __init__(self, config: Optional[CacheConfig] = None):
        self.config = config or CacheConfig()
        self.path = Path(self.config.cache_path)
        self._storage: Dict[str, str] = {}
        self.lock = threading.Lock()
        self.logger = logging.getLogger(self.__class__.__name__)

    def store(self, key: str, value: str) -> None:
        if not key:
            raise InvariantError("CACHE: store(): empty key")
        if not value:
            raise InvariantError(f"CACHE: store(): empty value for {key}")

        with self.lock:
            self._storage[key] = value

    def query(self, key: str) -> Optional[str]:
        if not key:
            raise InvariantError("CACHE: query(): empty key")

        with self.lock:
            return self._storage.get(key)

    def load(self) -> None:
        """
        Populate the empty store from the cache file.

        Raises:
            InvariantError: If the store already has content
            CacheCorruptError: If the file cannot be read back
        """
        with self.lock:
            if self._storage:
                raise InvariantError("CACHE: load(): contents already exist")

            if not self.path.exists():
                self.logger.info(f"CACHE: cache file does not exist: {self.path}")
                return

            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                raise CacheCorruptError(f"CACHE: cannot read {self.path}: {e}") from e

            if not isinstance(data, dict):
                raise CacheCorruptError(f"CACHE: {self.path} does not hold a JSON object")

            for key, value in data.items():
                if not isinstance(value, str) or not key or not value:
                    raise CacheCorruptError(f"CACHE: {self.path} has an invalid entry for {key!r}")

            self._storage.update(data)
            count = len(self._storage)

        self.logger.info(f"CACHE: {count} entries are loaded from {self.path}")

    def save(self) -> None:
        """
        Write the whole store to the cache file, replacing it atomically.

        Raises:
            InvariantError: If the store is empty
            CacheWriteError: If the file cannot be written
        """
        with self.lock:
            if not self._storage:
                raise InvariantError("CACHE: save(): no content")
            snapshot = dict(self._storage)

        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(directory))
        except OSError as e:
            raise CacheWriteError(f"CACHE: cannot write {self.path}: {e}") from e

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(snapshot, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            self._discard(tmp_name)
            raise CacheWriteError(f"CACHE: cannot write {self.path}: {e}") from e
        except BaseException:
            self._discard(tmp_name)
            raise

        self.logger.info(f"CACHE: {len(snapshot)} entries are saved to {self.path}")

    @staticmethod
    def _discard(tmp_name: str):
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)

    def clear(self) -> None:
        """Remove the cache file if present."""
        if not self.path.exists():
            self.logger.info(f"CACHE: no cache file: {self.path}")
            return

        self.path.unlink()
        self.logger.info(f"CACHE: cache file is removed: {self.path}")

    def __len__(self) -> int:
        with self.lock:
            return len(self._storage)

    def __contains__(self, key: str) -> bool:
        with self.lock:
            return key in self._storage
