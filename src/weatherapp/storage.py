"""Durable key/value storage for weatherapp.

PreferencesStore keeps a flat mapping of string keys to JSON scalars in a
single JSON file, the desktop counterpart of a mobile preferences file.
Each write replaces the file atomically, and a batch of keys passed to
``put_all`` lands in the same write.

Storage layout::

    cache_dir/
    └── weather_prefs.json   {"cached_weather": "...", "cache_timestamp": 1700000000000,
                              "last_location": "35.68,139.69"}

Example:
    >>> from pathlib import Path
    >>> store = PreferencesStore(Path.home() / ".cache" / "weatherapp")
    >>> store.put_all({"last_location": "35.68,139.69"})
    >>> store.get("last_location")
    '35.68,139.69'
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional

from .exceptions import WeatherStorageError
from .types import PREFERENCES_FILE_NAME

logger = logging.getLogger(__name__)


class PreferencesStore:
    """JSON-file backed preferences store.

    Reads never raise: a missing, unreadable or malformed file reads as
    an empty mapping. Writes raise WeatherStorageError on failure.

    Calls may come from worker threads (the view model offloads storage
    with ``asyncio.to_thread``), so read-modify-write cycles are guarded
    by a lock.

    Args:
        directory: Directory holding the preferences file. Created on the
            first write.
        file_name: Name of the preferences file.

    Attributes:
        path: Full path to the preferences file.
    """

    def __init__(self, directory: Path, file_name: str = PREFERENCES_FILE_NAME) -> None:
        self.path = Path(directory) / file_name
        self._lock = threading.Lock()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read preferences {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring preferences {self.path}: top level is not a mapping")
            return {}
        return data

    def _write(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=".prefs-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            logger.error(f"Failed to write preferences {self.path}: {e}")
            raise WeatherStorageError(f"Failed to write preferences: {e}") from e

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Return the value stored under ``key``, or ``default``."""
        with self._lock:
            return self._read().get(key, default)

    def get_many(self, *keys: str) -> dict[str, Any]:
        """Return the stored values for ``keys`` from a single read.

        Keys that are not stored are left out of the result.
        """
        with self._lock:
            data = self._read()
        return {key: data[key] for key in keys if key in data}

    def put_all(self, values: dict[str, Any]) -> None:
        """Store several keys in one atomic write.

        Args:
            values: Mapping of keys to JSON-serializable values.

        Raises:
            WeatherStorageError: If the file cannot be written.
        """
        with self._lock:
            data = self._read()
            data.update(values)
            self._write(data)

    def remove(self, *keys: str) -> None:
        """Delete the given keys in one atomic write. Missing keys are ignored.

        Raises:
            WeatherStorageError: If the file cannot be written.
        """
        with self._lock:
            data = self._read()
            if not any(key in data for key in keys):
                return
            for key in keys:
                data.pop(key, None)
            self._write(data)
