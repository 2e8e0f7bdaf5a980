"""Snapshot storage implementations for the reading state store."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from ..domain.interfaces.snapshot_storage import SnapshotStorage

logger = logging.getLogger(__name__)


class InMemorySnapshotStorage(SnapshotStorage):
    """Keeps snapshots in a dictionary for the lifetime of the process."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._snapshots: Dict[str, Any] = dict(initial or {})

    def load(self, key: str) -> Optional[Any]:
        return self._snapshots.get(key)

    def save(self, key: str, data: dict[str, Any]) -> None:
        self._snapshots[key] = data


class JsonFileSnapshotStorage(SnapshotStorage):
    """Stores each snapshot as ``<directory>/<key>.json``.

    Writes go to a temporary file that is then renamed over the target, so
    a crash mid-write leaves the previous snapshot in place.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[Any]:
        """Read and decode a snapshot.

        Returns:
            The decoded JSON payload, or None when the file is missing or is
            not valid JSON.
        """
        path = self._path(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable snapshot {path}: {e}")
            return None

    def save(self, key: str, data: dict[str, Any]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
