"""Snapshot storage protocol."""

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class SnapshotStorage(Protocol):
    """Keyed storage for the persisted reading state snapshot."""

    def load(self, key: str) -> Optional[Any]:
        """Read the raw snapshot stored under ``key``.

        Returns:
            The decoded payload, or None when nothing is stored. The payload
            is not validated here.
        """
        ...

    def save(self, key: str, data: dict[str, Any]) -> None:
        """Write a snapshot under ``key``.

        Raises:
            OSError: If the snapshot cannot be written.
        """
        ...
