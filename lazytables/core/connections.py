"""Saved database connection descriptors and their JSON-backed store."""
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from lazytables.utils.errors import ConnectionStoreError
from lazytables.utils.logging import get_logger

logger = get_logger(__name__)

ConnectionKind = Literal["postgres", "mysql", "sqlite"]

DEFAULT_PORTS = {"postgres": 5432, "mysql": 3306}


class ConnectionDescriptor(BaseModel):
    """Everything needed to open a connection, minus the live handle."""

    id: str
    name: str
    kind: ConnectionKind = "postgres"
    host: str = "localhost"
    port: Optional[int] = None
    username: str = ""
    password: Optional[str] = Field(default=None, repr=False)
    database: str = ""

    def describe(self) -> str:
        """Return the one-line summary shown under the connection name."""

        if self.kind == "sqlite":
            return f"SQLite: {self.database}"
        port = self.port or DEFAULT_PORTS.get(self.kind)
        return f"{self.kind}: {self.username}@{self.host}:{port}"


class ConnectionStore:
    """Synchronous load/save of connection descriptors.

    The file is a JSON list of descriptor objects. Writes go through a
    temporary file that replaces the original so an interrupted save never
    leaves a truncated store behind.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load_connections(self) -> List[ConnectionDescriptor]:
        if not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8") or "[]")
            return [ConnectionDescriptor.model_validate(item) for item in payload]
        except (OSError, json.JSONDecodeError, ValidationError, TypeError) as exc:
            raise ConnectionStoreError(f"Could not read connections from {self.path}: {exc}") from exc

    def get_connection(self, connection_id: str) -> Optional[ConnectionDescriptor]:
        for item in self.load_connections():
            if item.id == connection_id:
                return item
        return None

    def save_connection(self, descriptor: ConnectionDescriptor) -> None:
        """Insert ``descriptor`` or replace the stored one with the same id."""

        connections = [item for item in self.load_connections() if item.id != descriptor.id]
        connections.append(descriptor)
        self._write(connections)
        logger.info("connection saved", extra={"path": str(self.path)})

    def delete_connection(self, connection_id: str) -> bool:
        connections = self.load_connections()
        remaining = [item for item in connections if item.id != connection_id]
        if len(remaining) == len(connections):
            return False
        self._write(remaining)
        return True

    def next_id(self) -> str:
        used = {item.id for item in self.load_connections()}
        index = len(used) + 1
        while f"conn_{index}" in used:
            index += 1
        return f"conn_{index}"

    def _write(self, connections: List[ConnectionDescriptor]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(".tmp")
            tmp.write_text(
                json.dumps([item.model_dump() for item in connections], indent=2),
                encoding="utf-8",
            )
            tmp.replace(self.path)
        except OSError as exc:
            raise ConnectionStoreError(f"Could not write connections to {self.path}: {exc}") from exc


__all__ = ["ConnectionDescriptor", "ConnectionKind", "ConnectionStore", "DEFAULT_PORTS"]
