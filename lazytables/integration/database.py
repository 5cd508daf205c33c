"""Database adapter boundary consumed by the UI panels."""
from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, List, Protocol, TypeVar

from lazytables.core.connections import ConnectionDescriptor
from lazytables.utils.errors import DatabaseError
from lazytables.utils.logging import get_logger

logger = get_logger(__name__)

_LIMIT_RE = re.compile(r"\blimit\s+(\d+)", re.IGNORECASE)
_FROM_RE = re.compile(r"\bfrom\s+([\w.]+)", re.IGNORECASE)

T = TypeVar("T")


@dataclass
class QueryResult:
    """Structure describing a query outcome."""

    columns: List[str] = field(default_factory=list)
    rows: List[List[Any]] = field(default_factory=list)
    message: str = ""


class DatabaseAdapter(Protocol):
    """Operations the panels need from a database backend."""

    async def list_databases(self, connection: ConnectionDescriptor) -> List[str]:
        ...

    async def list_tables(self, connection: ConnectionDescriptor, database: str) -> List[str]:
        ...

    async def execute_query(self, connection: ConnectionDescriptor, sql: str) -> QueryResult:
        ...


class MockDatabaseAdapter:
    """In-memory adapter returning deterministic sample data.

    ``latency`` delays every call so the UI can be exercised with operations
    that are genuinely outstanding while input keeps flowing.
    """

    SAMPLE_DATABASES = {
        "postgres": ["postgres", "app_db", "analytics"],
        "mysql": ["mysql", "app_db", "inventory"],
        "sqlite": ["main"],
    }
    TABLE_SUFFIXES = ("users", "products", "orders", "categories")

    def __init__(self, *, latency: float = 0.0, default_rows: int = 3) -> None:
        self.latency = latency
        self.default_rows = default_rows

    async def _pause(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)

    async def list_databases(self, connection: ConnectionDescriptor) -> List[str]:
        await self._pause()
        databases = list(self.SAMPLE_DATABASES.get(connection.kind, []))
        if connection.database and connection.database not in databases:
            databases.insert(0, connection.database)
        return databases

    async def list_tables(self, connection: ConnectionDescriptor, database: str) -> List[str]:
        await self._pause()
        if not database:
            raise DatabaseError("No database selected")
        return [f"{database}_{suffix}" for suffix in self.TABLE_SUFFIXES]

    async def execute_query(self, connection: ConnectionDescriptor, sql: str) -> QueryResult:
        await self._pause()
        statement = sql.strip().rstrip(";")
        if not statement:
            raise DatabaseError("Query is empty")
        logger.debug("executing mock query on %s", connection.id)
        verb = statement.split(None, 1)[0].lower()
        if verb not in {"select", "with", "show", "describe"}:
            return QueryResult(message="Query OK, 0 rows affected")
        limit_match = _LIMIT_RE.search(statement)
        count = int(limit_match.group(1)) if limit_match else self.default_rows
        source_match = _FROM_RE.search(statement)
        source = source_match.group(1) if source_match else "Row"
        rows = [[index, f"{source} {index}", index * 100] for index in range(1, count + 1)]
        noun = "row" if count == 1 else "rows"
        return QueryResult(columns=["id", "name", "value"], rows=rows, message=f"{count} {noun} returned")


async def with_timeout(call: Awaitable[T], seconds: float, operation: str) -> T:
    """Await an adapter call, raising :class:`DatabaseError` after ``seconds``."""

    try:
        return await asyncio.wait_for(call, timeout=seconds)
    except asyncio.TimeoutError as exc:
        raise DatabaseError(f"{operation} timed out after {seconds:g}s") from exc


__all__ = ["DatabaseAdapter", "MockDatabaseAdapter", "QueryResult", "with_timeout"]
