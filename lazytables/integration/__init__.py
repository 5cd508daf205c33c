"""Integration subsystems for LazyTables."""

from __future__ import annotations

from lazytables.integration.database import DatabaseAdapter, MockDatabaseAdapter, QueryResult, with_timeout

__all__ = [
    "DatabaseAdapter",
    "MockDatabaseAdapter",
    "QueryResult",
    "with_timeout",
]
