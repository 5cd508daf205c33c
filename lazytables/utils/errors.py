"""Custom exceptions used across LazyTables."""
from __future__ import annotations


class LazyTablesError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(LazyTablesError):
    """Raised when configuration loading or validation fails."""


class DatabaseError(LazyTablesError):
    """Raised when a database adapter cannot complete an operation."""


class ConnectionStoreError(LazyTablesError):
    """Raised when saved connections cannot be read or written."""


__all__ = [
    "LazyTablesError",
    "ConfigurationError",
    "DatabaseError",
    "ConnectionStoreError",
]
