"""Database layer for fxdesk application."""

from fxdesk.database.base import Database, RowFilter, StorageError
from fxdesk.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "RowFilter", "StorageError", "create_database", "create_sqlite_database"]
