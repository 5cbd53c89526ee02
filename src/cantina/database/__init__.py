"""Database layer for cantina application."""

from cantina.database.base import Database
from cantina.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
