"""
Storage package for the Book Ledger.

This package provides:
- The StorageBackend contract the ledger consumes (backend.py)
- SQLAlchemy schema, session management and backend (schema.py, session.py,
  sql_backend.py)
- An in-memory backend for tests and ephemeral runs (memory_backend.py)
"""

from .backend import StaleRecordError, StorageBackend, StorageError
from .memory_backend import MemoryBackend
from .schema import Base
from .schema import Book as BookRow
from .session import DatabaseManager
from .sql_backend import SQLAlchemyBackend

__all__ = [
    "Base",
    "BookRow",
    "DatabaseManager",
    "MemoryBackend",
    "SQLAlchemyBackend",
    "StaleRecordError",
    "StorageBackend",
    "StorageError",
]
