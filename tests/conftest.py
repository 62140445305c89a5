"""Test configuration and fixtures for the Book Ledger.

Every test gets a freshly constructed store, seeded explicitly:
1. Isolated storage - a new in-memory SQLite database or MemoryBackend per test
2. Backend parametrization - ledger behavior is checked against both backends
3. Configuration isolation - global config and ledger are reset after each test
"""

import os
from collections.abc import Generator
from pathlib import Path

import pytest

from book_ledger.config import LedgerConfig, reset_config
from book_ledger.database import DatabaseManager, MemoryBackend, SQLAlchemyBackend
from book_ledger.database.backend import StorageBackend
from book_ledger.ledger import BookLedger, reset_ledger
from book_ledger.models import Book

# === Storage Fixtures ===


@pytest.fixture
def db_manager() -> Generator[DatabaseManager, None, None]:
    """Provide a DatabaseManager on a private in-memory SQLite database."""
    manager = DatabaseManager("sqlite://")
    manager.init_database()
    yield manager
    manager.close()


@pytest.fixture
def file_db_manager(tmp_path: Path) -> Generator[DatabaseManager, None, None]:
    """Provide a DatabaseManager on a file database (needed for multi-threaded tests)."""
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'test_ledger.db'}", busy_timeout=30.0)
    manager.init_database()
    yield manager
    manager.close()


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def sql_backend(db_manager: DatabaseManager) -> SQLAlchemyBackend:
    return SQLAlchemyBackend(db_manager)


@pytest.fixture(params=["memory", "sqlalchemy"])
def backend(request) -> StorageBackend:
    """Provide each storage backend in turn."""
    if request.param == "memory":
        return request.getfixturevalue("memory_backend")
    return request.getfixturevalue("sql_backend")


@pytest.fixture
def ledger(backend: StorageBackend) -> BookLedger:
    """Provide a ledger with default lending rules (no return bound)."""
    return BookLedger(backend, max_retries=10, enforce_return_bound=False)


# === Seeding Helpers ===


@pytest.fixture
def seed_book(backend: StorageBackend):
    """Insert a book straight into the backend, bypassing ledger validation."""

    def _seed(
        title: str = "Book 1",
        author: str = "Author 1",
        copies: int = 3,
        available_copies: int | None = None,
    ) -> Book:
        record = Book(
            title=title,
            author=author,
            copies=copies,
            available_copies=copies if available_copies is None else available_copies,
        )
        book_id = backend.insert(record)
        return backend.fetch(book_id)

    return _seed


# === Configuration Fixtures ===


@pytest.fixture
def test_config(tmp_path: Path) -> Generator[LedgerConfig, None, None]:
    """Provide a test-specific configuration on a temporary database."""
    reset_config()

    config = LedgerConfig(
        server_name="test-book-ledger",
        server_version="0.0.1-test",
        database_path=tmp_path / "ledger.db",
        debug=True,
        log_level="DEBUG",
        max_transition_retries=5,
    )

    yield config

    reset_config()


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Provide a clean environment without BOOK_LEDGER_* variables."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("BOOK_LEDGER_"):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


# === Cleanup Fixtures ===


@pytest.fixture(autouse=True)
def cleanup_after_test():
    """Reset process-wide configuration and ledger after each test."""
    yield

    reset_config()
    reset_ledger()
