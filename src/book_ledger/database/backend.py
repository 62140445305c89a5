"""
Storage backend contract consumed by the Book Ledger.

The ledger never talks to a database directly. It composes these five
single-record operations, each of which a backend must make atomic:

- insert(record) -> id
- fetch(id) -> record or None
- fetch_all() -> records ordered by id
- update(id, record) -> stored record, or None when the id is absent
- remove(id) -> True, or False when the id is absent

``update`` is a compare-and-set on ``record.version``: it only applies when
the stored version still equals the caller's, and bumps the version when it
does. A lost race raises ``StaleRecordError`` so the caller can re-read and
retry. That is the primitive the ledger builds its serializable lend/return
transitions on.
"""

from abc import ABC, abstractmethod

from ..models.book import Book


class StorageError(Exception):
    """Raised when the underlying store fails (I/O, driver or schema errors)."""


class StaleRecordError(StorageError):
    """Raised when an update carries a version that is no longer current."""

    def __init__(self, book_id: int, expected_version: int):
        super().__init__(f"Book {book_id} changed since version {expected_version}")
        self.book_id = book_id
        self.expected_version = expected_version


class StorageBackend(ABC):
    """Abstract transactional, key-indexed store of Book records."""

    @abstractmethod
    def insert(self, record: Book) -> int:
        """Store a new record and return its freshly assigned id."""

    @abstractmethod
    def fetch(self, book_id: int) -> Book | None:
        """Return the stored record, or None if no record has that id."""

    @abstractmethod
    def fetch_all(self) -> list[Book]:
        """Return every stored record ordered by id."""

    @abstractmethod
    def update(self, book_id: int, record: Book) -> Book | None:
        """
        Replace a record if its version still matches.

        Returns:
            The stored record with its version bumped, or None if absent

        Raises:
            StaleRecordError: If the stored version differs from record.version
        """

    @abstractmethod
    def remove(self, book_id: int) -> bool:
        """Delete a record. Returns False if no record has that id."""
