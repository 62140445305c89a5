"""In-memory storage backend for tests and ephemeral runs."""

import itertools
import threading

from ..models.book import Book
from .backend import StaleRecordError, StorageBackend


class MemoryBackend(StorageBackend):
    """
    Simple in-memory store. No persistence.

    A single lock makes each operation atomic. Records are copied on the
    way in and out so callers never hold a reference to stored state.
    """

    def __init__(self):
        # Structure: {book_id: Book}
        self._store: dict[int, Book] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def insert(self, record: Book) -> int:
        with self._lock:
            book_id = next(self._ids)
            self._store[book_id] = record.model_copy(update={"id": book_id, "version": 0})
            return book_id

    def fetch(self, book_id: int) -> Book | None:
        with self._lock:
            stored = self._store.get(book_id)
            return stored.model_copy() if stored is not None else None

    def fetch_all(self) -> list[Book]:
        with self._lock:
            return [self._store[key].model_copy() for key in sorted(self._store)]

    def update(self, book_id: int, record: Book) -> Book | None:
        with self._lock:
            stored = self._store.get(book_id)
            if stored is None:
                return None
            if stored.version != record.version:
                raise StaleRecordError(book_id, record.version)

            updated = record.model_copy(update={"id": book_id, "version": stored.version + 1})
            self._store[book_id] = updated
            return updated.model_copy()

    def remove(self, book_id: int) -> bool:
        with self._lock:
            return self._store.pop(book_id, None) is not None
